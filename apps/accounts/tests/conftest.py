from decimal import Decimal

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.teams.models import Team, TeamMembership, TeamRole, generate_invite_code


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a test user."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        display_name='Test User',
    )


@pytest.fixture
def user_inactive(db):
    """Create and return an inactive user."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        display_name='Inactive User',
        is_active=False,
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def team(user):
    """A team the test user belongs to as treasurer, with some banked credit."""
    team = Team.objects.create(
        name='Sunday League',
        created_by=user,
        invite_code=generate_invite_code(),
    )
    TeamMembership.objects.create(
        team=team,
        user=user,
        role=TeamRole.TREASURER,
        credit=Decimal('4.50'),
    )
    return team
