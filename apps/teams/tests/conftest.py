import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.teams.models import Team, TeamMembership, TeamRole, generate_invite_code


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    """Create and return the team admin."""
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        display_name='Team Admin',
    )


@pytest.fixture
def treasurer_user(db):
    """Create and return the team treasurer."""
    return User.objects.create_user(
        email='treasurer@example.com',
        password='TestPass123!',
        display_name='Team Treasurer',
    )


@pytest.fixture
def member_user(db):
    """Create and return a plain member."""
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        display_name='Team Member',
    )


@pytest.fixture
def other_user(db):
    """Create and return a user not in any team."""
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        display_name='Other User',
    )


@pytest.fixture
def admin_client(admin_user):
    """Return API client authenticated as team admin."""
    return _client_for(admin_user)


@pytest.fixture
def treasurer_client(treasurer_user):
    """Return API client authenticated as treasurer."""
    return _client_for(treasurer_user)


@pytest.fixture
def member_client(member_user):
    """Return API client authenticated as plain member."""
    return _client_for(member_user)


@pytest.fixture
def other_client(other_user):
    """Return API client authenticated as non-member user."""
    return _client_for(other_user)


@pytest.fixture
def team(db, admin_user):
    """Create and return a team with its admin."""
    team = Team.objects.create(
        name='Sunday League',
        sport='football',
        created_by=admin_user,
        invite_code=generate_invite_code(),
    )
    TeamMembership.objects.create(team=team, user=admin_user, role=TeamRole.ADMIN)
    return team


@pytest.fixture
def team_with_members(team, treasurer_user, member_user):
    """Team with admin, treasurer and member."""
    TeamMembership.objects.create(team=team, user=treasurer_user, role=TeamRole.TREASURER)
    TeamMembership.objects.create(team=team, user=member_user, role=TeamRole.MEMBER)
    return team
