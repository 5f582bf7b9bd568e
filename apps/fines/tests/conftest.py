import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.fines.models import Fine, FineRule, RuleCategory
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
    return User.objects.create_user(
        email='captain@example.com',
        password='TestPass123!',
        display_name='Captain',
    )


@pytest.fixture
def treasurer_user(db):
    return User.objects.create_user(
        email='treasurer@example.com',
        password='TestPass123!',
        display_name='Treasurer',
    )


@pytest.fixture
def player(db):
    """Create and return the member who gets fined."""
    return User.objects.create_user(
        email='player@example.com',
        password='TestPass123!',
        display_name='Player',
    )


@pytest.fixture
def second_player(db):
    return User.objects.create_user(
        email='player2@example.com',
        password='TestPass123!',
        display_name='Second Player',
    )


@pytest.fixture
def outsider(db):
    """Create and return a user not in the team."""
    return User.objects.create_user(
        email='outsider@example.com',
        password='TestPass123!',
        display_name='Outsider',
    )


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def treasurer_client(treasurer_user):
    return _client_for(treasurer_user)


@pytest.fixture
def player_client(player):
    return _client_for(player)


@pytest.fixture
def outsider_client(outsider):
    return _client_for(outsider)


@pytest.fixture
def team(db, admin_user, treasurer_user, player, second_player):
    """Team with admin, treasurer and two players."""
    team = Team.objects.create(
        name='Sunday League',
        created_by=admin_user,
        invite_code=generate_invite_code(),
    )
    TeamMembership.objects.create(team=team, user=admin_user, role=TeamRole.ADMIN)
    TeamMembership.objects.create(team=team, user=treasurer_user, role=TeamRole.TREASURER)
    TeamMembership.objects.create(team=team, user=player, role=TeamRole.MEMBER)
    TeamMembership.objects.create(team=team, user=second_player, role=TeamRole.MEMBER)
    return team


@pytest.fixture
def late_rule(team, admin_user):
    """Create and return an active catalog rule."""
    return FineRule.objects.create(
        team=team,
        label='Late to training',
        amount=Decimal('5.00'),
        category=RuleCategory.LATE,
        created_by=admin_user,
    )


@pytest.fixture
def make_fine(team, admin_user):
    """
    Factory for fines with an explicit age so oldest-first ordering is
    deterministic.
    """
    def _make(offender, amount, days_ago=0, label='Custom fine'):
        return Fine.objects.create(
            team=team,
            offender=offender,
            issued_by=admin_user,
            custom_label=label,
            amount=Decimal(amount),
            created_at=timezone.now() - timedelta(days=days_ago),
        )
    return _make
