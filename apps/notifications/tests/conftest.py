import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.fines.models import Fine
from apps.notifications.models import Notification, NotificationType
from apps.teams.models import Team, TeamMembership, TeamRole, generate_invite_code


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


def _user(email, name):
    return User.objects.create_user(email=email, password='TestPass123!', display_name=name)


@pytest.fixture
def admin_user(db):
    return _user('captain@example.com', 'Captain')


@pytest.fixture
def treasurer_user(db):
    return _user('treasurer@example.com', 'Treasurer')


@pytest.fixture
def player(db):
    return _user('player@example.com', 'Player')


@pytest.fixture
def second_player(db):
    return _user('player2@example.com', 'Second Player')


@pytest.fixture
def outsider(db):
    return _user('outsider@example.com', 'Outsider')


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
def fine(team, admin_user, player):
    """Unpaid 10.00 fine of the player."""
    return Fine.objects.create(
        team=team,
        offender=player,
        issued_by=admin_user,
        custom_label='Late to training',
        amount=Decimal('10.00'),
    )


@pytest.fixture
def make_notification(team):
    """Factory for inbox entries written directly, bypassing the producers."""
    def _make(user, title='Heads up', is_read=False, days_ago=0):
        notification = Notification.objects.create(
            user=user,
            team=team,
            notification_type=NotificationType.FINE_RECEIVED,
            title=title,
            body='Body',
            is_read=is_read,
        )
        if days_ago:
            # created_at is auto_now_add
            notification.created_at = timezone.now() - timedelta(days=days_ago)
            Notification.objects.filter(pk=notification.pk).update(created_at=notification.created_at)
        return notification
    return _make


@pytest.fixture
def api_client():
    return APIClient()
