import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.fines.models import Fine
from apps.teams.models import DisputeMode, Team, TeamMembership, TeamRole, generate_invite_code


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
def offender(db):
    """Create and return the fined member who disputes."""
    return _user('offender@example.com', 'Offender')


@pytest.fixture
def voter(db):
    return _user('voter@example.com', 'Voter')


@pytest.fixture
def second_voter(db):
    return _user('voter2@example.com', 'Second Voter')


@pytest.fixture
def outsider(db):
    return _user('outsider@example.com', 'Outsider')


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def treasurer_client(treasurer_user):
    return _client_for(treasurer_user)


@pytest.fixture
def offender_client(offender):
    return _client_for(offender)


@pytest.fixture
def voter_client(voter):
    return _client_for(voter)


@pytest.fixture
def outsider_client(outsider):
    return _client_for(outsider)


def _team(admin_user, members, **settings):
    team = Team.objects.create(
        name='Sunday League',
        created_by=admin_user,
        invite_code=generate_invite_code(),
        **settings
    )
    TeamMembership.objects.create(team=team, user=admin_user, role=TeamRole.ADMIN)
    for user, role in members:
        TeamMembership.objects.create(team=team, user=user, role=role)
    return team


@pytest.fixture
def team(db, admin_user, treasurer_user, offender, voter, second_voter):
    """Team deciding disputes by admin/treasurer decision."""
    return _team(
        admin_user,
        [
            (treasurer_user, TeamRole.TREASURER),
            (offender, TeamRole.MEMBER),
            (voter, TeamRole.MEMBER),
            (second_voter, TeamRole.MEMBER),
        ],
        dispute_enabled=True,
        dispute_mode=DisputeMode.SIMPLE,
    )


@pytest.fixture
def community_team(team):
    """Same team switched to community voting with a threshold of 2."""
    team.dispute_mode = DisputeMode.COMMUNITY
    team.dispute_votes_required = 2
    team.save()
    return team


@pytest.fixture
def fine(team, admin_user, offender):
    """Create and return an unpaid fine of the offender."""
    return Fine.objects.create(
        team=team,
        offender=offender,
        issued_by=admin_user,
        custom_label='Late to training',
        amount=Decimal('10.00'),
    )
