import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User
from apps.teams.models import TeamMembership


# =============================================================================
# Registration Tests
# =============================================================================

@pytest.mark.django_db
class TestRegistration:
    """Tests for POST /api/auth/register/"""

    def test_register_success(self, api_client):
        """Successfully register a new user."""
        url = reverse('accounts:register')
        data = {
            'email': 'newuser@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
            'display_name': 'New User',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']
        assert response.data['user']['display_name'] == 'New User'
        assert User.objects.filter(email='newuser@example.com').exists()

    def test_register_without_display_name(self, api_client):
        """Display name is optional."""
        url = reverse('accounts:register')
        data = {
            'email': 'minimal@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        assert User.objects.get(email='minimal@example.com').get_display_name() == 'minimal'

    def test_register_duplicate_email(self, api_client, user):
        """Cannot register with an existing email, regardless of case."""
        url = reverse('accounts:register')
        data = {
            'email': user.email.upper(),
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'REGISTRATION_FAILED'

    def test_register_password_mismatch(self, api_client):
        """Registration fails when passwords don't match."""
        url = reverse('accounts:register')
        data = {
            'email': 'mismatch@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'DifferentPass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'VALIDATION_ERROR'
        assert 'password_confirm' in response.data['details']

    def test_register_weak_password(self, api_client):
        """Registration fails with weak password."""
        url = reverse('accounts:register')
        data = {
            'email': 'weak@example.com',
            'password': '123',
            'password_confirm': '123',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not User.objects.filter(email='weak@example.com').exists()

    def test_register_invalid_email(self, api_client):
        """Registration fails with invalid email format."""
        url = reverse('accounts:register')
        data = {
            'email': 'not-an-email',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, user):
        """Successfully login with valid credentials."""
        url = reverse('accounts:login')
        response = api_client.post(url, {
            'email': user.email,
            'password': 'TestPass123!',
        })

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data['tokens']
        assert response.data['user']['email'] == user.email

    def test_login_wrong_password(self, api_client, user):
        """Login fails with wrong password."""
        url = reverse('accounts:login')
        response = api_client.post(url, {
            'email': user.email,
            'password': 'WrongPass123!',
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['error'] == 'INVALID_CREDENTIALS'

    def test_login_nonexistent_user(self, api_client):
        """Login fails for an unknown email."""
        url = reverse('accounts:login')
        response = api_client.post(url, {
            'email': 'nobody@example.com',
            'password': 'TestPass123!',
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive_user(self, api_client, user_inactive):
        """Deactivated accounts cannot log in."""
        url = reverse('accounts:login')
        response = api_client.post(url, {
            'email': user_inactive.email,
            'password': 'TestPass123!',
        })

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['error'] == 'FORBIDDEN'

    def test_login_updates_last_login(self, api_client, user):
        """Successful login stamps last_login."""
        assert user.last_login is None

        url = reverse('accounts:login')
        api_client.post(url, {'email': user.email, 'password': 'TestPass123!'})

        user.refresh_from_db()
        assert user.last_login is not None

    def test_login_lists_teams(self, api_client, user, team):
        url = reverse('accounts:login')
        response = api_client.post(url, {'email': 'TestUser@Example.com ', 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_200_OK
        assert [entry['team_id'] for entry in response.data['teams']] == [str(team.id)]


# =============================================================================
# Current User Tests
# =============================================================================

@pytest.mark.django_db
class TestCurrentUser:
    """Tests for /api/auth/me/"""

    def test_get_current_user(self, authenticated_client, user):
        url = reverse('accounts:current-user')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['email'] == user.email
        assert response.data['user']['id'] == str(user.id)
        assert response.data['teams'] == []

    def test_get_current_user_lists_teams(self, authenticated_client, team):
        url = reverse('accounts:current-user')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['teams']) == 1
        entry = response.data['teams'][0]
        assert entry['team_id'] == str(team.id)
        assert entry['team_name'] == 'Sunday League'
        assert entry['role'] == 'treasurer'
        assert entry['credit'] == '4.50'

    def test_get_current_user_hides_left_teams(self, authenticated_client, user, team):
        TeamMembership.objects.filter(team=team, user=user).update(is_deleted=True)

        response = authenticated_client.get(reverse('accounts:current-user'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['teams'] == []

    def test_update_display_name(self, authenticated_client, user):
        url = reverse('accounts:current-user')
        response = authenticated_client.patch(url, {'display_name': '  Keeper  '}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['display_name'] == 'Keeper'
        user.refresh_from_db()
        assert user.display_name == 'Keeper'

    def test_update_display_name_blank(self, authenticated_client, user):
        url = reverse('accounts:current-user')
        response = authenticated_client.patch(url, {'display_name': '   '}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        user.refresh_from_db()
        assert user.display_name == 'Test User'

    def test_get_current_user_unauthenticated(self, api_client):
        url = reverse('accounts:current-user')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Model Tests
# =============================================================================

@pytest.mark.django_db
class TestUserModel:
    """Tests for the User model."""

    def test_create_user_normalizes_email(self):
        user = User.objects.create_user(email='Case@EXAMPLE.com', password='TestPass123!')
        assert user.email == 'Case@example.com'

    def test_create_user_requires_email(self):
        with pytest.raises(ValueError):
            User.objects.create_user(email='', password='TestPass123!')

    def test_create_superuser(self):
        admin = User.objects.create_superuser(email='root@example.com', password='TestPass123!')
        assert admin.is_staff
        assert admin.is_superuser

    def test_display_name_fallback(self, user):
        user.display_name = ''
        assert user.get_display_name() == 'testuser'
        assert str(user) == 'testuser@example.com'
