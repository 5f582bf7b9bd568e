import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status
from apps.fines.models import Expense, Fine, FineRule, FineStatus, Payment
from apps.teams.models import Team, TeamMembership


# =============================================================================
# Rule Catalog Endpoints
# =============================================================================

@pytest.mark.django_db
class TestRuleEndpoints:
    """Tests for /api/teams/{team_id}/rules/"""

    def test_list_rules(self, player_client, team, late_rule):
        url = reverse('fines:rule-list', kwargs={'team_id': team.id})
        response = player_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['label'] == 'Late to training'
        assert response.data[0]['amount'] == '5.00'

    def test_create_rule_as_admin(self, admin_client, team):
        url = reverse('fines:rule-list', kwargs={'team_id': team.id})
        data = {'label': 'Phone at dinner', 'amount': '2.50', 'category': 'behavior'}
        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert FineRule.objects.filter(team=team, label='Phone at dinner').exists()

    def test_create_rule_as_member_forbidden(self, player_client, team):
        url = reverse('fines:rule-list', kwargs={'team_id': team.id})
        data = {'label': 'Sneaky rule', 'amount': '2.50'}
        response = player_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['error'] == 'FORBIDDEN'

    def test_create_rule_label_too_short(self, admin_client, team):
        url = reverse('fines:rule-list', kwargs={'team_id': team.id})
        response = admin_client.post(url, {'label': 'x', 'amount': '2.50'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'label' in response.data['details']

    def test_deactivate_rule(self, admin_client, team, late_rule):
        url = reverse('fines:rule-detail', kwargs={'team_id': team.id, 'rule_id': late_rule.id})
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        late_rule.refresh_from_db()
        assert late_rule.is_active is False

        list_url = reverse('fines:rule-list', kwargs={'team_id': team.id})
        assert admin_client.get(list_url).data == []
        assert len(admin_client.get(list_url, {'include_inactive': 'true'}).data) == 1

    def test_update_rule(self, admin_client, team, late_rule):
        url = reverse('fines:rule-detail', kwargs={'team_id': team.id, 'rule_id': late_rule.id})
        response = admin_client.patch(url, {'amount': '6.00'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['amount'] == '6.00'

    def test_rules_of_foreign_team(self, outsider_client, team):
        url = reverse('fines:rule-list', kwargs={'team_id': team.id})
        response = outsider_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Fine Endpoints
# =============================================================================

@pytest.mark.django_db
class TestFineEndpoints:
    """Tests for /api/teams/{team_id}/fines/"""

    def test_issue_fine_from_rule(self, admin_client, team, player, late_rule):
        url = reverse('fines:fine-list', kwargs={'team_id': team.id})
        data = {'offender_id': str(player.id), 'rule_id': str(late_rule.id)}
        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['label'] == 'Late to training'
        assert response.data['outstanding'] == '5.00'
        assert response.data['status'] == FineStatus.UNPAID

    def test_issue_custom_fine_requires_amount(self, admin_client, team, player):
        url = reverse('fines:fine-list', kwargs={'team_id': team.id})
        data = {'offender_id': str(player.id), 'custom_label': 'Wrong kit'}
        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'amount' in response.data['details']

    def test_rule_and_custom_label_rejected(self, admin_client, team, player, late_rule):
        url = reverse('fines:fine-list', kwargs={'team_id': team.id})
        data = {
            'offender_id': str(player.id),
            'rule_id': str(late_rule.id),
            'custom_label': 'Both',
            'amount': '1.00',
        }
        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_issue_fine_to_outsider(self, admin_client, team, outsider, late_rule):
        url = reverse('fines:fine-list', kwargs={'team_id': team.id})
        data = {'offender_id': str(outsider.id), 'rule_id': str(late_rule.id)}
        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'INVALID_OFFENDER'

    def test_batch_all_succeed(self, admin_client, team, player, second_player, late_rule):
        url = reverse('fines:fine-list', kwargs={'team_id': team.id})
        data = {'offender_ids': [str(player.id), str(second_player.id)], 'rule_id': str(late_rule.id)}
        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert len(response.data['fines']) == 2
        assert response.data['failures'] == []

    def test_batch_partial_failure(self, admin_client, team, player, outsider, late_rule):
        url = reverse('fines:fine-list', kwargs={'team_id': team.id})
        data = {'offender_ids': [str(player.id), str(outsider.id)], 'rule_id': str(late_rule.id)}
        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_207_MULTI_STATUS
        assert len(response.data['fines']) == 1
        assert response.data['failures'][0]['offender_id'] == str(outsider.id)
        assert response.data['failures'][0]['error'] == 'INVALID_OFFENDER'

    def test_batch_all_fail(self, admin_client, team, outsider, late_rule):
        url = reverse('fines:fine-list', kwargs={'team_id': team.id})
        data = {'offender_ids': [str(outsider.id)], 'rule_id': str(late_rule.id)}
        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['fines'] == []

    def test_list_fines_filtered(self, player_client, team, player, second_player, make_fine):
        make_fine(player, '5.00')
        make_fine(second_player, '7.00')
        url = reverse('fines:fine-list', kwargs={'team_id': team.id})

        response = player_client.get(url, {'offender_id': str(player.id)})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['amount'] == '5.00'

    def test_list_fines_invalid_status(self, player_client, team):
        url = reverse('fines:fine-list', kwargs={'team_id': team.id})
        response = player_client.get(url, {'status': 'overdue'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_fine_detail_of_other_team_is_404(self, admin_client, team, admin_user, player):
        other_team = Team.objects.create(name='Rivals', created_by=admin_user)
        foreign = Fine.objects.create(
            team=other_team, offender=player, issued_by=admin_user,
            custom_label='Elsewhere', amount=Decimal('5.00'),
        )
        url = reverse('fines:fine-detail', kwargs={'team_id': team.id, 'fine_id': foreign.id})
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error'] == 'FINE_NOT_FOUND'

    def test_delete_fine_as_admin(self, admin_client, team, player, make_fine):
        fine = make_fine(player, '5.00')
        url = reverse('fines:fine-detail', kwargs={'team_id': team.id, 'fine_id': fine.id})
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Fine.objects.filter(id=fine.id).exists()

    def test_delete_fine_as_treasurer_forbidden(self, treasurer_client, team, player, make_fine):
        fine = make_fine(player, '5.00')
        url = reverse('fines:fine-detail', kwargs={'team_id': team.id, 'fine_id': fine.id})
        response = treasurer_client.delete(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Payment Endpoints
# =============================================================================

@pytest.mark.django_db
class TestPaymentEndpoints:

    def test_pay_fine(self, treasurer_client, team, player, make_fine):
        fine = make_fine(player, '10.00')
        url = reverse('fines:pay-fine', kwargs={'team_id': team.id, 'fine_id': fine.id})
        response = treasurer_client.post(url, {'amount': '12.00', 'method': 'cash'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['total_applied'] == '12.00'
        assert response.data['credit_added'] == '2.00'
        assert response.data['fines'][0]['status'] == FineStatus.PAID
        assert len(response.data['payments']) == 2

    def test_pay_member_oldest_first(self, treasurer_client, team, player, make_fine):
        older = make_fine(player, '5.00', days_ago=2)
        make_fine(player, '5.00', days_ago=1)
        url = reverse('fines:pay-member', kwargs={'team_id': team.id, 'user_id': player.id})
        response = treasurer_client.post(url, {'amount': '5.00'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['fines'][0]['id'] == str(older.id)

    def test_pay_member_without_open_fines(self, treasurer_client, team, player):
        url = reverse('fines:pay-member', kwargs={'team_id': team.id, 'user_id': player.id})
        response = treasurer_client.post(url, {'amount': '5.00'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'NO_UNPAID_FINES'

    def test_pay_already_paid_fine(self, treasurer_client, team, player, make_fine):
        fine = make_fine(player, '5.00')
        url = reverse('fines:pay-fine', kwargs={'team_id': team.id, 'fine_id': fine.id})
        treasurer_client.post(url, {'amount': '5.00'}, format='json')

        response = treasurer_client.post(url, {'amount': '5.00'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'ALREADY_PAID'

    def test_member_cannot_record_payment(self, player_client, team, player, make_fine):
        fine = make_fine(player, '5.00')
        url = reverse('fines:pay-fine', kwargs={'team_id': team.id, 'fine_id': fine.id})
        response = player_client.post(url, {'amount': '5.00'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not Payment.objects.exists()

    def test_zero_amount_rejected(self, treasurer_client, team, player, make_fine):
        fine = make_fine(player, '5.00')
        url = reverse('fines:pay-fine', kwargs={'team_id': team.id, 'fine_id': fine.id})
        response = treasurer_client.post(url, {'amount': '0.00'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'VALIDATION_ERROR'

    def test_payment_list(self, treasurer_client, team, player, second_player, make_fine):
        make_fine(player, '5.00')
        make_fine(second_player, '5.00')
        for payer in (player, second_player):
            url = reverse('fines:pay-member', kwargs={'team_id': team.id, 'user_id': payer.id})
            treasurer_client.post(url, {'amount': '5.00'}, format='json')

        url = reverse('fines:payment-list', kwargs={'team_id': team.id})
        response = treasurer_client.get(url, {'payer_id': str(player.id)})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['is_credit'] is False

    def test_payment_list_invalid_payer(self, treasurer_client, team):
        url = reverse('fines:payment-list', kwargs={'team_id': team.id})
        response = treasurer_client.get(url, {'payer_id': 'not-a-uuid'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_credit_visible_on_members(self, treasurer_client, team, player, make_fine):
        make_fine(player, '5.00')
        url = reverse('fines:pay-member', kwargs={'team_id': team.id, 'user_id': player.id})
        treasurer_client.post(url, {'amount': '8.00'}, format='json')

        assert TeamMembership.objects.get(team=team, user=player).credit == Decimal('3.00')


# =============================================================================
# Expense Endpoints
# =============================================================================

@pytest.mark.django_db
class TestExpenseEndpoints:

    def test_record_expense(self, treasurer_client, team):
        url = reverse('fines:expense-list', kwargs={'team_id': team.id})
        data = {'amount': '25.00', 'description': 'Team dinner', 'category': 'food'}
        response = treasurer_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert Expense.objects.filter(team=team).count() == 1

    def test_list_expenses(self, player_client, team, admin_user):
        Expense.objects.create(
            team=team, amount=Decimal('9.00'), description='Balls', recorded_by=admin_user
        )
        url = reverse('fines:expense-list', kwargs={'team_id': team.id})
        response = player_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1

    def test_closed_team_rejects_expense(self, treasurer_client, team):
        team.is_closed = True
        team.save()
        url = reverse('fines:expense-list', kwargs={'team_id': team.id})
        data = {'amount': '25.00', 'description': 'Team dinner'}
        response = treasurer_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'TEAM_CLOSED'

    def test_delete_expense_as_admin(self, admin_client, team, admin_user):
        expense = Expense.objects.create(
            team=team, amount=Decimal('9.00'), description='Balls', recorded_by=admin_user
        )
        url = reverse('fines:expense-detail', kwargs={'team_id': team.id, 'expense_id': expense.id})
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Expense.objects.filter(id=expense.id).exists()
