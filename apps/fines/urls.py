from django.urls import path
from . import views

app_name = 'fines'

urlpatterns = [
    # Rule catalog
    # GET    /api/teams/{team_id}/rules/              - List active rules
    # POST   /api/teams/{team_id}/rules/              - Create rule (admin)
    # PATCH  /api/teams/{team_id}/rules/{rule_id}/    - Update rule (admin)
    # DELETE /api/teams/{team_id}/rules/{rule_id}/    - Deactivate rule (admin)
    path('teams/<uuid:team_id>/rules/', views.rule_list, name='rule-list'),
    path('teams/<uuid:team_id>/rules/<uuid:rule_id>/', views.rule_detail, name='rule-detail'),

    # Fines
    # GET    /api/teams/{team_id}/fines/              - List fines
    # POST   /api/teams/{team_id}/fines/              - Issue fine(s)
    # GET    /api/teams/{team_id}/fines/{fine_id}/    - Fine detail
    # DELETE /api/teams/{team_id}/fines/{fine_id}/    - Delete fine (admin)
    path('teams/<uuid:team_id>/fines/', views.fine_list, name='fine-list'),
    path('teams/<uuid:team_id>/fines/<uuid:fine_id>/', views.fine_detail, name='fine-detail'),

    # Payments
    # POST   /api/teams/{team_id}/fines/{fine_id}/payments/    - Pay one fine
    # POST   /api/teams/{team_id}/members/{user_id}/payments/  - Pay member's fines oldest first
    # GET    /api/teams/{team_id}/payments/                    - List payments
    path('teams/<uuid:team_id>/fines/<uuid:fine_id>/payments/', views.pay_fine, name='pay-fine'),
    path('teams/<uuid:team_id>/members/<uuid:user_id>/payments/', views.pay_member, name='pay-member'),
    path('teams/<uuid:team_id>/payments/', views.payment_list, name='payment-list'),

    # Payment methods
    # GET    /api/teams/{team_id}/payment-methods/                 - List configured methods
    # PUT    /api/teams/{team_id}/payment-methods/                 - Create or update a method (admin)
    # DELETE /api/teams/{team_id}/payment-methods/{method_type}/   - Remove a method (admin)
    path('teams/<uuid:team_id>/payment-methods/', views.payment_method_list, name='payment-method-list'),
    path(
        'teams/<uuid:team_id>/payment-methods/<str:method_type>/',
        views.payment_method_detail,
        name='payment-method-detail'
    ),

    # Reminders
    # POST   /api/teams/{team_id}/fines/{fine_id}/reminder/    - Remind of one fine (admin, treasurer)
    # POST   /api/teams/{team_id}/members/{user_id}/reminder/  - Remind of all open fines
    path('teams/<uuid:team_id>/fines/<uuid:fine_id>/reminder/', views.fine_reminder, name='fine-reminder'),
    path(
        'teams/<uuid:team_id>/members/<uuid:user_id>/reminder/',
        views.member_reminder,
        name='member-reminder'
    ),

    # Expenses
    # GET    /api/teams/{team_id}/expenses/               - List expenses
    # POST   /api/teams/{team_id}/expenses/               - Record expense (admin, treasurer)
    # DELETE /api/teams/{team_id}/expenses/{expense_id}/  - Delete expense (admin)
    path('teams/<uuid:team_id>/expenses/', views.expense_list, name='expense-list'),
    path('teams/<uuid:team_id>/expenses/<uuid:expense_id>/', views.expense_detail, name='expense-detail'),
]
