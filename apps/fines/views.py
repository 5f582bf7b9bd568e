import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.teams.permissions import IsTeamMember
from .serializers import (
    ExpenseCreateSerializer,
    ExpenseSerializer,
    FineBatchResultSerializer,
    FineCreateSerializer,
    FineFilterSerializer,
    FineRuleSerializer,
    FineRuleWriteSerializer,
    FineSerializer,
    PaymentCreateSerializer,
    PaymentFilterSerializer,
    PaymentResultSerializer,
    PaymentSerializer,
    ReminderResultSerializer,
    ReminderSerializer,
    TeamPaymentMethodSerializer,
    TeamPaymentMethodWriteSerializer,
)
from .services import (
    LedgerService,
    create_rule,
    deactivate_rule,
    delete_expense,
    delete_payment_method,
    list_payment_methods,
    list_rules,
    list_team_expenses,
    record_expense,
    send_fine_reminder,
    send_member_reminder,
    update_rule,
    upsert_payment_method,
)

logger = logging.getLogger(__name__)


class LedgerPagination(PageNumberPagination):
    """Pagination for fines, payments and expenses."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


def _paginated(request, queryset, serializer_class):
    paginator = LedgerPagination()
    page = paginator.paginate_queryset(queryset, request)
    return paginator.get_paginated_response(serializer_class(page, many=True).data)


# =============================================================================
# Rules
# =============================================================================

@extend_schema(
    methods=['GET'],
    parameters=[OpenApiParameter('include_inactive', bool, description='Include deactivated rules')],
    responses={200: FineRuleSerializer(many=True)},
    description="List the team's fine rules.",
)
@extend_schema(
    methods=['POST'],
    request=FineRuleWriteSerializer,
    responses={201: FineRuleSerializer},
    description="Add a rule to the catalog (admin only).",
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsTeamMember])
def rule_list(request, team_id):
    if request.method == 'GET':
        include_inactive = request.query_params.get('include_inactive') in ('1', 'true', 'True')
        rules = list_rules(team_id=team_id, include_inactive=include_inactive)
        return Response(FineRuleSerializer(rules, many=True).data)

    serializer = FineRuleWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    rule = create_rule(
        team_id=team_id,
        actor=request.user,
        label=data['label'],
        amount=data['amount'],
        category=data['category'],
    )
    logger.info("Rule %s created in team %s", rule.id, team_id)
    return Response(FineRuleSerializer(rule).data, status=status.HTTP_201_CREATED)


@extend_schema(
    methods=['PATCH'],
    request=FineRuleWriteSerializer,
    responses={200: FineRuleSerializer},
    description="Update a rule (admin only).",
)
@extend_schema(
    methods=['DELETE'],
    responses={204: None},
    description="Deactivate a rule (admin only). Fines keep referencing it.",
)
@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsTeamMember])
def rule_detail(request, team_id, rule_id):
    if request.method == 'DELETE':
        deactivate_rule(team_id=team_id, rule_id=rule_id, actor=request.user)
        logger.info("Rule %s deactivated in team %s", rule_id, team_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = FineRuleWriteSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    rule = update_rule(
        team_id=team_id,
        rule_id=rule_id,
        actor=request.user,
        **serializer.validated_data
    )
    return Response(FineRuleSerializer(rule).data)


# =============================================================================
# Fines
# =============================================================================

@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('offender_id', str, description='Only fines of this member'),
        OpenApiParameter('status', str, description='unpaid, partially_paid or paid'),
    ],
    responses={200: FineSerializer(many=True)},
    description="List the team's fines, newest first.",
)
@extend_schema(
    methods=['POST'],
    request=FineCreateSerializer,
    responses={201: FineSerializer, 207: FineBatchResultSerializer},
    description=(
        "Issue a fine. With offender_ids the same fine is issued to every "
        "listed member; each fine succeeds or fails on its own."
    ),
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsTeamMember])
def fine_list(request, team_id):
    ledger = LedgerService()

    if request.method == 'GET':
        filters = FineFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        fines = ledger.list_team_fines(team_id=team_id, **filters.validated_data)
        return _paginated(request, fines, FineSerializer)

    serializer = FineCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    offender_id = data.pop('offender_id', None)
    offender_ids = data.pop('offender_ids', None)

    if offender_id is not None:
        fine = ledger.create_fine(team_id=team_id, issuer=request.user, offender_id=offender_id, **data)
        logger.info("Fine %s issued in team %s", fine.id, team_id)
        return Response(FineSerializer(fine).data, status=status.HTTP_201_CREATED)

    fines, failures = ledger.create_fines(
        team_id=team_id,
        issuer=request.user,
        offender_ids=offender_ids,
        **data
    )
    logger.info(
        "Batch fine in team %s: %d issued, %d failed",
        team_id, len(fines), len(failures)
    )
    if fines and failures:
        response_status = status.HTTP_207_MULTI_STATUS
    elif fines:
        response_status = status.HTTP_201_CREATED
    else:
        response_status = status.HTTP_400_BAD_REQUEST
    return Response(
        FineBatchResultSerializer({'fines': fines, 'failures': failures}).data,
        status=response_status
    )


@extend_schema(
    methods=['GET'],
    responses={200: FineSerializer},
    description="Fine detail.",
)
@extend_schema(
    methods=['DELETE'],
    responses={204: None},
    description="Permanently delete a fine (admin only).",
)
@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, IsTeamMember])
def fine_detail(request, team_id, fine_id):
    ledger = LedgerService()

    if request.method == 'DELETE':
        ledger.delete_fine(team_id=team_id, fine_id=fine_id, actor=request.user)
        logger.info("Fine %s deleted from team %s", fine_id, team_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    fine = ledger.get_fine(fine_id=fine_id, team_id=team_id)
    return Response(FineSerializer(fine).data)


# =============================================================================
# Payments
# =============================================================================

@extend_schema(
    request=PaymentCreateSerializer,
    responses={201: PaymentResultSerializer},
    description=(
        "Pay a specific fine (admin or treasurer). Anything above the "
        "outstanding balance is banked as the offender's credit."
    ),
    tags=['payments'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsTeamMember])
def pay_fine(request, team_id, fine_id):
    serializer = PaymentCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = LedgerService().record_payment(
        team_id=team_id,
        fine_id=fine_id,
        recorded_by=request.user,
        **serializer.validated_data
    )
    logger.info(
        "Payment of %s recorded for fine %s (credit %s)",
        result['total_applied'], fine_id, result['credit_added']
    )
    return Response(PaymentResultSerializer(result).data, status=status.HTTP_201_CREATED)


@extend_schema(
    request=PaymentCreateSerializer,
    responses={201: PaymentResultSerializer},
    description=(
        "Pay a member's open fines, oldest first (admin or treasurer). "
        "Any surplus is banked as credit."
    ),
    tags=['payments'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsTeamMember])
def pay_member(request, team_id, user_id):
    serializer = PaymentCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = LedgerService().record_payment(
        team_id=team_id,
        payer_id=user_id,
        recorded_by=request.user,
        **serializer.validated_data
    )
    logger.info(
        "Payment of %s from %s spread over %d fine(s) (credit %s)",
        result['total_applied'], user_id, len(result['fines']), result['credit_added']
    )
    return Response(PaymentResultSerializer(result).data, status=status.HTTP_201_CREATED)


@extend_schema(
    parameters=[OpenApiParameter('payer_id', str, description='Only payments of this member')],
    responses={200: PaymentSerializer(many=True)},
    description="List the team's payments, newest first.",
    tags=['payments'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsTeamMember])
def payment_list(request, team_id):
    filters = PaymentFilterSerializer(data=request.query_params)
    filters.is_valid(raise_exception=True)

    payments = LedgerService().list_team_payments(team_id=team_id, **filters.validated_data)
    return _paginated(request, payments, PaymentSerializer)


# =============================================================================
# Payment methods
# =============================================================================

@extend_schema(
    methods=['GET'],
    parameters=[OpenApiParameter('enabled_only', bool, description='Only enabled methods')],
    responses={200: TeamPaymentMethodSerializer(many=True)},
    description="List the payment methods the team configured.",
    tags=['payments'],
)
@extend_schema(
    methods=['PUT'],
    request=TeamPaymentMethodWriteSerializer,
    responses={200: TeamPaymentMethodSerializer},
    description="Create or update one payment method (admin only).",
    tags=['payments'],
)
@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsTeamMember])
def payment_method_list(request, team_id):
    if request.method == 'GET':
        enabled_only = request.query_params.get('enabled_only') in ('1', 'true', 'True')
        methods = list_payment_methods(team_id=team_id, enabled_only=enabled_only)
        return Response(TeamPaymentMethodSerializer(methods, many=True).data)

    serializer = TeamPaymentMethodWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    method = upsert_payment_method(team_id=team_id, actor=request.user, **serializer.validated_data)
    logger.info("Payment method %s configured in team %s", method.method_type, team_id)
    return Response(TeamPaymentMethodSerializer(method).data)


@extend_schema(responses={204: None}, description="Remove a payment method (admin only).", tags=['payments'])
@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsTeamMember])
def payment_method_detail(request, team_id, method_type):
    delete_payment_method(team_id=team_id, method_type=method_type, actor=request.user)
    return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Reminders
# =============================================================================

@extend_schema(
    request=ReminderSerializer,
    responses={200: ReminderResultSerializer},
    description="Remind the offender of an unpaid fine (admin or treasurer).",
    tags=['reminders'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsTeamMember])
def fine_reminder(request, team_id, fine_id):
    serializer = ReminderSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    send_fine_reminder(team_id=team_id, fine_id=fine_id, actor=request.user, **serializer.validated_data)
    logger.info("Reminder sent for fine %s by %s", fine_id, request.user.id)
    return Response({'reminded': True, 'fine_count': 1})


@extend_schema(
    request=ReminderSerializer,
    responses={200: ReminderResultSerializer},
    description="Remind a member of all their unpaid fines (admin or treasurer).",
    tags=['reminders'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsTeamMember])
def member_reminder(request, team_id, user_id):
    serializer = ReminderSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    _, fine_count = send_member_reminder(
        team_id=team_id,
        user_id=user_id,
        actor=request.user,
        **serializer.validated_data
    )
    logger.info("Reminder for %d fine(s) sent to %s by %s", fine_count, user_id, request.user.id)
    return Response({'reminded': True, 'fine_count': fine_count})


# =============================================================================
# Expenses
# =============================================================================

@extend_schema(
    methods=['GET'],
    responses={200: ExpenseSerializer(many=True)},
    description="List the team's expenses.",
    tags=['expenses'],
)
@extend_schema(
    methods=['POST'],
    request=ExpenseCreateSerializer,
    responses={201: ExpenseSerializer},
    description="Record an expense paid from the pot (admin or treasurer).",
    tags=['expenses'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsTeamMember])
def expense_list(request, team_id):
    if request.method == 'GET':
        return _paginated(request, list_team_expenses(team_id=team_id), ExpenseSerializer)

    serializer = ExpenseCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    expense = record_expense(team_id=team_id, actor=request.user, **serializer.validated_data)
    logger.info("Expense %s recorded in team %s", expense.id, team_id)
    return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


@extend_schema(responses={204: None}, description="Delete an expense (admin only).", tags=['expenses'])
@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsTeamMember])
def expense_detail(request, team_id, expense_id):
    delete_expense(team_id=team_id, expense_id=expense_id, actor=request.user)
    return Response(status=status.HTTP_204_NO_CONTENT)
