import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.fines.services import LedgerService
from apps.teams.permissions import IsTeamMember
from apps.teams.services import require_membership
from .serializers import (
    DisputeCreateSerializer,
    DisputeFilterSerializer,
    FineDisputeDetailSerializer,
    FineDisputeSerializer,
    FineDisputeVoteSerializer,
    ResolveSerializer,
    VoteSerializer,
)
from .services import DisputeService

logger = logging.getLogger(__name__)


def _visible_dispute(service, dispute_id, user):
    """Fetch a dispute the user may see (active member of its team)."""
    dispute = service.get_dispute(dispute_id=dispute_id)
    require_membership(team=dispute.team, user=user)
    return dispute


@extend_schema(
    methods=['GET'],
    responses={200: FineDisputeSerializer},
    description="Latest dispute of a fine. Returns null if it was never disputed.",
)
@extend_schema(
    methods=['POST'],
    request=DisputeCreateSerializer,
    responses={201: FineDisputeSerializer},
    description="Dispute your own unpaid fine.",
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def fine_dispute(request, fine_id):
    service = DisputeService()

    if request.method == 'GET':
        fine = LedgerService().get_fine(fine_id=fine_id)
        require_membership(team=fine.team, user=request.user)
        dispute = service.get_fine_dispute(fine_id=fine_id)
        if dispute is None:
            return Response(None)
        return Response(FineDisputeSerializer(dispute).data)

    serializer = DisputeCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    dispute = service.create_dispute(
        fine_id=fine_id,
        disputer=request.user,
        reason=serializer.validated_data['reason']
    )
    logger.info("Dispute %s filed on fine %s by %s", dispute.id, fine_id, request.user.id)
    return Response(FineDisputeSerializer(dispute).data, status=status.HTTP_201_CREATED)


@extend_schema(
    request=VoteSerializer,
    responses={200: FineDisputeSerializer},
    description=(
        "Vote on a community dispute. true cancels the fine, false maintains it "
        "and raises the number of votes needed by one."
    ),
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def vote(request, dispute_id):
    serializer = VoteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    dispute = DisputeService().vote(
        dispute_id=dispute_id,
        voter=request.user,
        choice=serializer.validated_data['vote']
    )
    logger.info(
        "Vote on dispute %s by %s: %d/%d (%s)",
        dispute_id, request.user.id, dispute.votes_count, dispute.votes_required, dispute.status
    )
    return Response(FineDisputeSerializer(dispute).data)


@extend_schema(
    request=ResolveSerializer,
    responses={200: FineDisputeSerializer},
    description="Approve or reject a dispute (admin or treasurer).",
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def resolve(request, dispute_id):
    serializer = ResolveSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    dispute = DisputeService().resolve(
        dispute_id=dispute_id,
        resolver=request.user,
        approved=serializer.validated_data['approved'],
        note=serializer.validated_data.get('note', '')
    )
    logger.info("Dispute %s resolved by %s: %s", dispute_id, request.user.id, dispute.status)
    return Response(FineDisputeSerializer(dispute).data)


@extend_schema(responses={200: FineDisputeVoteSerializer(many=True)})
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def votes(request, dispute_id):
    """All votes cast on a dispute."""
    service = DisputeService()
    _visible_dispute(service, dispute_id, request.user)
    return Response(
        FineDisputeVoteSerializer(service.get_votes(dispute_id=dispute_id), many=True).data
    )


@extend_schema(responses={200: FineDisputeVoteSerializer})
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_vote(request, dispute_id):
    """Current user's vote, or null."""
    service = DisputeService()
    _visible_dispute(service, dispute_id, request.user)
    user_vote = service.get_user_vote(dispute_id=dispute_id, user=request.user)
    if user_vote is None:
        return Response(None)
    return Response(FineDisputeVoteSerializer(user_vote).data)


@extend_schema(
    parameters=[OpenApiParameter('status', str, description='pending, approved, rejected or auto_approved')],
    responses={200: FineDisputeDetailSerializer(many=True)},
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsTeamMember])
def team_disputes(request, team_id):
    """Team disputes, newest first."""
    filters = DisputeFilterSerializer(data=request.query_params)
    filters.is_valid(raise_exception=True)

    disputes = DisputeService().list_team_disputes(team_id=team_id, **filters.validated_data)
    return Response(FineDisputeDetailSerializer(disputes, many=True).data)
