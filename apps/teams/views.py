import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .permissions import IsTeamAdmin, IsTeamMember
from .serializers import (
    ActivityLogSerializer,
    JoinTeamSerializer,
    LeaderboardEntrySerializer,
    MemberBalanceSerializer,
    TeamListSerializer,
    TeamMemberSerializer,
    TeamSerializer,
    TeamSettingsSerializer,
    TeamStatsSerializer,
    UpdateMemberRoleSerializer,
)
from .services import (
    create_team,
    delete_team,
    get_member_balance,
    get_team,
    get_team_leaderboard,
    get_team_members,
    get_team_stats,
    get_user_teams,
    join_team,
    list_activity,
    regenerate_invite_code,
    remove_member,
    update_member_role,
    update_team,
)

logger = logging.getLogger(__name__)

UUID_REGEX = '[0-9a-fA-F-]{36}'


def _limit_param(request, default, maximum):
    try:
        limit = int(request.query_params.get('limit', default))
    except (TypeError, ValueError):
        return default
    return max(1, min(limit, maximum))


class TeamPagination(PageNumberPagination):
    """Custom pagination for teams."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class TeamViewSet(viewsets.GenericViewSet):
    """
    ViewSet for teams.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Teams the user is an active member of
    create: Create a team (creator becomes admin)
    retrieve: Team detail (members)
    partial_update: Update name and fine/dispute settings (admin only)
    destroy: Delete the team and its ledger (admin only)
    """

    serializer_class = TeamSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = TeamPagination
    lookup_url_kwarg = 'team_id'
    lookup_value_regex = UUID_REGEX

    def get_queryset(self):
        """Return only teams where user is an active member."""
        return get_user_teams(user=self.request.user).order_by('-created_at')

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in ['list', 'create', 'join']:
            return [IsAuthenticated()]
        if self.action in ['partial_update', 'destroy', 'regenerate_invite']:
            return [IsAuthenticated(), IsTeamAdmin()]
        return [IsAuthenticated(), IsTeamMember()]

    def list(self, request):
        page = self.paginate_queryset(self.get_queryset())
        serializer = TeamListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @extend_schema(request=TeamSettingsSerializer, responses={201: TeamSerializer})
    def create(self, request):
        """Create a new team."""
        serializer = TeamSettingsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        team = create_team(creator=request.user, **serializer.validated_data)
        logger.info("Team %s created by %s", team.id, request.user.id)

        output_serializer = TeamSerializer(team, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, team_id=None):
        team = get_team(team_id=team_id)
        return Response(TeamSerializer(team, context={'request': request}).data)

    @extend_schema(request=TeamSettingsSerializer, responses={200: TeamSerializer})
    def partial_update(self, request, team_id=None):
        """Update team settings (admin only)."""
        serializer = TeamSettingsSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        team = update_team(team_id=team_id, actor=request.user, **serializer.validated_data)
        logger.info("Team %s settings updated by %s", team.id, request.user.id)
        return Response(TeamSerializer(team, context={'request': request}).data)

    def destroy(self, request, team_id=None):
        """Delete a team."""
        delete_team(team_id=team_id, actor=request.user)
        logger.info("Team %s deleted by %s", team_id, request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=JoinTeamSerializer, responses={201: TeamMemberSerializer})
    @action(detail=False, methods=['post'])
    def join(self, request):
        """Join a team using its invite code."""
        serializer = JoinTeamSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        membership = join_team(
            user=request.user,
            invite_code=serializer.validated_data['invite_code']
        )
        logger.info("User %s joined team %s", request.user.id, membership.team_id)

        return Response(
            {
                'team': TeamSerializer(membership.team, context={'request': request}).data,
                'membership': TeamMemberSerializer(membership).data,
            },
            status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=['post'])
    def regenerate_invite(self, request, team_id=None):
        """Regenerate invite code (admin only)."""
        new_code = regenerate_invite_code(team_id=team_id, actor=request.user)
        return Response({
            'invite_code': new_code,
            'message': 'Invite code regenerated successfully'
        })

    @extend_schema(responses={200: TeamMemberSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def members(self, request, team_id=None):
        """Get active members of the team."""
        memberships = get_team_members(team_id=team_id)
        return Response(TeamMemberSerializer(memberships, many=True).data)

    @extend_schema(responses={200: TeamStatsSerializer})
    @action(detail=True, methods=['get'])
    def stats(self, request, team_id=None):
        """Fine, payment and expense totals of the team."""
        return Response(TeamStatsSerializer(get_team_stats(team_id=team_id)).data)

    @extend_schema(
        parameters=[OpenApiParameter('limit', int, description='Number of entries (max 50)')],
        responses={200: LeaderboardEntrySerializer(many=True)},
    )
    @action(detail=True, methods=['get'])
    def leaderboard(self, request, team_id=None):
        """Members ranked by total fined."""
        entries = get_team_leaderboard(
            team_id=team_id,
            limit=_limit_param(request, default=10, maximum=50)
        )
        return Response(LeaderboardEntrySerializer(entries, many=True).data)

    @extend_schema(
        parameters=[OpenApiParameter('limit', int, description='Number of entries (max 100)')],
        responses={200: ActivityLogSerializer(many=True)},
    )
    @action(detail=True, methods=['get'])
    def activity(self, request, team_id=None):
        """Recent team activity, newest first."""
        entries = list_activity(
            team_id=team_id,
            limit=_limit_param(request, default=50, maximum=100)
        )
        return Response(ActivityLogSerializer(entries, many=True).data)


@extend_schema(
    methods=['PATCH'],
    request=UpdateMemberRoleSerializer,
    responses={200: TeamMemberSerializer},
    description="Change a member's role (admin only).",
)
@extend_schema(
    methods=['DELETE'],
    responses={204: None},
    description="Remove a member (admin) or leave the team (self).",
)
@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsTeamMember])
def member_detail(request, team_id, user_id):
    """Update a member's role or remove the member."""
    if request.method == 'DELETE':
        soft = remove_member(team_id=team_id, user_id=user_id, actor=request.user)
        logger.info(
            "User %s removed from team %s by %s (soft=%s)",
            user_id, team_id, request.user.id, soft
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = UpdateMemberRoleSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    membership = update_member_role(
        team_id=team_id,
        user_id=user_id,
        role=serializer.validated_data['role'],
        actor=request.user
    )
    return Response(TeamMemberSerializer(membership).data)


@extend_schema(responses={200: MemberBalanceSerializer})
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsTeamMember])
def member_balance(request, team_id, user_id):
    """Fine totals and credit of one member."""
    balance = get_member_balance(team_id=team_id, user_id=user_id)
    return Response(MemberBalanceSerializer(balance).data)
