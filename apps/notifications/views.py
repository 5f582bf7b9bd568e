import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.teams.permissions import IsTeamMember
from .serializers import (
    MarkAllReadSerializer,
    NotificationSerializer,
    TeamNotificationSettingsSerializer,
    UnreadCountSerializer,
)
from .services import (
    get_team_settings,
    list_notifications,
    mark_all_read,
    mark_read,
    unread_count,
    update_team_settings,
)

logger = logging.getLogger(__name__)


def _limit_param(request, default, maximum):
    try:
        limit = int(request.query_params.get('limit', default))
    except (TypeError, ValueError):
        return default
    return max(1, min(limit, maximum))


@extend_schema(
    parameters=[
        OpenApiParameter('limit', int, description='Number of entries (max 100)'),
        OpenApiParameter('unread_only', bool, description='Only unread notifications'),
    ],
    responses={200: NotificationSerializer(many=True)},
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    """The user's inbox, newest first."""
    notifications = list_notifications(
        user=request.user,
        limit=_limit_param(request, default=50, maximum=100),
        unread_only=request.query_params.get('unread_only', '').lower() in ('1', 'true'),
    )
    return Response(NotificationSerializer(notifications, many=True).data)


@extend_schema(responses={200: UnreadCountSerializer})
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_unread_count(request):
    return Response({'unread': unread_count(user=request.user)})


@extend_schema(request=None, responses={200: NotificationSerializer})
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_read(request, notification_id):
    """Mark one notification as read."""
    notification = mark_read(notification_id=notification_id, user=request.user)
    return Response(NotificationSerializer(notification).data)


@extend_schema(request=None, responses={200: MarkAllReadSerializer})
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_all_read(request):
    marked = mark_all_read(user=request.user)
    logger.info("User %s marked %s notifications as read", request.user.id, marked)
    return Response({'marked': marked})


@extend_schema(
    methods=['GET'],
    responses={200: TeamNotificationSettingsSerializer},
)
@extend_schema(
    methods=['PATCH'],
    request=TeamNotificationSettingsSerializer,
    responses={200: TeamNotificationSettingsSerializer},
)
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsTeamMember])
def team_notification_settings(request, team_id):
    """Notification switches of the user for one team."""
    if request.method == 'GET':
        settings = get_team_settings(team_id=team_id, user=request.user)
        return Response(TeamNotificationSettingsSerializer(settings).data)

    serializer = TeamNotificationSettingsSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    settings = update_team_settings(
        team_id=team_id,
        user=request.user,
        **serializer.validated_data
    )
    return Response(TeamNotificationSettingsSerializer(settings).data)
