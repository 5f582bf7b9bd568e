from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'teams'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.TeamViewSet, basename='team')

urlpatterns = [
    # Team ViewSet routes
    # GET    /api/teams/                             - List user's teams
    # POST   /api/teams/                             - Create team
    # GET    /api/teams/{team_id}/                   - Team details
    # PATCH  /api/teams/{team_id}/                   - Update settings (admin)
    # DELETE /api/teams/{team_id}/                   - Delete team (admin)

    # Custom team actions
    # POST   /api/teams/join/                        - Join with invite code
    # POST   /api/teams/{team_id}/regenerate_invite/ - Regenerate invite code (admin)
    # GET    /api/teams/{team_id}/members/           - List active members
    # GET    /api/teams/{team_id}/stats/             - Pot totals
    # GET    /api/teams/{team_id}/leaderboard/       - Members by total fined
    # GET    /api/teams/{team_id}/activity/          - Activity log

    # Member endpoints
    path(
        '<uuid:team_id>/members/<uuid:user_id>/',
        views.member_detail,
        name='member-detail'
    ),
    path(
        '<uuid:team_id>/members/<uuid:user_id>/balance/',
        views.member_balance,
        name='member-balance'
    ),

    # Include router URLs
    path('', include(router.urls)),
]
