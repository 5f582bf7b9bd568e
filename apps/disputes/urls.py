from django.urls import path
from . import views

app_name = 'disputes'

urlpatterns = [
    # GET    /api/fines/{fine_id}/dispute/            - Latest dispute of a fine
    # POST   /api/fines/{fine_id}/dispute/            - Dispute own fine
    path('fines/<uuid:fine_id>/dispute/', views.fine_dispute, name='fine-dispute'),

    # POST   /api/disputes/{dispute_id}/vote/         - Community vote
    # POST   /api/disputes/{dispute_id}/resolve/      - Approve or reject (admin, treasurer)
    # GET    /api/disputes/{dispute_id}/votes/        - All votes
    # GET    /api/disputes/{dispute_id}/my_vote/      - Current user's vote
    path('disputes/<uuid:dispute_id>/vote/', views.vote, name='vote'),
    path('disputes/<uuid:dispute_id>/resolve/', views.resolve, name='resolve'),
    path('disputes/<uuid:dispute_id>/votes/', views.votes, name='votes'),
    path('disputes/<uuid:dispute_id>/my_vote/', views.my_vote, name='my-vote'),

    # GET    /api/teams/{team_id}/disputes/?status=   - Team disputes
    path('teams/<uuid:team_id>/disputes/', views.team_disputes, name='team-disputes'),
]
