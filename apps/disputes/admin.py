from django.contrib import admin
from .models import FineDispute, FineDisputeVote


class FineDisputeVoteInline(admin.TabularInline):
    model = FineDisputeVote
    extra = 0
    fields = ['voter', 'vote', 'created_at']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(FineDispute)
class FineDisputeAdmin(admin.ModelAdmin):
    """
    Admin interface for FineDisputes.

    Decisions are made through the API so the fine is forgiven together with
    the status change; the admin only shows them.
    """

    list_display = [
        'fine',
        'team',
        'disputed_by',
        'status',
        'votes_count',
        'votes_required',
        'created_at',
        'resolved_at',
    ]
    list_filter = ['status', 'created_at']
    search_fields = ['reason', 'disputed_by__email', 'team__name']
    readonly_fields = [
        'fine',
        'team',
        'disputed_by',
        'status',
        'votes_count',
        'votes_required',
        'resolved_by',
        'resolution_note',
        'created_at',
        'resolved_at',
    ]
    inlines = [FineDisputeVoteInline]

    fieldsets = (
        ('Dispute', {
            'fields': ('fine', 'team', 'disputed_by', 'reason')
        }),
        ('Voting', {
            'fields': ('votes_count', 'votes_required')
        }),
        ('Resolution', {
            'fields': ('status', 'resolved_by', 'resolution_note', 'resolved_at')
        }),
        ('Metadata', {
            'fields': ('created_at',),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        return False
