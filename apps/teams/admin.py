# ==========================================
# apps/teams/admin.py
# ==========================================

from django.contrib import admin
from apps.teams.models import ActivityLog, Team, TeamMembership


class TeamMembershipInline(admin.TabularInline):
    """Inline admin for team memberships."""
    model = TeamMembership
    extra = 0
    fields = ['user', 'role', 'credit', 'is_deleted', 'joined_at']
    readonly_fields = ['credit', 'joined_at']


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    """Admin interface for Teams."""

    list_display = [
        'name',
        'created_by',
        'member_count',
        'fine_permission',
        'dispute_mode',
        'is_closed',
        'created_at'
    ]
    list_filter = ['fine_permission', 'dispute_enabled', 'dispute_mode', 'is_closed', 'created_at']
    search_fields = ['name', 'description', 'created_by__email', 'invite_code']
    readonly_fields = ['invite_code', 'created_at', 'updated_at']
    inlines = [TeamMembershipInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'description', 'sport', 'created_by', 'is_closed')
        }),
        ('Fines', {
            'fields': ('fine_permission', 'allow_custom_fines')
        }),
        ('Disputes', {
            'fields': ('dispute_enabled', 'dispute_mode', 'dispute_votes_required')
        }),
        ('Invitation', {
            'fields': ('invite_code',)
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    actions = ['regenerate_invite_codes']

    @admin.display(description='Members')
    def member_count(self, obj):
        """Show number of active members."""
        return obj.memberships.filter(is_deleted=False).count()

    @admin.action(description='Regenerate invite codes')
    def regenerate_invite_codes(self, request, queryset):
        """Regenerate invite codes for selected teams."""
        for team in queryset:
            team.regenerate_invite_code()
        self.message_user(request, f"Regenerated invite codes for {queryset.count()} teams")


@admin.register(TeamMembership)
class TeamMembershipAdmin(admin.ModelAdmin):
    list_display = ['user', 'team', 'role', 'credit', 'is_deleted', 'joined_at']
    list_filter = ['role', 'is_deleted']
    search_fields = ['user__email', 'team__name']
    # Credit only moves through recorded payments
    readonly_fields = ['credit', 'joined_at']


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ['activity_type', 'team', 'actor', 'target_user', 'created_at']
    list_filter = ['activity_type', 'created_at']
    search_fields = ['team__name', 'actor__email', 'target_user__email']
    readonly_fields = ['team', 'actor', 'activity_type', 'target_user', 'metadata', 'created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
