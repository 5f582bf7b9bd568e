from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from apps.teams.models import TeamMembership
from .models import User


class TeamMembershipInline(admin.TabularInline):
    """Teams the account belongs to. Credit is changed only by the ledger."""

    model = TeamMembership
    fk_name = 'user'
    extra = 0
    fields = ['team', 'role', 'credit', 'is_deleted', 'joined_at']
    readonly_fields = ['team', 'credit', 'joined_at']
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Accounts with their team memberships."""

    list_display = [
        'email',
        'display_name',
        'team_count',
        'is_active',
        'created_at',
    ]
    list_filter = ['is_active', 'is_staff', 'created_at']
    search_fields = ['email', 'display_name']
    ordering = ['-created_at']
    inlines = [TeamMembershipInline]

    fieldsets = (
        (None, {'fields': ('email', 'display_name', 'password')}),
        ('Access', {
            'fields': ('is_active', 'is_staff', 'is_superuser'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['created_at', 'last_login']
    filter_horizontal = []

    actions = ['deactivate_users']

    @admin.display(description='Teams')
    def team_count(self, obj):
        return obj.team_memberships.filter(is_deleted=False).count()

    @admin.action(description='Deactivate selected users')
    def deactivate_users(self, request, queryset):
        """Block login for selected users. Their fines and payments stay on the ledger."""
        count = queryset.filter(is_superuser=False).update(is_active=False)
        self.message_user(request, f'Deactivated {count} user(s).')
