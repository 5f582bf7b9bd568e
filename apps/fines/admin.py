# ==========================================
# apps/fines/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import Expense, Fine, FineRule, FineStatus, Payment, TeamPaymentMethod


class PaymentInline(admin.TabularInline):
    """Read-only payments within a fine."""
    model = Payment
    extra = 0
    fields = ['payer', 'amount', 'method', 'recorded_by', 'created_at']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        """Payments are recorded by the ledger only."""
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(FineRule)
class FineRuleAdmin(admin.ModelAdmin):
    list_display = ['label', 'team', 'amount', 'category', 'is_active', 'created_at']
    list_filter = ['category', 'is_active']
    search_fields = ['label', 'team__name']
    readonly_fields = ['created_by', 'created_at', 'updated_at']

    def has_delete_permission(self, request, obj=None):
        """Rules are deactivated, not deleted."""
        return False


@admin.register(Fine)
class FineAdmin(admin.ModelAdmin):
    """
    Admin interface for Fines.

    Amounts are read-only: paid amounts only move through recorded payments
    and dispute decisions.
    """

    list_display = [
        'get_label',
        'offender',
        'team',
        'amount',
        'amount_paid',
        'status_badge',
        'created_at',
    ]
    list_filter = ['status', 'team', 'created_at']
    search_fields = ['custom_label', 'rule__label', 'offender__email', 'team__name']
    readonly_fields = [
        'team',
        'offender',
        'issued_by',
        'rule',
        'amount',
        'amount_paid',
        'status',
        'last_reminder_sent',
        'created_at',
        'updated_at',
    ]
    inlines = [PaymentInline]
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Fine', {
            'fields': ('team', 'offender', 'issued_by', 'rule', 'custom_label', 'note')
        }),
        ('Balance', {
            'fields': ('amount', 'amount_paid', 'status')
        }),
        ('Metadata', {
            'fields': ('last_reminder_sent', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    @admin.display(description='Fine')
    def get_label(self, obj):
        return obj.label

    @admin.display(description='Status')
    def status_badge(self, obj):
        """Display fine status as colored badge."""
        colors = {
            FineStatus.UNPAID: ('#E5C49A', '#2C1810'),
            FineStatus.PARTIALLY_PAID: ('#A47449', 'white'),
            FineStatus.PAID: ('#6B8E5E', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """Payments are append-only; the admin shows them read-only."""

    list_display = ['payer', 'team', 'amount', 'fine', 'method', 'recorded_by', 'created_at']
    list_filter = ['method', 'created_at']
    search_fields = ['payer__email', 'team__name', 'note']
    readonly_fields = ['team', 'fine', 'payer', 'amount', 'method', 'note', 'recorded_by', 'created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['description', 'team', 'amount', 'category', 'recorded_by', 'created_at']
    list_filter = ['category', 'created_at']
    search_fields = ['description', 'team__name']
    readonly_fields = ['created_at']


@admin.register(TeamPaymentMethod)
class TeamPaymentMethodAdmin(admin.ModelAdmin):
    list_display = ['team', 'method_type', 'display_name', 'is_enabled', 'updated_at']
    list_filter = ['method_type', 'is_enabled']
    search_fields = ['team__name', 'display_name']
    readonly_fields = ['created_by', 'created_at', 'updated_at']
