# ==========================================
# apps/milk/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import MilkRecord, MilkStatus


@admin.register(MilkRecord)
class MilkRecordAdmin(admin.ModelAdmin):
    """
    Admin interface for milk records.

    Provides:
    - Record listing with status badge and auto-mark flag
    - Filtering by status, milk type, auto-mark and date
    - Bulk confirmation of auto-marked records
    """

    list_display = [
        'date',
        'user',
        'liters',
        'status_badge',
        'milk_type',
        'is_auto_marked',
        'created_at',
    ]

    list_filter = [
        'status',
        'milk_type',
        'is_auto_marked',
        'date',
    ]

    search_fields = [
        'user__username',
        'user__phone',
        'notes',
    ]

    ordering = ['-date']
    date_hierarchy = 'date'
    list_select_related = ['user']
    readonly_fields = ['created_at', 'updated_at']

    def status_badge(self, obj):
        """Display delivery status as colored badge."""
        colors = {
            MilkStatus.RECEIVED: ('#6B8E5E', 'white'),
            MilkStatus.NOT_RECEIVED: ('#B85C5C', 'white'),
            MilkStatus.PARTIAL: ('#E5C49A', '#2C1810'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    actions = ['confirm_records']

    @admin.action(description='Confirm selected auto-marked records')
    def confirm_records(self, request, queryset):
        count = queryset.filter(is_auto_marked=True).update(is_auto_marked=False)
        self.message_user(request, f'Confirmed {count} record(s).')
