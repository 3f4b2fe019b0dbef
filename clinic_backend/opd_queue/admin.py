"""
OPD Queue - Admin
"""

from django.contrib import admin
from django.utils.html import format_html

from clinic_backend.core.admin import clinic_admin_site

from .models import QueueEntry, QueueTokenCounter


@admin.register(QueueEntry, site=clinic_admin_site)
class QueueEntryAdmin(admin.ModelAdmin):
    """Daily queue with token and status badges"""

    list_display = ("token_badge", "patient", "doctor", "queue_date", "priority", "status_badge", "visit_status")
    list_filter = ("status", "visit_status", "queue_date", "doctor")
    search_fields = ("patient__name", "patient__uhid")
    ordering = ("-queue_date", "-priority", "token_number")
    date_hierarchy = "queue_date"
    list_per_page = 50

    readonly_fields = ("check_in_time", "called_at", "completed_at")

    def token_badge(self, obj):
        return format_html(
            '<span style="font-family: monospace; background-color: #1A73E8; '
            'color: white; padding: 2px 8px; border-radius: 4px;">#{}</span>',
            obj.token_number
        )
    token_badge.short_description = "Token"

    def status_badge(self, obj):
        status_map = {
            "waiting": ("⏳", "#FBBC05"),
            "in_progress": ("🩺", "#1A73E8"),
            "completed": ("✅", "#34A853"),
            "cancelled": ("❌", "#EA4335"),
            "no-show": ("🚫", "#5F6368"),
        }
        icon, color = status_map.get(obj.status, ("❓", "#5F6368"))
        return format_html(
            '<span class="status-badge" style="background-color: {}; color: white;">{} {}</span>',
            color, icon, obj.status
        )
    status_badge.short_description = "Status"


@admin.register(QueueTokenCounter, site=clinic_admin_site)
class QueueTokenCounterAdmin(admin.ModelAdmin):
    list_display = ("queue_date", "last_token")
    ordering = ("-queue_date",)
    readonly_fields = ("queue_date", "last_token")
