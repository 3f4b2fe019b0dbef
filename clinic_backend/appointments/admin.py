"""
Appointments App - Admin
Appointments with status history, doctor time slots and availability
"""

from django.contrib import admin
from django.utils.html import format_html
from django.utils.safestring import mark_safe

from clinic_backend.core.admin import clinic_admin_site

from .models import Appointment, AppointmentStatusHistory, DoctorAvailability, DoctorTimeSlot


class AppointmentStatusHistoryInline(admin.TabularInline):
    model = AppointmentStatusHistory
    extra = 0
    fields = ("from_status", "to_status", "changed_by", "notes", "changed_at")
    readonly_fields = fields
    can_delete = False


class DoctorTimeSlotInline(admin.TabularInline):
    model = DoctorTimeSlot
    extra = 0
    fields = ("slot_time", "appointment_type", "is_active", "display_order")


# ============================================================================
# Appointment Admin
# ============================================================================
@admin.register(Appointment, site=clinic_admin_site)
class AppointmentAdmin(admin.ModelAdmin):
    """Appointments with status history inline"""

    list_display = ("id", "patient", "doctor", "time_display", "arrival_type", "status_badge", "payment_status")
    list_filter = ("status", "arrival_type", "payment_status", "appointment_date")
    search_fields = ("patient__name", "patient__uhid", "doctor__username", "reason_for_visit")
    ordering = ("-appointment_date", "-appointment_time")
    date_hierarchy = "appointment_date"
    list_per_page = 50

    inlines = [AppointmentStatusHistoryInline]

    readonly_fields = ("id", "created_at", "updated_at", "waiting_time_minutes", "actual_duration_minutes")

    fieldsets = (
        ("👤 Patient & Doctor", {
            "fields": ("patient", "doctor", "clinic")
        }),
        ("📅 Appointment", {
            "fields": ("appointment_date", "appointment_time", "arrival_type", "status", "payment_status")
        }),
        ("⏱️ Visit", {
            "fields": ("checked_in_at", "visit_started_at", "visit_ended_at",
                       "waiting_time_minutes", "actual_duration_minutes"),
            "classes": ("collapse",)
        }),
        ("📝 Notes", {
            "fields": ("reason_for_visit", "notes"),
            "classes": ("collapse",)
        }),
        ("📊 System", {
            "fields": ("id", "created_by", "created_at", "updated_at"),
            "classes": ("collapse",)
        }),
    )

    def time_display(self, obj):
        if not obj.appointment_date:
            return mark_safe('<span style="color: #9AA0A6;">-</span>')
        return format_html(
            '<span style="color: #1A73E8; font-weight: 600;">{} {}</span>',
            obj.appointment_date.strftime("%d.%m.%Y"),
            obj.appointment_time.strftime("%H:%M") if obj.appointment_time else "",
        )
    time_display.short_description = "When"

    def status_badge(self, obj):
        status_map = {
            "scheduled": ("📅", "#1A73E8", "Scheduled"),
            "checked-in": ("🏥", "#FBBC05", "Checked in"),
            "in-progress": ("🩺", "#F29900", "In progress"),
            "completed": ("✅", "#34A853", "Completed"),
            "cancelled": ("❌", "#EA4335", "Cancelled"),
            "no-show": ("🚫", "#5F6368", "No show"),
        }
        icon, color, label = status_map.get(obj.status, ("❓", "#5F6368", obj.status.upper()))
        return format_html(
            '<span class="status-badge" style="background-color: {}; color: white;">{} {}</span>',
            color, icon, label
        )
    status_badge.short_description = "Status"


@admin.register(DoctorTimeSlot, site=clinic_admin_site)
class DoctorTimeSlotAdmin(admin.ModelAdmin):
    list_display = ("doctor", "slot_time", "appointment_type", "is_active", "display_order")
    list_filter = ("appointment_type", "is_active", "doctor")
    ordering = ("doctor", "display_order")


@admin.register(DoctorAvailability, site=clinic_admin_site)
class DoctorAvailabilityAdmin(admin.ModelAdmin):
    list_display = ("doctor", "day_display", "is_available", "start_time", "end_time")
    list_filter = ("is_available", "day_of_week")

    def day_display(self, obj):
        return DoctorAvailability.DAY_NAMES[obj.day_of_week % 7]
    day_display.short_description = "Day"
