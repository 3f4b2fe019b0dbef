"""
Referrals App - Admin
"""

from django.contrib import admin
from django.utils.html import format_html

from clinic_backend.core.admin import clinic_admin_site

from .models import PatientReferral, ReferralDoctor


@admin.register(PatientReferral, site=clinic_admin_site)
class PatientReferralAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "target_name", "specialty", "referral_date", "priority_badge", "status")
    list_filter = ("status", "priority", "referral_date")
    search_fields = ("patient__name", "patient__uhid", "referred_doctor_name", "referred_to_doctor__name")
    ordering = ("-referral_date", "-created_at")
    date_hierarchy = "referral_date"

    def priority_badge(self, obj):
        colors = {
            "routine": ("#5F6368", "•"),
            "urgent": ("#FBBC05", "⚡"),
            "emergency": ("#EA4335", "🚨"),
        }
        color, icon = colors.get(obj.priority, ("#5F6368", "❓"))
        return format_html(
            '<span class="status-badge" style="background-color: {}; color: white;">{} {}</span>',
            color, icon, obj.priority
        )
    priority_badge.short_description = "Priority"


@admin.register(ReferralDoctor, site=clinic_admin_site)
class ReferralDoctorAdmin(admin.ModelAdmin):
    list_display = ("name", "specialization", "hospital", "city", "referral_count", "is_preferred", "is_active")
    list_filter = ("is_preferred", "is_active", "specialization")
    search_fields = ("name", "hospital", "specialization")
