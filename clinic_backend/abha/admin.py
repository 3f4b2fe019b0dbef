"""
ABHA App - Admin
"""

from django.contrib import admin
from django.utils.html import format_html

from clinic_backend.core.admin import clinic_admin_site

from .models import (
    AbhaAccount,
    AbhaApiLog,
    AbhaConsent,
    AbhaLoginSession,
    AbhaMeta,
    AbhaRecordLink,
    AbhaRegistrationSession,
)


@admin.register(AbhaAccount, site=clinic_admin_site)
class AbhaAccountAdmin(admin.ModelAdmin):
    list_display = ("abha_number", "abha_address", "patient", "status_badge", "kyc_verified", "registered_at")
    list_filter = ("status", "kyc_verified", "aadhaar_verified")
    search_fields = ("abha_number", "abha_address", "name", "patient__name", "patient__uhid")
    ordering = ("-created_at",)
    list_per_page = 50
    readonly_fields = ("abdm_token", "refresh_token", "token_expires_at", "created_at", "updated_at")

    fieldsets = (
        ("🆔 ABHA", {
            "fields": ("patient", "abha_number", "abha_address", "health_id", "status", "registered_at")
        }),
        ("👤 Demographics", {
            "fields": ("name", "first_name", "middle_name", "last_name", "gender", "date_of_birth",
                       "mobile", "email", "address", "district", "state", "pincode")
        }),
        ("✅ Verification", {
            "fields": ("kyc_verified", "aadhaar_verified", "mobile_verified", "email_verified")
        }),
        ("🔑 ABDM tokens", {
            "fields": ("abdm_token", "refresh_token", "token_expires_at"),
            "classes": ("collapse",)
        }),
        ("📊 System", {
            "fields": ("created_at", "updated_at"),
            "classes": ("collapse",)
        }),
    )

    def status_badge(self, obj):
        color = "#34A853" if obj.status == AbhaAccount.STATUS_ACTIVE else "#9AA0A6"
        return format_html(
            '<span class="status-badge" style="background-color: {}; color: white;">{}</span>',
            color,
            obj.get_status_display()
        )
    status_badge.short_description = "Status"


@admin.register(AbhaRegistrationSession, site=clinic_admin_site)
class AbhaRegistrationSessionAdmin(admin.ModelAdmin):
    list_display = ("session_id", "patient", "aadhaar_masked", "status", "expires_at", "created_at")
    list_filter = ("status",)
    search_fields = ("session_id", "txn_id", "patient__name")
    readonly_fields = ("request_data", "response_data")


@admin.register(AbhaLoginSession, site=clinic_admin_site)
class AbhaLoginSessionAdmin(admin.ModelAdmin):
    list_display = ("session_id", "patient", "abha_address", "auth_method", "status", "expires_at")
    list_filter = ("status", "auth_method")
    search_fields = ("session_id", "abha_address", "patient__name")


@admin.register(AbhaApiLog, site=clinic_admin_site)
class AbhaApiLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "method", "endpoint", "response_status", "response_time_ms")
    list_filter = ("response_status", "method")
    search_fields = ("endpoint", "session_id")
    readonly_fields = [f.name for f in AbhaApiLog._meta.fields]

    def has_add_permission(self, request):
        return False


@admin.register(AbhaConsent, site=clinic_admin_site)
class AbhaConsentAdmin(admin.ModelAdmin):
    list_display = ("patient", "purpose", "status", "created_at")
    list_filter = ("status",)


@admin.register(AbhaRecordLink, site=clinic_admin_site)
class AbhaRecordLinkAdmin(admin.ModelAdmin):
    list_display = ("patient", "record_type", "care_context_reference", "upload_status", "uploaded_at")
    list_filter = ("upload_status", "record_type")


@admin.register(AbhaMeta, site=clinic_admin_site)
class AbhaMetaAdmin(admin.ModelAdmin):
    list_display = ("meta_key", "meta_value", "updated_at")
