"""
Patients App - Admin
"""

from django.contrib import admin
from django.utils.html import format_html

from clinic_backend.core.admin import clinic_admin_site
from clinic_backend.patients.models import (
    FamilyHistory,
    InsurancePolicy,
    MedicalRecord,
    Patient,
    PatientAllergy,
    Vitals,
)


class PatientAllergyInline(admin.TabularInline):
    model = PatientAllergy
    extra = 0
    fields = ("category", "allergen_name", "reaction", "severity", "is_active")


class InsurancePolicyInline(admin.TabularInline):
    model = InsurancePolicy
    extra = 0
    fields = ("provider", "policy_number", "valid_till")


@admin.register(Patient, site=clinic_admin_site)
class PatientAdmin(admin.ModelAdmin):
    """Patient master data with UHID/ABHA badges."""

    list_display = (
        "id",
        "uhid_badge",
        "name",
        "gender",
        "age_display",
        "phone",
        "abha_badge",
        "vip_badge",
        "created_at",
    )
    list_filter = ("gender", "blood_group", "is_vip", "city", "created_at")
    search_fields = ("name", "uhid", "phone", "abha_number")
    ordering = ("-created_at",)
    list_per_page = 50
    inlines = [PatientAllergyInline, InsurancePolicyInline]

    readonly_fields = ("id", "created_at", "updated_at")

    fieldsets = (
        ("👤 Patient", {
            "fields": ("uhid", "name", "gender", "date_of_birth", "age", "blood_group")
        }),
        ("📞 Contact", {
            "fields": ("phone", "email", "address", "city", "district", "state", "pincode")
        }),
        ("⭐ Priority", {
            "fields": ("priority", "is_vip", "vip_tier")
        }),
        ("🆔 ABHA", {
            "fields": ("abha_number", "abha_address", "health_id"),
            "classes": ("collapse",)
        }),
        ("📊 System", {
            "fields": ("id", "clinic", "created_by", "created_at", "updated_at"),
            "classes": ("collapse",)
        }),
    )

    def uhid_badge(self, obj):
        return format_html(
            '<span style="font-family: monospace; background-color: #1A73E8; '
            'color: white; padding: 2px 8px; border-radius: 4px;">{}</span>',
            obj.uhid
        )
    uhid_badge.short_description = "UHID"

    def age_display(self, obj):
        age = obj.current_age
        if age is None:
            return "-"
        return format_html('<span style="color: #5F6368;">{} yrs</span>', age)
    age_display.short_description = "Age"

    def abha_badge(self, obj):
        if not obj.abha_number:
            return format_html('<span style="color: #9AA0A6; font-style: italic;">{}</span>', "not linked")
        return format_html(
            '<span class="status-badge" style="background-color: #34A853; color: white;">🆔 {}</span>',
            obj.abha_number
        )
    abha_badge.short_description = "ABHA"

    def vip_badge(self, obj):
        if not obj.is_vip:
            return ""
        return format_html(
            '<span class="status-badge" style="background-color: #FBBC05; color: black;">⭐ {}</span>',
            obj.vip_tier or "VIP"
        )
    vip_badge.short_description = "VIP"


@admin.register(Vitals, site=clinic_admin_site)
class VitalsAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "bp_display", "pulse", "spo2", "bmi", "recorded_at")
    search_fields = ("patient__name", "patient__uhid")
    readonly_fields = ("bmi", "recorded_at")
    list_per_page = 50

    def bp_display(self, obj):
        if obj.bp_systolic is None or obj.bp_diastolic is None:
            return "-"
        return f"{obj.bp_systolic}/{obj.bp_diastolic}"
    bp_display.short_description = "BP"


@admin.register(MedicalRecord, site=clinic_admin_site)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "record_type", "original_name", "mime_type", "file_size", "uploaded_at")
    list_filter = ("record_type", "mime_type")
    search_fields = ("patient__name", "original_name")


clinic_admin_site.register(FamilyHistory)
