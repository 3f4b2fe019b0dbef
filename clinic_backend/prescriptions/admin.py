"""
Prescriptions App - Admin
"""

from django.contrib import admin
from django.utils.html import format_html

from clinic_backend.core.admin import clinic_admin_site

from .models import (
    Medicine,
    Prescription,
    PrescriptionAllergyAlert,
    PrescriptionItem,
    PrescriptionTemplate,
    VisitAdvice,
)


class PrescriptionItemInline(admin.TabularInline):
    model = PrescriptionItem
    extra = 0
    fields = ("medicine_name", "dosage", "frequency", "duration", "route", "instructions", "sort_order")


class PrescriptionAllergyAlertInline(admin.TabularInline):
    model = PrescriptionAllergyAlert
    extra = 0
    fields = ("drug_name", "allergen_name", "severity", "action", "created_at")
    readonly_fields = fields
    can_delete = False


@admin.register(Prescription, site=clinic_admin_site)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "doctor", "prescribed_date", "item_count", "alert_badge", "status")
    list_filter = ("status", "prescribed_date", "doctor")
    search_fields = ("patient__name", "patient__uhid", "chief_complaint")
    ordering = ("-created_at",)
    date_hierarchy = "prescribed_date"
    list_per_page = 50
    inlines = [PrescriptionItemInline, PrescriptionAllergyAlertInline]

    readonly_fields = ("id", "created_at", "updated_at")

    fieldsets = (
        ("💊 Prescription", {
            "fields": ("patient", "doctor", "clinic", "appointment", "template", "prescribed_date", "status")
        }),
        ("🩺 Consultation", {
            "fields": ("chief_complaint", "diagnosis", "advice", "patient_notes", "private_notes")
        }),
        ("📊 System", {
            "fields": ("id", "created_at", "updated_at"),
            "classes": ("collapse",)
        }),
    )

    def item_count(self, obj):
        return obj.items.count()
    item_count.short_description = "Items"

    def alert_badge(self, obj):
        count = obj.allergy_alerts.count()
        if not count:
            return "-"
        return format_html(
            '<span class="status-badge" style="background-color: #EA4335; color: white;">⚠️ {}</span>',
            count
        )
    alert_badge.short_description = "Allergy alerts"


@admin.register(PrescriptionTemplate, site=clinic_admin_site)
class PrescriptionTemplateAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "follow_up_days", "duration_days", "is_active", "updated_at")
    list_filter = ("category", "is_active")
    search_fields = ("name", "description")


@admin.register(Medicine, site=clinic_admin_site)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ("name", "generic_name", "brand", "form", "strength")
    search_fields = ("name", "generic_name", "brand")


@admin.register(VisitAdvice, site=clinic_admin_site)
class VisitAdviceAdmin(admin.ModelAdmin):
    list_display = ("patient", "appointment", "next_visit_date", "follow_up_days")
    list_filter = ("next_visit_date",)
    search_fields = ("patient__name", "patient__uhid")
