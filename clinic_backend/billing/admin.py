"""
Billing App - Admin
"""

from django.contrib import admin
from django.utils.html import format_html

from clinic_backend.core.admin import clinic_admin_site

from .models import Bill, BillItem, PatientSubscription, ReceiptTemplate, SubscriptionPackage


class BillItemInline(admin.TabularInline):
    model = BillItem
    extra = 0
    fields = ("service_name", "quantity", "unit_price", "discount", "tax", "total_price", "sort_order")


@admin.register(Bill, site=clinic_admin_site)
class BillAdmin(admin.ModelAdmin):
    """Bills with line items and a payment badge"""

    list_display = ("bill_number", "patient", "bill_date", "total_amount", "amount_paid", "payment_badge")
    list_filter = ("payment_status", "payment_method", "bill_date")
    search_fields = ("bill_number", "patient__name", "patient__uhid")
    ordering = ("-created_at",)
    date_hierarchy = "bill_date"
    list_per_page = 50
    inlines = [BillItemInline]

    readonly_fields = ("id", "balance_due", "created_at", "updated_at")

    fieldsets = (
        ("🧾 Bill", {
            "fields": ("bill_number", "bill_date", "patient", "appointment", "doctor", "clinic")
        }),
        ("💰 Amounts", {
            "fields": ("subtotal", "discount_amount", "tax_amount", "total_amount", "amount_paid", "balance_due")
        }),
        ("💳 Payment", {
            "fields": ("payment_status", "payment_method", "payment_reference", "notes")
        }),
        ("📊 System", {
            "fields": ("id", "created_by", "created_at", "updated_at"),
            "classes": ("collapse",)
        }),
    )

    def payment_badge(self, obj):
        colors = {
            "pending": ("#EA4335", "⏳"),
            "partial": ("#FBBC05", "◐"),
            "paid": ("#34A853", "✅"),
        }
        color, icon = colors.get(obj.payment_status, ("#5F6368", "❓"))
        return format_html(
            '<span class="status-badge" style="background-color: {}; color: white;">{} {}</span>',
            color, icon, obj.payment_status
        )
    payment_badge.short_description = "Payment"


@admin.register(SubscriptionPackage, site=clinic_admin_site)
class SubscriptionPackageAdmin(admin.ModelAdmin):
    list_display = ("name", "doctor", "package_type", "num_sessions", "total_price", "validity_days", "is_active")
    list_filter = ("package_type", "pricing_model", "is_active")
    search_fields = ("name",)


@admin.register(PatientSubscription, site=clinic_admin_site)
class PatientSubscriptionAdmin(admin.ModelAdmin):
    list_display = ("code", "patient", "package", "sessions_used", "sessions_total", "end_date", "status")
    list_filter = ("status", "payment_status")
    search_fields = ("code", "patient__name")


clinic_admin_site.register(ReceiptTemplate)
