"""
Clinic backend - custom admin site and core admin classes.

Every app registers its models on ``clinic_admin_site`` (mounted at
``/clinicadmin/``); the stock ``admin.site`` stays at ``/admin/``.
"""

from datetime import timedelta

from django.contrib import admin
from django.contrib.admin import AdminSite
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.utils import timezone
from django.utils.html import format_html
from django.utils.safestring import mark_safe

from .models import AuditLog, Clinic, Role, User


# ============================================================================
# Custom AdminSite
# ============================================================================
class ClinicAdminSite(AdminSite):
    site_header = "🏥 Clinic Admin"
    site_title = "Clinic Admin"
    index_title = "Practice overview"
    site_url = None

    # Front-desk apps first, configuration last.
    APP_ORDER = (
        'patients',
        'opd_queue',
        'appointments',
        'prescriptions',
        'billing',
        'referrals',
        'abha',
        'core',
    )

    def each_context(self, request):
        context = super().each_context(request)
        context['site_subtitle'] = 'Patients, OPD queue, prescriptions & billing'
        context['site_version'] = 'v1.0.0'
        return context

    def get_app_list(self, request, app_label=None):
        app_list = super().get_app_list(request, app_label)
        order = {label: index for index, label in enumerate(self.APP_ORDER)}
        return sorted(app_list, key=lambda app: order.get(app['app_label'], len(order)))


clinic_admin_site = ClinicAdminSite(name='clinicadmin')


ROLE_COLORS = {
    "admin": ("🔑", "#EA4335"),
    "doctor": ("👨‍⚕️", "#1A73E8"),
    "nurse": ("🩺", "#34A853"),
    "assistant": ("🧑‍💼", "#9334E6"),
    "reception": ("📞", "#FBBC05"),
    "billing": ("💳", "#F29900"),
}


def _role_badge(role_name):
    icon, color = ROLE_COLORS.get(role_name, ("👤", "#5F6368"))
    return format_html(
        '<span class="status-badge" style="background-color: {}; color: white;">{} {}</span>',
        color, icon, role_name
    )


# ============================================================================
# Role Admin
# ============================================================================
@admin.register(Role, site=clinic_admin_site)
class RoleAdmin(admin.ModelAdmin):
    list_display = ("name", "label", "user_count_badge")
    search_fields = ("name", "label")
    ordering = ("name",)

    def user_count_badge(self, obj):
        count = obj.users.count()
        if count == 0:
            return mark_safe('<span style="color: #9AA0A6; font-style: italic;">no users</span>')
        return format_html(
            '<span class="status-badge" style="background-color: #1A73E8; color: white;">👥 {}</span>',
            count
        )
    user_count_badge.short_description = "Users"


# ============================================================================
# Clinic Admin
# ============================================================================
@admin.register(Clinic, site=clinic_admin_site)
class ClinicAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "email", "hfr_id", "created_at")
    search_fields = ("name", "hfr_id")

    fieldsets = (
        ("🏥 Clinic", {
            "fields": ("name", "address", "phone", "email")
        }),
        ("🆔 ABDM", {
            "fields": ("hfr_id",)
        }),
    )


# ============================================================================
# User Admin
# ============================================================================
@admin.register(User, site=clinic_admin_site)
class UserAdmin(DjangoUserAdmin):
    list_display = (
        "username",
        "full_name_display",
        "email",
        "role_badge",
        "clinic",
        "status_badge",
        "last_login_display",
    )
    list_filter = ("role", "clinic", "is_staff", "is_active", "is_superuser")
    search_fields = ("username", "email", "first_name", "last_name", "specialization")
    ordering = ("username",)
    list_per_page = 50

    fieldsets = (
        ("🔐 Login", {
            "fields": ("username", "password")
        }),
        ("👤 Profile", {
            "fields": ("first_name", "last_name", "email", "phone", "role", "clinic", "specialization",
                       "calendar_color")
        }),
        ("🛡️ Permissions", {
            "fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions"),
            "classes": ("collapse",)
        }),
        ("📅 Timestamps", {
            "fields": ("last_login", "date_joined"),
            "classes": ("collapse",)
        }),
    )

    add_fieldsets = (
        ("✨ New user", {
            "classes": ("wide",),
            "fields": ("username", "password1", "password2", "email", "role", "first_name", "last_name"),
        }),
    )

    readonly_fields = ("last_login", "date_joined")

    def lookup_allowed(self, lookup, value, request=None):
        # Links such as /clinicadmin/core/user/?role__name=doctor
        if lookup == "role__name" or lookup.startswith("role__name__"):
            return True
        return super().lookup_allowed(lookup, value, request=request)

    def full_name_display(self, obj):
        if obj.get_full_name().strip():
            return format_html('<strong style="color: #1A73E8;">{}</strong>', obj.display_name)
        return mark_safe('<span style="color: #9AA0A6; font-style: italic;">no name</span>')
    full_name_display.short_description = "Name"

    def role_badge(self, obj):
        if not obj.role:
            return mark_safe('<span class="status-badge status-neutral">❓ no role</span>')
        return _role_badge(obj.role.name)
    role_badge.short_description = "Role"

    def status_badge(self, obj):
        if obj.is_superuser:
            return mark_safe('<span class="status-badge" style="background-color: #9334E6; color: white;">👑 Superuser</span>')
        if not obj.is_active:
            return mark_safe('<span class="status-badge status-critical">🚫 Inactive</span>')
        if obj.is_staff:
            return mark_safe('<span class="status-badge status-success">✅ Staff</span>')
        return mark_safe('<span class="status-badge status-info">👤 Active</span>')
    status_badge.short_description = "Status"

    def last_login_display(self, obj):
        if not obj.last_login:
            return mark_safe('<span style="color: #9AA0A6; font-style: italic;">never</span>')

        diff = timezone.now() - obj.last_login
        if diff < timedelta(hours=1):
            color, text = "#34A853", "🟢 just now"
        elif diff < timedelta(hours=24):
            color, text = "#1A73E8", f"🔵 {diff.seconds // 3600}h ago"
        elif diff < timedelta(days=7):
            color, text = "#FBBC05", f"🟡 {diff.days}d ago"
        else:
            color, text = "#9AA0A6", obj.last_login.strftime("⚪ %d.%m.%Y")
        return format_html('<span style="color: {}; font-weight: 500;">{}</span>', color, text)
    last_login_display.short_description = "Last login"


# ============================================================================
# AuditLog Admin (read-only)
# ============================================================================
@admin.register(AuditLog, site=clinic_admin_site)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("id", "timestamp", "user", "role_badge", "action", "patient_id")
    list_filter = ("action", "role_name", "timestamp")
    search_fields = ("user__username", "action", "patient_id")
    ordering = ("-timestamp", "-id")
    list_per_page = 100
    date_hierarchy = "timestamp"

    readonly_fields = ("id", "user", "role_name", "action", "patient_id", "timestamp", "meta")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return request.user.is_superuser

    def role_badge(self, obj):
        return _role_badge(obj.role_name)
    role_badge.short_description = "Role"
