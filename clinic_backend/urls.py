"""Clinic backend URL configuration.

API routes:
    /api/auth/, /api/health/, /api/doctors/, /api/users/  - core
    /api/patients/                                         - patients
    /api/appointments/, /api/doctors/<id>/time-slots/      - appointments
    /api/queue/                                            - opd_queue
    /api/prescriptions/, /api/prescription-templates/      - prescriptions
    /api/bills/, /api/packages/, /api/subscriptions/       - billing
    /api/referrals/                                        - referrals
    /api/abha/                                             - abha
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.http import HttpResponse
from django.urls import include, path

from clinic_backend.core.admin import clinic_admin_site


def root(request):
    """Plain-text liveness response for load balancers and uptime checks."""
    return HttpResponse("Clinic backend is running.")


urlpatterns = [
    path("", root, name="root"),
    path("admin/", admin.site.urls),
    path("clinicadmin/", clinic_admin_site.urls),

    # API routes; patients/<identifier>/ is a catch-all so app order matters
    path("api/", include("clinic_backend.core.urls")),
    path("api/", include("clinic_backend.appointments.urls")),
    path("api/", include("clinic_backend.billing.urls")),
    path("api/", include("clinic_backend.opd_queue.urls")),
    path("api/", include("clinic_backend.prescriptions.urls")),
    path("api/", include("clinic_backend.referrals.urls")),
    path("api/", include("clinic_backend.patients.urls")),
    path("api/abha/", include("clinic_backend.abha.urls")),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
