from django.apps import AppConfig


class AbhaConfig(AppConfig):
    """ABHA registration/login through ABDM and the linked health records."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'clinic_backend.abha'
    verbose_name = 'ABHA'
