from django.apps import AppConfig


class PrescriptionsConfig(AppConfig):
    """Prescriptions, medicines, visit advice and prescription templates."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'clinic_backend.prescriptions'
    verbose_name = 'Prescriptions'
