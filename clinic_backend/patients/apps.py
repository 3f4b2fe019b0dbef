from django.apps import AppConfig


class PatientsConfig(AppConfig):
    """Patient master data, allergies, vitals, records and insurance."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'clinic_backend.patients'
    verbose_name = 'Patients'
