from django.apps import AppConfig


class OpdQueueConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'clinic_backend.opd_queue'
    label = 'opd_queue'
    verbose_name = 'OPD Queue'
