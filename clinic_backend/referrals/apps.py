from django.apps import AppConfig


class ReferralsConfig(AppConfig):
    """Outgoing patient referrals and the referral network."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'clinic_backend.referrals'
    verbose_name = 'Referrals'
