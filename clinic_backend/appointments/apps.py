"""
Appointments App Configuration
"""

from django.apps import AppConfig


class AppointmentsConfig(AppConfig):
	"""Appointments, visit workflow and doctor schedules"""
	default_auto_field = 'django.db.models.BigAutoField'
	name = 'clinic_backend.appointments'
	verbose_name = 'Appointments (Visits & Schedules)'
