"""Tests for the ``seed`` management command."""

from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from clinic_backend.appointments.models import DoctorAvailability, DoctorTimeSlot
from clinic_backend.core.models import Role, User
from clinic_backend.patients.models import Patient
from clinic_backend.prescriptions.models import PrescriptionTemplate


class SeedCommandTest(TestCase):
    databases = {"default"}

    def _seed(self, *args):
        out = StringIO()
        call_command("seed", *args, stdout=out)
        return out.getvalue()

    def test_seed_creates_demo_data(self):
        output = self._seed()

        self.assertIn("Seeding finished", output)
        self.assertEqual(
            set(Role.objects.values_list("name", flat=True)),
            {"admin", "doctor", "assistant", "reception", "nurse", "billing"},
        )
        doctors = User.objects.filter(role__name="doctor")
        self.assertEqual(doctors.count(), 3)
        self.assertEqual(Patient.objects.filter(uhid__startswith="PSEED").count(), 25)
        self.assertEqual(DoctorTimeSlot.objects.filter(doctor=doctors.first()).count(), 12)
        self.assertFalse(
            DoctorAvailability.objects.get(doctor=doctors.first(), day_of_week=0).is_available
        )
        self.assertEqual(PrescriptionTemplate.objects.count(), 3)

    def test_seed_is_idempotent_and_flush_rebuilds(self):
        self._seed()
        self._seed()
        self.assertEqual(Patient.objects.filter(uhid__startswith="PSEED").count(), 25)
        self.assertEqual(PrescriptionTemplate.objects.count(), 3)

        self._seed("--flush")
        self.assertEqual(Patient.objects.filter(uhid__startswith="PSEED").count(), 25)
        self.assertEqual(User.objects.filter(is_superuser=True).count(), 1)
