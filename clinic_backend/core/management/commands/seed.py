"""
Seed command: reproducible demo data for the clinic backend.

Usage:
    python manage.py seed           # seed every app
    python manage.py seed --flush   # drop previously seeded rows first

Only seeded rows are flushed (seed users, 'PSEED' patients, the demo
templates). Superusers and real patient data are never touched.
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from clinic_backend.appointments.seeders import seed_schedules
from clinic_backend.core.seeders import seed_core
from clinic_backend.patients.seeders import seed_patients
from clinic_backend.prescriptions.seeders import seed_prescriptions


class Command(BaseCommand):
    help = "Seed database with demo data (roles, staff, patients, slots, templates)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--flush",
            action="store_true",
            help="Delete previously seeded rows before seeding.",
        )

    def handle(self, *args, **options):
        flush = options.get("flush", False)

        self.stdout.write("=" * 80)
        self.stdout.write("  Clinic seed")
        self.stdout.write("=" * 80)

        steps = [
            ("Core (roles, clinic, staff)", lambda: seed_core(flush=flush)),
            ("Patients", lambda: seed_patients(flush=flush)),
            ("Doctor schedules", lambda: seed_schedules(flush=flush)),
            ("Prescriptions (medicines, templates)", lambda: seed_prescriptions(flush=flush)),
        ]

        stats = {}
        with transaction.atomic():
            for index, (label, step) in enumerate(steps, start=1):
                self.stdout.write(f"\n[{index}/{len(steps)}] Seeding {label}...")
                step_stats = step()
                stats.update(step_stats)
                for key, value in step_stats.items():
                    self.stdout.write(f"  ✓ {key}: {value}")

        self.stdout.write("\n" + "=" * 80)
        self.stdout.write(self.style.SUCCESS("  ✓ Seeding finished"))
        self.stdout.write("=" * 80)
        for key, value in sorted(stats.items()):
            self.stdout.write(f"  • {key}: {value}")
