import random
from datetime import date, timedelta

from django.db import transaction

from clinic_backend.core.models import Clinic

from .models import Patient, PatientAllergy
from .services import generate_uhid

RANDOM_SEED = 7
SEED_UHID_PREFIX = "PSEED"

FIRST_NAMES = ["Aarav", "Diya", "Ishaan", "Kavya", "Rohan", "Sneha", "Arjun", "Meera", "Vivaan", "Anika"]
LAST_NAMES = ["Patel", "Reddy", "Nair", "Gupta", "Das", "Menon", "Singh", "Rao"]
CITIES = ["Bengaluru", "Mysuru", "Chennai", "Kochi"]
BLOOD_GROUPS = ["A+", "B+", "O+", "AB+", "O-"]
DRUG_ALLERGENS = ["Penicillin", "Sulfa", "Aspirin", "Ibuprofen"]


def seed_patients(count: int = 25, flush: bool = False) -> dict:
    """Seed patients (UHID prefix 'PSEED') with a few drug allergies."""
    rng = random.Random(RANDOM_SEED)
    clinic = Clinic.objects.order_by("id").first()
    stats = {"patients": 0, "patient_allergies": 0}

    with transaction.atomic():
        if flush:
            Patient.objects.filter(uhid__startswith=SEED_UHID_PREFIX).delete()
        elif Patient.objects.filter(uhid__startswith=SEED_UHID_PREFIX).exists():
            return stats

        for index in range(count):
            dob = date(1950, 1, 1) + timedelta(days=rng.randint(0, 365 * 70))
            patient = Patient.objects.create(
                uhid=f"{SEED_UHID_PREFIX}{generate_uhid()[1:]}{index:02d}",
                name=f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
                gender=rng.choice([Patient.GENDER_MALE, Patient.GENDER_FEMALE]),
                date_of_birth=dob,
                blood_group=rng.choice(BLOOD_GROUPS),
                phone=f"9{rng.randint(100000000, 999999999)}",
                city=rng.choice(CITIES),
                priority=rng.choice([0, 0, 0, 1, 3]),
                is_vip=index % 10 == 0,
                clinic=clinic,
            )
            stats["patients"] += 1

            if rng.random() < 0.3:
                PatientAllergy.objects.create(
                    patient=patient,
                    category=PatientAllergy.CATEGORY_DRUG,
                    allergen_name=rng.choice(DRUG_ALLERGENS),
                    severity=rng.choice(["mild", "moderate", "severe"]),
                )
                stats["patient_allergies"] += 1

    return stats
