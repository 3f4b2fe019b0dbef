from django.db import transaction

from clinic_backend.core.models import Clinic

from .models import Medicine, PrescriptionTemplate

MEDICINES = [
    ("Paracetamol 500mg", "Paracetamol", "tablet", "500mg"),
    ("Amoxicillin 500mg", "Amoxicillin", "capsule", "500mg"),
    ("Cetirizine 10mg", "Cetirizine", "tablet", "10mg"),
    ("ORS", "Oral rehydration salts", "sachet", ""),
    ("Pantoprazole 40mg", "Pantoprazole", "tablet", "40mg"),
]

TEMPLATES = [
    {
        "name": "Viral fever",
        "category": "General",
        "symptoms": ["fever", "body ache"],
        "diagnoses": ["Viral fever"],
        "medications": [
            {"medication_name": "Paracetamol 500mg", "dosage": "1 tab", "frequency": "1-1-1", "duration": "3 days"},
        ],
        "advice": "Plenty of fluids and rest.",
        "follow_up_days": 3,
        "duration_days": 3,
    },
    {
        "name": "Acute gastroenteritis",
        "category": "Gastro",
        "symptoms": ["loose stools", "vomiting"],
        "diagnoses": ["Acute gastroenteritis"],
        "medications": [
            {"medication_name": "ORS", "dosage": "1 sachet", "frequency": "after each stool", "duration": "3 days"},
            {"medication_name": "Pantoprazole 40mg", "dosage": "1 tab", "frequency": "1-0-0", "duration": "5 days"},
        ],
        "diet_restrictions": "Avoid spicy and oily food.",
        "follow_up_days": 5,
        "duration_days": 5,
    },
    {
        "name": "Allergic rhinitis",
        "category": "ENT",
        "symptoms": ["sneezing", "running nose"],
        "diagnoses": ["Allergic rhinitis"],
        "medications": [
            {"medication_name": "Cetirizine 10mg", "dosage": "1 tab", "frequency": "0-0-1", "duration": "7 days"},
        ],
        "precautions": "Avoid dust exposure.",
        "duration_days": 7,
    },
]


def seed_prescriptions(flush: bool = False) -> dict:
    clinic = Clinic.objects.order_by("id").first()
    stats = {"medicines": 0, "prescription_templates": 0}

    with transaction.atomic():
        if flush:
            PrescriptionTemplate.objects.filter(name__in=[t["name"] for t in TEMPLATES]).delete()

        for name, generic_name, form, strength in MEDICINES:
            _, created = Medicine.objects.get_or_create(
                name=name,
                defaults={"generic_name": generic_name, "form": form, "strength": strength},
            )
            stats["medicines"] += int(created)

        for template in TEMPLATES:
            _, created = PrescriptionTemplate.objects.get_or_create(
                name=template["name"],
                category=template["category"],
                defaults={**template, "clinic": clinic},
            )
            stats["prescription_templates"] += int(created)

    return stats
