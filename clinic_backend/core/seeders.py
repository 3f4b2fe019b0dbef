import random

from django.contrib.auth import get_user_model
from django.db import transaction

from .models import AuditLog, Clinic, Role

User = get_user_model()

RANDOM_SEED = 42
SEED_EMAIL_DOMAIN = "@seed.local"
SEED_PASSWORD = "test1234"

ROLE_DEFINITIONS = [
    ("admin", "Administrator"),
    ("doctor", "Doctor"),
    ("assistant", "Assistant"),
    ("reception", "Reception"),
    ("nurse", "Nurse"),
    ("billing", "Billing"),
]

# username, first name, last name, role, specialization
STAFF = [
    ("dr.sharma", "Priya", "Sharma", "doctor", "General Medicine"),
    ("dr.iyer", "Karthik", "Iyer", "doctor", "Pediatrics"),
    ("dr.khan", "Sana", "Khan", "doctor", "Dermatology"),
    ("nurse1", "Anita", "Thomas", "nurse", ""),
    ("frontdesk1", "Rahul", "Verma", "reception", ""),
    ("assistant1", "Deepa", "Pillai", "assistant", ""),
    ("billing1", "Vikram", "Joshi", "billing", ""),
]

CALENDAR_COLORS = ["#1E90FF", "#32CD32", "#FF8C00", "#8A2BE2"]


def seed_core(flush: bool = False) -> dict:
    """
    Seeds roles, one clinic and the staff accounts.

    With flush=True seed users (emails ending in '@seed.local') and the audit
    log are removed first. Superusers are never deleted.
    """
    random.seed(RANDOM_SEED)

    stats: dict[str, int] = {}

    with transaction.atomic():
        if flush:
            AuditLog.objects.all().delete()
            User.objects.filter(is_superuser=False, email__endswith=SEED_EMAIL_DOMAIN).delete()

        roles = _seed_roles()
        stats["core_roles"] = len(roles)

        clinic, _ = Clinic.objects.get_or_create(
            name="Sunrise Family Clinic",
            defaults={"address": "12 MG Road, Bengaluru", "phone": "080-40000000"},
        )
        stats["core_clinics"] = 1

        users = _seed_users(roles, clinic)
        stats["core_users"] = len(users)

    return stats


def _seed_roles() -> dict[str, Role]:
    roles: dict[str, Role] = {}
    for name, label in ROLE_DEFINITIONS:
        role, _created = Role.objects.get_or_create(name=name, defaults={"label": label})
        roles[name] = role
    return roles


def _seed_users(roles: dict[str, Role], clinic: Clinic) -> list:
    users = []

    if not User.objects.filter(is_superuser=True).exists():
        su = User.objects.create_superuser(username="admin", email="admin@clinic.local", password="admin")
        su.role = roles["admin"]
        su.clinic = clinic
        su.save()
        users.append(su)

    for username, first_name, last_name, role_name, specialization in STAFF:
        user = User.objects.filter(username=username).first()
        if user is None:
            user = User.objects.create_user(
                username=username,
                email=f"{username}{SEED_EMAIL_DOMAIN}",
                password=SEED_PASSWORD,
                first_name=first_name,
                last_name=last_name,
            )
        user.role = roles[role_name]
        user.clinic = clinic
        user.specialization = specialization
        user.calendar_color = random.choice(CALENDAR_COLORS)
        user.is_staff = True
        user.save()
        users.append(user)

    return users
