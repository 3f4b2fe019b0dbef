"""Patient business logic: UHID generation, normalization, merge and uploads."""

from __future__ import annotations

import logging
import random
import time
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.db.models import Q

from clinic_backend.core.exceptions import InvalidRequest, NotFound
from clinic_backend.core.permissions import role_name_of
from clinic_backend.core.utils import log_patient_action

from .imaging import optimize_image, stored_record_name, validate_upload
from .models import FamilyHistory, MedicalRecord, Patient

logger = logging.getLogger(__name__)

_GENDER_MAP = {
    'm': Patient.GENDER_MALE,
    'male': Patient.GENDER_MALE,
    'f': Patient.GENDER_FEMALE,
    'female': Patient.GENDER_FEMALE,
    'o': Patient.GENDER_OTHER,
    'other': Patient.GENDER_OTHER,
}

# Fields a merge never copies from a merged patient onto the primary.
_MERGE_SKIP_FIELDS = {'id', 'uhid', 'created_at', 'updated_at'}


def generate_uhid() -> str:
    return f"P{int(time.time() * 1000)}{random.randint(0, 999):03d}"


def normalize_gender(value) -> str:
    if value is None:
        return Patient.GENDER_UNKNOWN
    return _GENDER_MAP.get(str(value).strip().lower(), Patient.GENDER_UNKNOWN)


def normalize_relation(value) -> str:
    relation = str(value or '').strip().lower()
    if relation in FamilyHistory.RELATIONS:
        return relation
    return 'other'


def compute_bmi(weight, height):
    """BMI = kg / m^2 rounded to 2 decimals; None if either value is missing."""
    if not weight or not height:
        return None
    weight = Decimal(str(weight))
    height_m = Decimal(str(height)) / Decimal(100)
    if height_m <= 0:
        return None
    return (weight / (height_m * height_m)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def visible_patients_for(user, qs=None):
    """Doctors only see patients they registered or have appointments with."""
    qs = Patient.objects.all() if qs is None else qs
    if role_name_of(user) == 'doctor':
        qs = qs.filter(Q(created_by=user) | Q(appointments__doctor=user)).distinct()
    return qs


def resolve_patient(identifier, qs=None) -> Patient:
    """Look up a patient by numeric primary key or by UHID."""
    qs = Patient.objects.all() if qs is None else qs
    identifier = str(identifier).strip()
    if identifier.isdigit():
        patient = qs.filter(pk=int(identifier)).first()
    else:
        patient = qs.filter(uhid=identifier).first()
    if patient is None:
        raise NotFound('Patient not found')
    return patient


def get_patient_or_404(patient_id) -> Patient:
    patient = Patient.objects.filter(pk=patient_id).first() if patient_id else None
    if patient is None:
        raise NotFound('Patient not found')
    return patient


def merge_patients(*, primary_id: int, merge_ids: list[int], user=None) -> Patient:
    """Merge duplicate patient records into ``primary_id``.

    Missing fields on the primary are filled from the merged records (in the
    given order), every related row is re-pointed to the primary and the
    merged patients are deleted. Runs in a single transaction.
    """
    merge_ids = [int(pid) for pid in merge_ids if int(pid) != int(primary_id)]
    if not merge_ids:
        raise InvalidRequest('patient_ids_to_merge must contain at least one other patient')

    with transaction.atomic():
        primary = Patient.objects.select_for_update().filter(pk=primary_id).first()
        if primary is None:
            raise NotFound('Primary patient not found')

        others = {p.pk: p for p in Patient.objects.select_for_update().filter(pk__in=merge_ids)}
        missing = [pid for pid in merge_ids if pid not in others]
        if missing:
            raise NotFound('Patients to merge not found', missing_ids=missing)

        for pid in merge_ids:
            _fill_missing_fields(primary, others[pid])
        primary.save()

        moved = _repoint_related(primary, merge_ids)
        Patient.objects.filter(pk__in=merge_ids).delete()

    logger.info('Merged patients %s into %s (moved=%s)', merge_ids, primary.pk, moved)
    log_patient_action(
        user,
        'patient_merge',
        patient_id=primary.pk,
        meta={'merged_ids': merge_ids, 'moved': moved},
    )
    return primary


def _fill_missing_fields(primary: Patient, other: Patient) -> None:
    for field in Patient._meta.concrete_fields:
        if field.name in _MERGE_SKIP_FIELDS or field.primary_key:
            continue
        current = getattr(primary, field.attname)
        if current in (None, ''):
            incoming = getattr(other, field.attname)
            if incoming not in (None, ''):
                setattr(primary, field.attname, incoming)


def _repoint_related(primary: Patient, merge_ids: list[int]) -> dict[str, int]:
    moved: dict[str, int] = {}
    for rel in Patient._meta.related_objects:
        if rel.many_to_many:
            continue
        model = rel.related_model
        fk_name = rel.field.name
        qs = model.objects.filter(**{f"{fk_name}__in": merge_ids})
        if rel.one_to_one:
            # Only move a one-to-one record if the primary has none yet.
            if model.objects.filter(**{fk_name: primary}).exists():
                continue
            first = qs.first()
            if first is None:
                continue
            qs = model.objects.filter(pk=first.pk)
        count = qs.update(**{fk_name: primary})
        if count:
            moved[model._meta.label_lower] = count
    return moved


def save_medical_record(*, patient: Patient, upload, user=None, record_type='general', description='') -> MedicalRecord:
    """Validate, optionally optimize and persist an uploaded medical record."""
    validate_upload(upload)

    original_name = upload.name
    mime_type = (upload.content_type or '').lower()
    stored_name = stored_record_name(original_name)
    content = upload

    optimized = optimize_image(upload)
    if optimized is not None:
        content, ext = optimized
        stem = stored_name.rsplit('.', 1)[0]
        stored_name = f"{stem}.{ext}"
        mime_type = 'image/jpeg'

    record = MedicalRecord(
        patient=patient,
        record_type=record_type or 'general',
        original_name=original_name,
        mime_type=mime_type,
        description=description or '',
        uploaded_by=user if getattr(user, 'is_authenticated', False) else None,
    )
    record.file.save(stored_name, content, save=False)
    record.file_size = record.file.size
    record.save()

    log_patient_action(
        user,
        'medical_record_upload',
        patient_id=patient.pk,
        meta={'record_id': record.pk, 'optimized': optimized is not None},
    )
    return record
