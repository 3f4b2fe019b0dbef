"""Prescription business logic.

- Saving a prescription: allergy check, optional vitals, medicine master,
  appointment notes, follow-up advice and queue completion
- Latest vitals / last prescription lookups
- Template JSON normalization and prefill payloads
- Upcoming follow-ups
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date, datetime, timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from clinic_backend.appointments.services import resolve_doctor
from clinic_backend.core.exceptions import InvalidRequest
from clinic_backend.core.models import User
from clinic_backend.core.permissions import role_name_of
from clinic_backend.core.utils import log_patient_action
from clinic_backend.opd_queue.services import complete_active_entry
from clinic_backend.patients.models import PatientAllergy, Vitals
from clinic_backend.patients.serializers import VitalsSerializer

from .models import (
    Medicine,
    Prescription,
    PrescriptionAllergyAlert,
    PrescriptionItem,
    VisitAdvice,
)

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r'[^a-z0-9]')

# Request vitals key -> Vitals field
_VITALS_KEYS = {
    'temp': 'temperature',
    'temperature': 'temperature',
    'pulse': 'pulse',
    'bp_systolic': 'bp_systolic',
    'bp_diastolic': 'bp_diastolic',
    'respiratory_rate': 'respiratory_rate',
    'spo2': 'spo2',
    'weight': 'weight',
    'height': 'height',
}


def normalize_drug_name(value) -> str:
    """Lowercase and strip everything but ASCII letters and digits."""
    return _NON_ALNUM.sub('', str(value or '').lower())


def medication_name(med: dict) -> str:
    return (med.get('medication_name') or med.get('name') or med.get('brand_name') or '').strip()


def find_allergy_conflicts(patient, medications) -> list[dict]:
    """Match medication names against the patient's active drug allergies.

    A match is a substring hit in either direction on the normalized names.
    """
    allergies = [
        (normalize_drug_name(allergy.allergen_name), allergy)
        for allergy in PatientAllergy.objects.filter(
            patient=patient,
            is_active=True,
            category=PatientAllergy.CATEGORY_DRUG,
        )
    ]
    conflicts = []
    for med in medications:
        drug = normalize_drug_name(medication_name(med))
        if not drug:
            continue
        for allergen, allergy in allergies:
            if allergen and (allergen in drug or drug in allergen):
                conflicts.append({
                    'drug_name': medication_name(med),
                    'allergen_name': allergy.allergen_name,
                    'severity': allergy.severity,
                })
    return conflicts


def _record_alerts(patient, conflicts, *, prescription=None, action=PrescriptionAllergyAlert.ACTION_WARNED):
    PrescriptionAllergyAlert.objects.bulk_create([
        PrescriptionAllergyAlert(
            patient=patient,
            prescription=prescription,
            drug_name=conflict['drug_name'],
            allergen_name=conflict['allergen_name'],
            severity=conflict['severity'] or '',
            action=action,
            message=f"Allergy match: prescribed '{conflict['drug_name']}' vs allergy '{conflict['allergen_name']}'",
        )
        for conflict in conflicts
    ])


def parse_blood_pressure(value):
    """'120/80' -> (120, 80); anything else -> (None, None)."""
    parts = str(value or '').split('/')
    if len(parts) != 2:
        return None, None
    try:
        return int(parts[0].strip()), int(parts[1].strip())
    except ValueError:
        return None, None


def _vitals_payload(vitals) -> dict:
    if not isinstance(vitals, dict):
        return {}
    payload = {
        field: vitals[key]
        for key, field in _VITALS_KEYS.items()
        if vitals.get(key) not in (None, '')
    }
    if vitals.get('blood_pressure') and 'bp_systolic' not in payload:
        systolic, diastolic = parse_blood_pressure(vitals['blood_pressure'])
        if systolic is not None:
            payload['bp_systolic'] = systolic
            payload['bp_diastolic'] = diastolic
    return payload


def save_request_vitals(patient, vitals, *, user=None):
    payload = _vitals_payload(vitals)
    if not payload:
        return None
    serializer = VitalsSerializer(data=payload)
    serializer.is_valid(raise_exception=True)
    return serializer.save(
        patient=patient,
        recorded_by=user if getattr(user, 'is_authenticated', False) else None,
    )


def latest_vitals(patient, on_date=None):
    qs = Vitals.objects.filter(patient=patient)
    if on_date is not None:
        qs = qs.filter(recorded_at__date=on_date)
    return qs.order_by('-recorded_at', '-id').first()


def next_visit_date(follow_up_date=None, follow_up_days=None, today=None):
    """An explicit follow-up date wins over a day offset; unparseable dates yield None."""
    if follow_up_date:
        if isinstance(follow_up_date, date):
            return follow_up_date
        try:
            return datetime.strptime(str(follow_up_date)[:10], '%Y-%m-%d').date()
        except ValueError:
            return None
    if follow_up_days not in (None, ''):
        return (today or timezone.localdate()) + timedelta(days=int(follow_up_days))
    return None


def resolve_prescribing_doctor(doctor_id=None, *, user=None, appointment=None):
    if doctor_id:
        return resolve_doctor(doctor_id)
    if role_name_of(user) == 'doctor':
        return user
    if appointment is not None and appointment.doctor_id:
        return appointment.doctor
    doctor = User.objects.filter(role__name='doctor', is_active=True).order_by('id').first()
    if doctor is None:
        raise InvalidRequest('No doctor found in system. Please create a doctor first.')
    return doctor


def add_prescription(
    *,
    patient,
    medications,
    doctor=None,
    appointment=None,
    template=None,
    symptoms=None,
    diagnosis=None,
    vitals=None,
    advice='',
    follow_up_days=None,
    follow_up_date=None,
    patient_notes='',
    private_notes='',
    user=None,
):
    """Save a prescription and everything a finished consultation touches.

    Returns ``(prescription, warnings)`` where ``warnings`` lists the
    allergy conflicts that were recorded but not blocked.
    """
    if not medications:
        raise InvalidRequest('At least one medication is required')
    symptoms = [str(s) for s in (symptoms or []) if str(s).strip()]
    diagnosis = [str(d) for d in (diagnosis or []) if str(d).strip()]

    conflicts = find_allergy_conflicts(patient, medications)
    if conflicts:
        logger.warning('Allergy conflicts for patient %s: %s', patient.pk, conflicts)
        if settings.REQUIRE_NO_ALLERGY_CONFLICT:
            _record_alerts(patient, conflicts, action=PrescriptionAllergyAlert.ACTION_BLOCKED)
            raise InvalidRequest('Allergy conflict detected', details=conflicts)

    if settings.REQUIRE_VITALS_BEFORE_DIAGNOSIS and diagnosis:
        if not _vitals_payload(vitals) and latest_vitals(patient, timezone.localdate()) is None:
            raise InvalidRequest('Vitals required before diagnosis/prescription')

    doctor = doctor or resolve_prescribing_doctor(user=user, appointment=appointment)
    today = timezone.localdate()

    with transaction.atomic():
        save_request_vitals(patient, vitals, user=user)

        prescription = Prescription.objects.create(
            patient=patient,
            doctor=doctor,
            clinic=getattr(doctor, 'clinic', None) or getattr(user, 'clinic', None),
            appointment=appointment,
            template=template,
            chief_complaint=', '.join(symptoms),
            diagnosis=diagnosis,
            advice='\n'.join(part for part in (advice, patient_notes) if part),
            patient_notes=patient_notes or '',
            private_notes=private_notes or '',
            prescribed_date=today,
        )
        if conflicts:
            _record_alerts(patient, conflicts, prescription=prescription)

        for index, med in enumerate(medications):
            name = medication_name(med)
            if not name:
                raise InvalidRequest(f'Medication #{index + 1} has no name')
            medicine, _created = Medicine.objects.get_or_create(
                name=name,
                defaults={
                    'generic_name': med.get('generic_name') or '',
                    'brand': med.get('brand_name') or '',
                },
            )
            PrescriptionItem.objects.create(
                prescription=prescription,
                medicine=medicine,
                medicine_name=name,
                dosage=med.get('dosage') or '',
                frequency=med.get('frequency') or '',
                duration=med.get('duration') or '',
                route=med.get('route') or '',
                instructions=med.get('instructions') or med.get('remarks') or '',
                quantity=med.get('quantity') or None,
                sort_order=index + 1,
            )

        if appointment is not None and (diagnosis or symptoms):
            if diagnosis:
                appointment.reason_for_visit = ', '.join(diagnosis)
            if symptoms:
                appointment.notes = ', '.join(symptoms)
            appointment.save(update_fields=['reason_for_visit', 'notes', 'updated_at'])

        visit_date = next_visit_date(follow_up_date, follow_up_days, today=today)
        if advice or visit_date:
            VisitAdvice.objects.create(
                patient=patient,
                appointment=appointment,
                prescription=prescription,
                advice=advice or '',
                follow_up_days=int(follow_up_days) if follow_up_days not in (None, '') else None,
                next_visit_date=visit_date,
            )

        complete_active_entry(patient, user=user)

    logger.info('Prescription %s saved for patient %s by doctor %s', prescription.pk, patient.pk, doctor.pk)
    log_patient_action(
        user,
        'prescription_create',
        patient_id=patient.pk,
        meta={'prescription_id': prescription.pk, 'allergy_alerts': len(conflicts)},
    )
    return prescription, conflicts


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


def parse_json_list(value) -> list:
    """Coerce template list input: JSON strings are decoded, scalars wrapped."""
    if value in (None, ''):
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return [value]
    if isinstance(value, list):
        return value
    return [value]


def template_prefill(template) -> dict:
    """Payload the prescription screen loads when a template is applied."""
    return {
        'template_id': template.pk,
        'name': template.name,
        'category': template.category,
        'symptoms': template.symptoms,
        'diagnosis': template.diagnoses,
        'medications': template.medications,
        'investigations': template.investigations,
        'precautions': template.precautions,
        'diet_restrictions': template.diet_restrictions,
        'activities': template.activities,
        'advice': template.advice,
        'follow_up_days': template.follow_up_days,
        'duration_days': template.duration_days,
    }


# ---------------------------------------------------------------------------
# Follow-ups
# ---------------------------------------------------------------------------


def upcoming_follow_ups(days=7, *, patient_id=None, doctor=None):
    """Advice rows with an appointment and a next visit within ``days`` days."""
    start = timezone.localdate()
    qs = VisitAdvice.objects.filter(
        appointment__isnull=False,
        next_visit_date__gte=start,
        next_visit_date__lte=start + timedelta(days=days),
    ).select_related('patient', 'appointment', 'appointment__doctor')
    if patient_id:
        qs = qs.filter(patient_id=patient_id)
    if doctor is not None:
        qs = qs.filter(appointment__doctor=doctor)
    return qs.order_by('next_visit_date', 'id')
