"""
Medication records and the per-patient daily dose schedule.

Reads tolerate usage times that bypassed validation (older rows, raw
admin edits): unparseable entries are logged and left out of the
response instead of failing the request.
"""
import datetime
import logging
from decimal import Decimal

from django.db import transaction

from care.models import Medication, Patient

logger = logging.getLogger(__name__)


def format_time(t) -> str:
    return t.isoformat(timespec='seconds' if t.second else 'minutes')


def readable_usage_times(m: Medication) -> list[datetime.time]:
    raw = m.usage_times or []
    if not isinstance(raw, list):
        logger.warning("Medication %s has non-list usage times %r", m.id, raw)
        return []
    times = []
    for value in raw:
        try:
            times.append(datetime.time.fromisoformat(value))
        except (TypeError, ValueError):
            logger.warning("Medication %s has unreadable usage time %r", m.id, value)
    return times


def serialize_medication(m: Medication) -> dict:
    return {
        'id': m.id,
        'name': m.name,
        'description': m.description,
        'dose': str(m.dose) if m.dose is not None else None,
        'doseFrequency': m.dose_frequency,
        'usageTimes': [format_time(t) for t in readable_usage_times(m)],
        'patientId': m.patient_id,
    }


def _apply(m: Medication, data: dict) -> None:
    if 'name' in data:
        m.name = data['name']
    if 'description' in data:
        m.description = data['description']
    if 'dose' in data:
        m.dose = Decimal(data['dose']) if data['dose'] is not None else None
    if 'doseFrequency' in data:
        m.dose_frequency = data['doseFrequency']
    if 'usageTimes' in data:
        m.set_usage_times(data['usageTimes'] or [])


@transaction.atomic
def add_medication(patient: Patient, data: dict) -> Medication:
    m = Medication(patient=patient)
    _apply(m, data)
    m.save()
    return m


@transaction.atomic
def update_medication(m: Medication, data: dict) -> Medication:
    _apply(m, data)
    m.save()
    return m


def todays_schedule(patient: Patient) -> list[dict]:
    """One entry per dose slot across all of the patient's medications, by time of day."""
    slots = []
    for m in patient.medications.all().order_by('id'):
        for t in readable_usage_times(m):
            slots.append((t, m))
    slots.sort(key=lambda s: s[0])
    return [{
        'time': format_time(t),
        'medicationId': m.id,
        'name': m.name,
        'dose': str(m.dose) if m.dose is not None else None,
        'description': m.description,
    } for t, m in slots]
