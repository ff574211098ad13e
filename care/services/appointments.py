"""
Appointment booking.

A booking is rejected when it overlaps another appointment of the same
physician, or of the same patient, on the same day.  Two slots overlap
when each starts before the other ends, so back-to-back visits are
allowed.  Canceled appointments never block a slot.
"""
import datetime
import logging
from typing import Optional

from django.db import transaction
from django.db.models import QuerySet
from rest_framework.exceptions import NotFound, ValidationError

from care.models import Appointment, Patient, Physician
from care.services.audit import log_action

logger = logging.getLogger(__name__)

PHYSICIAN_BUSY = 'This Physician Has an Appointment At The same time'
PATIENT_BUSY = 'This Patient Has an Appointment At The same time'


def serialize_appointment(a: Appointment) -> dict:
    return {
        'id': str(a.id),
        'appointmentDate': a.appointment_date.isoformat(),
        'startTime': a.start_time.isoformat(timespec='minutes'),
        'endTime': a.end_time.isoformat(timespec='minutes'),
        'patientId': a.patient_id,
        'patientName': a.patient.name,
        'physicianId': a.physician_id,
        'physicianName': a.physician.name,
        'meetingAddress': a.meeting_address,
        'physicianNotes': a.physician_notes,
        'status': a.status,
    }


def _base() -> QuerySet:
    return Appointment.objects.select_related('patient', 'physician').order_by(
        'appointment_date', 'start_time')


def get_appointment(pk) -> Appointment:
    a = _base().filter(id=pk).first()
    if not a:
        raise NotFound('Wrong ID')
    return a


def list_appointments(*, patient: Optional[Patient] = None, physician: Optional[Physician] = None,
                      date: Optional[datetime.date] = None) -> list[dict]:
    qs = _base()
    if patient is not None:
        qs = qs.filter(patient=patient)
    if physician is not None:
        qs = qs.filter(physician=physician)
    if date is not None:
        qs = qs.filter(appointment_date=date)
    return [serialize_appointment(a) for a in qs]


def overlapping(*, date: datetime.date, start: datetime.time, end: datetime.time,
                exclude=None) -> QuerySet:
    qs = Appointment.objects.filter(
        appointment_date=date, start_time__lt=end, end_time__gt=start,
    ).exclude(status='canceled')
    if exclude is not None:
        qs = qs.exclude(id=exclude)
    return qs


def _check_free(a: Appointment) -> None:
    if a.status == 'canceled':
        return
    if a.end_time <= a.start_time:
        raise ValidationError({'endTime': 'must be after startTime'})
    clashes = overlapping(date=a.appointment_date, start=a.start_time, end=a.end_time,
                          exclude=a.id if not a._state.adding else None)
    if clashes.filter(physician_id=a.physician_id).exists():
        raise ValidationError(PHYSICIAN_BUSY)
    if clashes.filter(patient_id=a.patient_id).exists():
        raise ValidationError(PATIENT_BUSY)


def _apply(a: Appointment, data: dict) -> None:
    if 'patientId' in data:
        a.patient = Patient.objects.filter(id=data['patientId']).first()
        if a.patient is None:
            raise NotFound('Wrong Patient ID')
    if 'physicianId' in data:
        a.physician = Physician.objects.filter(id=data['physicianId']).first()
        if a.physician is None:
            raise NotFound('Wrong Physician ID')
    for key, attr in (('appointmentDate', 'appointment_date'), ('startTime', 'start_time'),
                      ('endTime', 'end_time'), ('meetingAddress', 'meeting_address'),
                      ('physicianNotes', 'physician_notes'), ('status', 'status')):
        if key in data:
            setattr(a, attr, data[key])


@transaction.atomic
def book_appointment(current_user, data: dict) -> Appointment:
    a = Appointment()
    _apply(a, data)
    _check_free(a)
    a.save()
    logger.info("Appointment %s booked: patient=%s physician=%s %s %s",
                a.id, a.patient_id, a.physician_id, a.appointment_date, a.start_time)
    log_action(user=current_user, action='appointment_create', object_type='appointment',
               detail={'id': str(a.id), 'patientId': a.patient_id, 'physicianId': a.physician_id})
    return a


@transaction.atomic
def update_appointment(current_user, a: Appointment, data: dict) -> Appointment:
    _apply(a, data)
    _check_free(a)
    a.save()
    log_action(user=current_user, action='appointment_update', object_type='appointment',
               detail={'id': str(a.id), 'fields': sorted(data)})
    return a


@transaction.atomic
def delete_appointment(current_user, a: Appointment) -> None:
    aid = str(a.id)
    a.delete()
    log_action(user=current_user, action='appointment_delete', object_type='appointment',
               detail={'id': aid})
