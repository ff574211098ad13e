"""
Specializations and the physicians listed under them.

Physicians publish free slots (``available_times``) that patients pick
from when booking; the slots are plain datetimes kept sorted and unique.
"""
import datetime
from typing import Iterable, Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import ProtectedError
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from care.models import Physician, Specialization
from care.services.audit import log_action

User = get_user_model()


def serialize_specialization(s: Specialization) -> dict:
    return {'id': s.id, 'name': s.name, 'description': s.description}


def serialize_physician(p: Physician) -> dict:
    return {
        'id': p.id,
        'name': p.name,
        'specializationId': p.specialization_id,
        'specializationName': p.specialization.name,
        'clinicalAddress': p.clinical_address,
        'sessionPrice': str(p.session_price),
        'userId': p.user_id,
    }


def get_specialization(pk: int) -> Specialization:
    s = Specialization.objects.filter(id=pk).first()
    if not s:
        raise NotFound('Wrong ID')
    return s


def get_physician(pk: int) -> Physician:
    p = Physician.objects.select_related('specialization').filter(id=pk).first()
    if not p:
        raise NotFound('Wrong ID')
    return p


def list_specializations() -> list[dict]:
    return [serialize_specialization(s) for s in Specialization.objects.order_by('name')]


def save_specialization(current_user, data: dict, s: Optional[Specialization] = None) -> Specialization:
    created = s is None
    s = s or Specialization()
    for attr in ('name', 'description'):
        if attr in data:
            setattr(s, attr, data[attr])
    s.save()
    log_action(user=current_user, action='specialization_create' if created else 'specialization_update',
               object_type='specialization', object_id=s.id, detail={'name': s.name})
    return s


def delete_specialization(current_user, s: Specialization) -> None:
    sid, name = s.id, s.name
    try:
        s.delete()
    except ProtectedError:
        raise ValidationError({'specialization': 'Specialization still has physicians'})
    log_action(user=current_user, action='specialization_delete', object_type='specialization',
               object_id=sid, detail={'name': name})


def list_physicians(specialization: Optional[Specialization] = None) -> list[dict]:
    qs = Physician.objects.select_related('specialization').order_by('name', 'id')
    if specialization is not None:
        qs = qs.filter(specialization=specialization)
    return [serialize_physician(p) for p in qs]


def _linked_user(user_id: Optional[int]):
    if not user_id:
        return None
    user = User.objects.filter(id=user_id, role='physician').first()
    if not user:
        raise ValidationError({'userId': 'no physician user with this id'})
    return user


@transaction.atomic
def save_physician(current_user, data: dict, p: Optional[Physician] = None) -> Physician:
    created = p is None
    p = p or Physician()
    if 'name' in data:
        p.name = data['name']
    if 'clinicalAddress' in data:
        p.clinical_address = data['clinicalAddress']
    if 'sessionPrice' in data:
        p.session_price = data['sessionPrice']
    if 'specializationId' in data:
        p.specialization = get_specialization(data['specializationId'])
    if 'userId' in data:
        p.user = _linked_user(data['userId'])
    p.save()
    log_action(user=current_user, action='physician_create' if created else 'physician_update',
               object_type='physician', object_id=p.id, detail={'name': p.name})
    return p


@transaction.atomic
def delete_physician(current_user, p: Physician) -> None:
    pid, name = p.id, p.name
    p.delete()
    log_action(user=current_user, action='physician_delete', object_type='physician', object_id=pid,
               detail={'name': name})


def free_times(p: Physician, day: Optional[datetime.date] = None) -> list[str]:
    """Published free slots, optionally restricted to one calendar day."""
    slots = sorted(datetime.datetime.fromisoformat(s) for s in (p.available_times or []))
    if day is not None:
        slots = [s for s in slots if s.date() == day]
    return [s.isoformat(timespec='minutes') for s in slots]


def _wall_clock(s: datetime.datetime) -> datetime.datetime:
    if timezone.is_aware(s):
        s = timezone.make_naive(s)
    return s.replace(microsecond=0)


def add_free_times(p: Physician, slots: Iterable[datetime.datetime]) -> list[str]:
    merged = {datetime.datetime.fromisoformat(s) for s in (p.available_times or [])}
    merged.update(_wall_clock(s) for s in slots)
    p.available_times = [s.isoformat(timespec='seconds') for s in sorted(merged)]
    p.save(update_fields=['available_times'])
    return free_times(p)
