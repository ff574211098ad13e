"""
Patient record operations.

Views validate input with the serializers in ``care.serializers.patient``
and delegate here; every mutation leaves an :class:`AuditEvent`.
"""
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from care.models import Patient
from care.permissions import is_staff_user
from care.services.audit import log_action

User = get_user_model()

FIELD_MAP = {
    'name': 'name',
    'phone': 'phone',
    'gender': 'gender',
    'address': 'address',
    'city': 'city',
}


def serialize_patient(p: Patient) -> dict:
    return {
        'id': p.id,
        'name': p.name,
        'phone': p.phone,
        'gender': p.gender,
        'address': p.address,
        'city': p.city,
        'userId': p.user_id,
        'createdAt': p.created_at.isoformat() if p.created_at else None,
    }


def get_patient_for(user, patient_id: int) -> Patient:
    """Return the patient if ``user`` may read it: staff, or the linked patient user."""
    patient = Patient.objects.filter(id=patient_id).first()
    if not patient:
        raise NotFound('Wrong ID')
    if is_staff_user(user):
        return patient
    if patient.user_id and patient.user_id == getattr(user, 'id', None):
        return patient
    raise PermissionDenied('forbidden for this patient')


def list_patients(*, q: Optional[str]=None, page: int=1, page_size: int=0) -> tuple[list[dict], int]:
    qs = Patient.objects.all()
    if q:
        qs = qs.filter(Q(name__icontains=q) | Q(phone__icontains=q))
    total = qs.count()
    qs = qs.order_by('-created_at', '-id')
    if page_size:
        start = (page-1)*page_size
        qs = qs[start:start+page_size]
    return [serialize_patient(p) for p in qs], total


def _linked_user(user_id: Optional[int]):
    if not user_id:
        return None
    user = User.objects.filter(id=user_id, role='patient').first()
    if not user:
        raise ValidationError({'userId': 'no patient user with this id'})
    return user


@transaction.atomic
def create_patient(current_user, data: dict) -> Patient:
    patient = Patient(**{attr: data[key] for key, attr in FIELD_MAP.items() if key in data})
    patient.user = _linked_user(data.get('userId'))
    patient.save()
    log_action(user=current_user, action='patient_create', object_type='patient', object_id=patient.id,
               detail={'name': patient.name})
    return patient


@transaction.atomic
def update_patient(current_user, patient: Patient, data: dict) -> Patient:
    changed = []
    for key, attr in FIELD_MAP.items():
        if key in data:
            setattr(patient, attr, data[key])
            changed.append(attr)
    if 'userId' in data:
        patient.user = _linked_user(data.get('userId'))
        changed.append('user')
    patient.save()
    log_action(user=current_user, action='patient_update', object_type='patient', object_id=patient.id,
               detail={'fields': changed})
    return patient


@transaction.atomic
def delete_patient(current_user, patient: Patient) -> None:
    pid, name = patient.id, patient.name
    patient.delete()
    log_action(user=current_user, action='patient_delete', object_type='patient', object_id=pid,
               detail={'name': name})
