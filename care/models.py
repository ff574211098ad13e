"""
Database models for the homecare backend.

These models capture patients, the medications prescribed to them, an
ICD disease catalogue with per-patient diagnoses, physicians grouped by
specialization, home-visit appointments and an audit trail.
Medication usage times are stored as a JSON list of ``"HH:MM:SS"``
strings; :meth:`Medication.get_usage_times` turns them back into
:class:`datetime.time` values for the reminder sweep.
"""
from __future__ import annotations

import datetime
import uuid

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models


def validate_usage_times(value) -> None:
    """Reject anything but a list of ISO time-of-day strings."""
    if value in (None, ''):
        return
    if not isinstance(value, list):
        raise ValidationError('Usage times must be a list of "HH:MM:SS" strings.')
    bad = []
    for item in value:
        try:
            datetime.time.fromisoformat(item)
        except (TypeError, ValueError):
            bad.append(repr(item))
    if bad:
        raise ValidationError('Invalid usage times: %(bad)s', params={'bad': ', '.join(bad)})


class User(AbstractUser):
    """Custom user model with a role.

    ``admin`` and ``physician`` are staff roles that manage patient
    records; a ``patient`` user may be linked to a :class:`Patient` and
    only read its own data.
    """
    ROLE_CHOICES = [
        ('admin', 'Administrator'),
        ('physician', 'Physician'),
        ('patient', 'Patient'),
    ]
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default='patient')

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Patient(models.Model):
    """A home-care patient and the contact details reminders are sent to."""
    GENDER_CHOICES = [
        ('male', 'Male'),
        ('female', 'Female'),
    ]
    user = models.OneToOneField(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='patient'
    )
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.phone})"


class Medication(models.Model):
    """A prescribed medication with its daily dose schedule."""
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    dose_frequency = models.PositiveIntegerField(null=True, blank=True)
    dose = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    # Ordered list of "HH:MM:SS" strings, no date component
    usage_times = models.JSONField(default=list, blank=True, null=True, validators=[validate_usage_times])
    patient = models.ForeignKey(
        Patient, null=True, blank=True, on_delete=models.CASCADE, related_name='medications'
    )

    def get_usage_times(self) -> list[datetime.time]:
        return [datetime.time.fromisoformat(t) for t in (self.usage_times or [])]

    def set_usage_times(self, times) -> None:
        self.usage_times = [t.isoformat(timespec='seconds') for t in times]

    def __str__(self) -> str:
        return f"{self.name} (patient={self.patient_id})"


class Disease(models.Model):
    """An ICD catalogue entry keyed by its code."""
    icd = models.CharField(max_length=16, primary_key=True)
    name = models.CharField(max_length=512, db_index=True)

    def __str__(self) -> str:
        return f"{self.icd} {self.name}"


class PatientDisease(models.Model):
    """A diagnosis linking a patient to a disease."""
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='diagnoses')
    disease = models.ForeignKey(
        Disease, on_delete=models.CASCADE, related_name='diagnoses', db_column='icd'
    )
    diagnosis_date = models.DateField(null=True, blank=True)
    recovered_date = models.DateField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['patient', 'diagnosis_date'], name='care_diagnosis_patient_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.patient_id}: {self.disease_id}"


class Specialization(models.Model):
    name = models.CharField(max_length=128, unique=True)
    description = models.TextField(blank=True)

    def __str__(self) -> str:
        return self.name


class Physician(models.Model):
    """A physician who visits patients; optionally linked to a login account."""
    user = models.OneToOneField(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='physician'
    )
    name = models.CharField(max_length=255)
    specialization = models.ForeignKey(
        Specialization, on_delete=models.PROTECT, related_name='physicians'
    )
    clinical_address = models.CharField(max_length=255)
    session_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    # Free slots offered for booking, ISO "YYYY-MM-DDTHH:MM:SS" strings
    available_times = models.JSONField(default=list, blank=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.specialization_id})"


class Appointment(models.Model):
    """A home visit booked between a patient and a physician."""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('confirmed', 'Confirmed'),
        ('canceled', 'Canceled'),
        ('completed', 'Completed'),
    ]
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    appointment_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='appointments')
    physician = models.ForeignKey(Physician, on_delete=models.CASCADE, related_name='appointments')
    meeting_address = models.CharField(max_length=255)
    physician_notes = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='pending')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['physician', 'appointment_date'], name='care_appt_physician_idx'),
            models.Index(fields=['patient', 'appointment_date'], name='care_appt_patient_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.appointment_date} {self.start_time:%H:%M}-{self.end_time:%H:%M} ({self.status})"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='care_audit_action_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='care_audit_object_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
