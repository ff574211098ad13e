"""
Django admin registrations for the care models.

Staff accounts are provisioned here (or with ``createsuperuser``) and
records can be inspected and corrected by hand.
"""

from django.contrib import admin

from .models import (
    User, Patient, Medication, Disease, PatientDisease, Specialization, Physician, Appointment, AuditEvent,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('username', 'first_name', 'last_name')


class MedicationInline(admin.TabularInline):
    model = Medication
    extra = 0


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'phone', 'gender', 'city', 'created_at')
    list_filter = ('gender', 'city')
    search_fields = ('name', 'phone')
    inlines = [MedicationInline]


@admin.register(Medication)
class MedicationAdmin(admin.ModelAdmin):
    list_display = ('name', 'patient', 'dose', 'dose_frequency', 'usage_times')
    search_fields = ('name', 'patient__name')


@admin.register(Disease)
class DiseaseAdmin(admin.ModelAdmin):
    list_display = ('icd', 'name')
    search_fields = ('icd', 'name')


@admin.register(PatientDisease)
class PatientDiseaseAdmin(admin.ModelAdmin):
    list_display = ('patient', 'disease', 'diagnosis_date', 'recovered_date')
    search_fields = ('patient__name', 'disease__icd', 'disease__name')


@admin.register(Specialization)
class SpecializationAdmin(admin.ModelAdmin):
    list_display = ('id', 'name')
    search_fields = ('name',)


@admin.register(Physician)
class PhysicianAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'specialization', 'clinical_address', 'session_price')
    list_filter = ('specialization',)
    search_fields = ('name',)


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('appointment_date', 'start_time', 'end_time', 'patient', 'physician', 'status')
    list_filter = ('status', 'appointment_date')
    search_fields = ('patient__name', 'physician__name')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
