"""
Medication endpoints.

Medications hang off a patient; their ``usageTimes`` drive the minute
reminder sweep in :mod:`care.services.reminders`.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from care.models import Medication
from care.permissions import IsStaffRole, is_staff_user
from care.serializers.medication import MedicationWriteSerializer
from care.services.medications import (
    add_medication, update_medication, serialize_medication, todays_schedule,
)
from care.services.patients import get_patient_for


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def patient_medications(request, pk: int):
    patient = get_patient_for(request.user, pk)
    if request.method == 'GET':
        meds = list(patient.medications.all().order_by('id'))
        if not meds:
            raise NotFound('No Medications')
        return Response([serialize_medication(m) for m in meds])
    if not is_staff_user(request.user):
        raise PermissionDenied('only staff may prescribe medications')
    s = MedicationWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    m = add_medication(patient, s.validated_data)
    return Response(serialize_medication(m), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def patient_medications_today(request, pk: int):
    patient = get_patient_for(request.user, pk)
    return Response({'ok': True, 'patientId': patient.id, 'data': todays_schedule(patient)})


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def medication_detail(request, pk: int):
    m = get_object_or_404(Medication, pk=pk)
    if request.method == 'DELETE':
        m.delete()
        return Response({'ok': True})
    s = MedicationWriteSerializer(data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    m = update_medication(m, s.validated_data)
    return Response(serialize_medication(m))
