"""
Appointment endpoints.

Staff book, reschedule and cancel visits; a patient user may read the
appointments of its own record.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from care.models import Patient, Physician
from care.permissions import IsStaffRole, is_staff_user
from care.serializers.appointment import AppointmentWriteSerializer, AppointmentListQuerySerializer
from care.services import appointments as svc
from care.services.patients import get_patient_for


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def appointments_collection(request):
    if request.method == 'GET':
        q = AppointmentListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        filters = {'date': q.validated_data.get('date')}
        if q.validated_data.get('patientId'):
            filters['patient'] = Patient.objects.filter(id=q.validated_data['patientId']).first()
            if filters['patient'] is None:
                raise NotFound('Wrong Patient ID')
        if q.validated_data.get('physicianId'):
            filters['physician'] = Physician.objects.filter(id=q.validated_data['physicianId']).first()
            if filters['physician'] is None:
                raise NotFound('Wrong Physician ID')
        return Response(svc.list_appointments(**filters))
    s = AppointmentWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    a = svc.book_appointment(request.user, s.validated_data)
    return Response(svc.serialize_appointment(a), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def appointment_detail(request, pk):
    a = svc.get_appointment(pk)
    if request.method == 'GET':
        get_patient_for(request.user, a.patient_id)
        return Response(svc.serialize_appointment(a))
    if not is_staff_user(request.user):
        raise PermissionDenied('only staff may change appointments')
    if request.method == 'DELETE':
        svc.delete_appointment(request.user, a)
        return Response({'ok': True})
    s = AppointmentWriteSerializer(data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    a = svc.update_appointment(request.user, a, s.validated_data)
    return Response(svc.serialize_appointment(a))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def patient_appointments(request, pk: int):
    patient = get_patient_for(request.user, pk)
    q = AppointmentListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response(svc.list_appointments(patient=patient, date=q.validated_data.get('date')))
