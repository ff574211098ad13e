"""
Patient management views.

Staff (administrators and physicians) may list, create, update and
delete patients.  A patient user linked to a record may read its own
details through :func:`patient_detail`.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from care.permissions import IsStaffRole, is_staff_user
from care.serializers.patient import PatientWriteSerializer, PatientListQuerySerializer
from care.services import patients as svc


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def patients_collection(request):
    if request.method == 'GET':
        q = PatientListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        page = q.validated_data.get('page') or 1
        page_size = q.validated_data.get('pageSize') or 0
        data, total = svc.list_patients(q=q.validated_data.get('q'), page=page, page_size=page_size)
        return Response({'ok': True, 'data': data,
                         'pagination': {'total': total, 'page': page, 'pageSize': page_size or total}})
    s = PatientWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = svc.create_patient(request.user, s.validated_data)
    return Response(svc.serialize_patient(patient), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def patient_detail(request, pk: int):
    patient = svc.get_patient_for(request.user, pk)
    if request.method == 'GET':
        return Response(svc.serialize_patient(patient))
    if not is_staff_user(request.user):
        raise PermissionDenied('only staff may modify patients')
    if request.method == 'DELETE':
        svc.delete_patient(request.user, patient)
        return Response({'ok': True})
    s = PatientWriteSerializer(data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    patient = svc.update_patient(request.user, patient, s.validated_data)
    return Response(svc.serialize_patient(patient))
