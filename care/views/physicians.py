"""
Specialization and physician endpoints.

Any authenticated user may browse; only administrators change the
directory.  A physician may publish free slots on their own record.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from care.permissions import IsStaffRole, is_admin_user
from care.serializers.physician import (
    SpecializationWriteSerializer, PhysicianWriteSerializer, FreeTimesSerializer, FreeTimesQuerySerializer,
)
from care.services import physicians as svc
from care.services.appointments import list_appointments


def _require_admin(user):
    if not is_admin_user(user):
        raise PermissionDenied('only administrators may change the physician directory')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def specializations_collection(request):
    if request.method == 'GET':
        return Response(svc.list_specializations())
    _require_admin(request.user)
    s = SpecializationWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    spec = svc.save_specialization(request.user, s.validated_data)
    return Response(svc.serialize_specialization(spec), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def specialization_detail(request, pk: int):
    spec = svc.get_specialization(pk)
    if request.method == 'GET':
        return Response(svc.serialize_specialization(spec))
    _require_admin(request.user)
    if request.method == 'DELETE':
        svc.delete_specialization(request.user, spec)
        return Response({'ok': True})
    s = SpecializationWriteSerializer(data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    spec = svc.save_specialization(request.user, s.validated_data, spec)
    return Response(svc.serialize_specialization(spec))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def specialization_physicians(request, pk: int):
    return Response(svc.list_physicians(svc.get_specialization(pk)))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def physicians_collection(request):
    if request.method == 'GET':
        return Response(svc.list_physicians())
    _require_admin(request.user)
    s = PhysicianWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    p = svc.save_physician(request.user, s.validated_data)
    return Response(svc.serialize_physician(p), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def physician_detail(request, pk: int):
    p = svc.get_physician(pk)
    if request.method == 'GET':
        return Response(svc.serialize_physician(p))
    _require_admin(request.user)
    if request.method == 'DELETE':
        svc.delete_physician(request.user, p)
        return Response({'ok': True})
    s = PhysicianWriteSerializer(data=request.data, partial=request.method == 'PATCH')
    s.is_valid(raise_exception=True)
    p = svc.save_physician(request.user, s.validated_data, p)
    return Response(svc.serialize_physician(p))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def physician_appointments(request, pk: int):
    return Response(list_appointments(physician=svc.get_physician(pk)))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def physician_free_times(request, pk: int):
    p = svc.get_physician(pk)
    if request.method == 'GET':
        q = FreeTimesQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        return Response({'ok': True, 'physicianId': p.id, 'data': svc.free_times(p, q.validated_data.get('date'))})
    if not (is_admin_user(request.user) or (p.user_id and p.user_id == request.user.id)):
        raise PermissionDenied('only the physician may publish free times')
    s = FreeTimesSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = svc.add_free_times(p, s.validated_data['times'])
    return Response({'ok': True, 'physicianId': p.id, 'data': data}, status=status.HTTP_201_CREATED)
