from __future__ import annotations

from django.conf import settings
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.parsers import MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from care.permissions import IsAdminRole, is_staff_user
from care.serializers.disease import (
    DiseaseSearchQuerySerializer, PatientDiseaseCreateSerializer, IcdImportSerializer,
)
from care.services.diseases import (
    search_diseases, import_icd_codes, list_diagnoses, add_diagnosis, serialize_diagnosis,
)
from care.services.patients import get_patient_for


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def disease_search(request):
    q = DiseaseSearchQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response(search_diseases(q.validated_data['name']))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
@parser_classes([MultiPartParser])
def disease_import(request):
    """Bulk load the ICD catalogue from a ``.txt`` upload (``CODE name`` per line)."""
    s = IcdImportSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    f = s.validated_data['file']
    if f.size > settings.UPLOAD_MAX_MB * 1024 * 1024:
        raise ValidationError({'file': 'File too large'})
    lines = (raw.decode('utf-8', errors='ignore') for raw in f)
    result = import_icd_codes(lines)
    return Response({'ok': True, **result}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def patient_diseases(request, pk: int):
    patient = get_patient_for(request.user, pk)
    if request.method == 'GET':
        return Response(list_diagnoses(patient))
    if not is_staff_user(request.user):
        raise PermissionDenied('only staff may record diagnoses')
    s = PatientDiseaseCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    pd = add_diagnosis(
        patient,
        icd=s.validated_data['icd'],
        diagnosis_date=s.validated_data.get('diagnosisDate'),
        recovered_date=s.validated_data.get('recoveredDate'),
    )
    return Response(serialize_diagnosis(pd), status=status.HTTP_201_CREATED)
