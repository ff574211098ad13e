"""
ICD disease catalogue and patient diagnoses.

The catalogue is loaded from plain-text ICD listings where each line
holds a code, a single space and the disease name, e.g.::

    A00.0 Cholera due to Vibrio cholerae 01, biovar cholerae

Blank lines and lines without a name are skipped; codes already in the
catalogue are left untouched.
"""
import logging
from typing import Iterable, Iterator, Optional

from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import NotFound

from care.models import Disease, Patient, PatientDisease

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


def search_diseases(name: str) -> list[dict]:
    qs = Disease.objects.filter(name__icontains=name.strip()).order_by('icd')[:SEARCH_LIMIT]
    return [{'icd': d.icd, 'name': d.name} for d in qs]


def parse_icd_lines(lines: Iterable[str]) -> Iterator[tuple[str, str]]:
    for line in lines:
        line = line.strip()
        if not line:
            continue
        code, sep, name = line.partition(' ')
        name = name.strip()
        if not sep or not code or not name:
            continue
        yield code.strip().upper(), name


def _flush(batch: dict[str, str]) -> int:
    existing = set(Disease.objects.filter(icd__in=batch.keys()).values_list('icd', flat=True))
    new = [Disease(icd=code, name=name) for code, name in batch.items() if code not in existing]
    Disease.objects.bulk_create(new, ignore_conflicts=True)
    return len(new)


def import_icd_codes(lines: Iterable[str], batch_size: Optional[int]=None) -> dict:
    """Insert catalogue entries in batches; returns ``{'read': n, 'created': m}``."""
    batch_size = batch_size or settings.ICD_IMPORT_BATCH_SIZE
    read = created = 0
    batch: dict[str, str] = {}
    for code, name in parse_icd_lines(lines):
        read += 1
        batch[code] = name
        if len(batch) >= batch_size:
            created += _flush(batch)
            batch = {}
    if batch:
        created += _flush(batch)
    logger.info("ICD import: %d lines read, %d diseases created", read, created)
    return {'read': read, 'created': created}


def serialize_diagnosis(pd: PatientDisease) -> dict:
    return {
        'id': pd.id,
        'patientId': pd.patient_id,
        'icd': pd.disease_id,
        'diseaseName': pd.disease.name,
        'diagnosisDate': pd.diagnosis_date.isoformat() if pd.diagnosis_date else None,
        'recoveredDate': pd.recovered_date.isoformat() if pd.recovered_date else None,
    }


def list_diagnoses(patient: Patient) -> list[dict]:
    qs = PatientDisease.objects.filter(patient=patient).select_related('disease').order_by('-diagnosis_date', '-id')
    return [serialize_diagnosis(pd) for pd in qs]


@transaction.atomic
def add_diagnosis(patient: Patient, *, icd: str, diagnosis_date=None, recovered_date=None) -> PatientDisease:
    disease = Disease.objects.filter(icd=icd).first()
    if not disease:
        raise NotFound('Wrong ICD Code')
    return PatientDisease.objects.create(
        patient=patient, disease=disease,
        diagnosis_date=diagnosis_date, recovered_date=recovered_date,
    )
