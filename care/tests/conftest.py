import datetime
from decimal import Decimal

import pytest
from django.core.cache import cache

from care.models import Patient, Medication


class RecordingGateway:
    """Collects outgoing messages; raises for phone numbers listed in ``fail_for``."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def send(self, phone, body):
        if phone in self.fail_for:
            raise RuntimeError('gateway unavailable')
        self.sent.append((phone, body))
        return f'SM{len(self.sent)}'


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def make_patient(db):
    def _make(name='Mona', phone='01012345678', **kw):
        return Patient.objects.create(name=name, phone=phone, **kw)
    return _make


@pytest.fixture
def make_medication(db, make_patient):
    def _make(times, patient=None, name='Metformin', dose=Decimal('500'), **kw):
        m = Medication(patient=patient if patient is not None else make_patient(),
                       name=name, dose=dose, dose_frequency=len(times), **kw)
        m.set_usage_times(datetime.time.fromisoformat(t) for t in times)
        m.save()
        return m
    return _make


@pytest.fixture
def gateway_factory():
    return RecordingGateway
