import datetime
from io import StringIO

import pytest
from django.core.cache import cache
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import DatabaseError
from django.utils import timezone

from care import tasks
from care.models import Medication
from care.services import reminders
from care.services.reminders import SWEEP_LOCK_KEY, sweep_lock

pytestmark = pytest.mark.django_db


@pytest.fixture
def patched_gateway(monkeypatch, gateway):
    monkeypatch.setattr(reminders, 'build_gateway', lambda: gateway)
    return gateway


def test_task_runs_sweep_at_current_local_time(patched_gateway, make_medication):
    now = timezone.localtime().time().replace(microsecond=0)
    make_medication([now.isoformat()])

    out = tasks.check_medications()

    assert out == {'skipped': False, 'checked': 1, 'dispatched': 1, 'failed': 0}
    assert len(patched_gateway.sent) == 1
    assert cache.get(SWEEP_LOCK_KEY) is None


def test_task_skips_while_previous_sweep_holds_lock(patched_gateway, make_medication):
    now = timezone.localtime().time().replace(microsecond=0)
    make_medication([now.isoformat()])
    cache.add(SWEEP_LOCK_KEY, 'other-worker', 30)

    out = tasks.check_medications()

    assert out == {'skipped': True}
    assert patched_gateway.sent == []
    assert cache.get(SWEEP_LOCK_KEY) == 'other-worker'


def test_lock_is_released_when_sweep_raises():
    with pytest.raises(RuntimeError):
        with sweep_lock() as acquired:
            assert acquired
            raise RuntimeError('db down')
    assert cache.get(SWEEP_LOCK_KEY) is None


def test_task_propagates_sweep_errors_and_releases_lock(patched_gateway, make_medication, monkeypatch):
    make_medication([timezone.localtime().time().replace(microsecond=0).isoformat()])

    def broken(*args, **kwargs):
        raise DatabaseError('connection lost')

    monkeypatch.setattr(Medication.objects, 'select_related', broken)
    with pytest.raises(DatabaseError):
        tasks.check_medications()
    assert patched_gateway.sent == []
    assert cache.get(SWEEP_LOCK_KEY) is None


def test_nested_lock_is_not_acquired_twice():
    with sweep_lock() as first:
        with sweep_lock() as second:
            assert first and not second
        assert cache.get(SWEEP_LOCK_KEY) is not None


def test_beat_schedule_runs_every_minute(settings):
    entry = settings.CELERY_BEAT_SCHEDULE['check-medications']
    assert entry['task'] == 'care.tasks.check_medications'
    assert entry['schedule'].minute == set(range(60))


def test_command_with_simulated_time(patched_gateway, make_medication):
    make_medication(['14:30', '21:00'])
    out = StringIO()
    call_command('check_medications', '--at', '14:30', stdout=out)
    assert 'Checked 1 medications at 14:30:00: 1 reminders sent' in out.getvalue()
    assert len(patched_gateway.sent) == 1


def test_command_reports_failures(monkeypatch, gateway_factory, make_patient, make_medication):
    monkeypatch.setattr(reminders, 'build_gateway', lambda: gateway_factory(fail_for={'0101'}))
    make_medication(['09:00'], patient=make_patient(phone='0101'))
    out = StringIO()
    call_command('check_medications', '--at', '09:00', stdout=out)
    assert '1 failed' in out.getvalue()


def test_command_rejects_bad_time():
    with pytest.raises(CommandError):
        call_command('check_medications', '--at', 'noon')


def test_command_skips_when_locked(patched_gateway):
    cache.add(SWEEP_LOCK_KEY, 'other-worker', 30)
    out = StringIO()
    call_command('check_medications', '--at', datetime.time(8, 0).isoformat(), stdout=out)
    assert 'skipped' in out.getvalue()
