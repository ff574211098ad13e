"""
Medication reminder sweep.

Once a minute every medication is loaded together with its patient and
each scheduled usage time is compared with the current time of day.  A
usage time strictly less than one minute away is *due* and produces one
WhatsApp reminder to the patient.  Comparison is a raw time-of-day
difference, so a 00:00 dose is 1439 minutes away from 23:59 and is not
matched across midnight.  The window spans one minute on either side
of a usage time while sweeps run once a minute, so a sweep that fires a
moment early (14:29:00.3 for a 14:30 dose) and the next one both match:
most doses are reminded twice.

Each dispatch is isolated: a missing phone number or a gateway error is
logged and recorded in the :class:`SweepResult` without stopping the
remaining reminders.  Errors while loading medications propagate.
"""
from __future__ import annotations

import datetime
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterator, List, Optional, Union

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from care.models import Medication
from care.services.messaging import MessageGateway, build_gateway

logger = logging.getLogger(__name__)

DUE_WINDOW_MINUTES = 1
REMINDER_TEMPLATE = "Hello {patient}! Don't forget to take {medication} Now with Dose {dose}"
SWEEP_LOCK_KEY = 'care:medication-sweep:lock'


class MissingContact(Exception):
    """The medication has no patient or the patient has no phone number."""


@dataclass
class DispatchFailure:
    medication_id: int
    usage_time: Optional[datetime.time]
    error: str


@dataclass
class SweepResult:
    now: datetime.time
    checked: int = 0
    dispatched: int = 0
    failures: List[DispatchFailure] = field(default_factory=list)


def _seconds(t: datetime.time) -> float:
    return t.hour * 3600 + t.minute * 60 + t.second + t.microsecond / 1_000_000


def minutes_between(a: datetime.time, b: datetime.time) -> float:
    return abs(_seconds(a) - _seconds(b)) / 60


def is_due(usage_time: datetime.time, now: datetime.time) -> bool:
    return minutes_between(usage_time, now) < DUE_WINDOW_MINUTES


def due_usage_times(medication: Medication, now: datetime.time) -> list[datetime.time]:
    """Usage times of ``medication`` that are due at ``now``, not deduplicated."""
    return [t for t in medication.get_usage_times() if is_due(t, now)]


def format_dose(dose) -> str:
    if dose is None:
        return ''
    return format(Decimal(dose).normalize(), 'f')


def build_reminder_message(medication: Medication) -> str:
    return REMINDER_TEMPLATE.format(
        patient=medication.patient.name,
        medication=medication.name,
        dose=format_dose(medication.dose),
    )


def _dispatch(gateway: MessageGateway, medication: Medication) -> None:
    patient = medication.patient
    if patient is None or not patient.phone:
        raise MissingContact(f"medication {medication.id} has no patient phone number")
    gateway.send(patient.phone, build_reminder_message(medication))


def run_medication_sweep(gateway: MessageGateway,
                         now: Union[datetime.time, datetime.datetime, None] = None) -> SweepResult:
    """Send a reminder for every medication usage time due at ``now``.

    ``now`` defaults to the current local time (``TIME_ZONE``); a
    datetime is reduced to its time of day.
    """
    if now is None:
        now = timezone.localtime().time()
    elif isinstance(now, datetime.datetime):
        now = now.time()

    medications = list(Medication.objects.select_related('patient'))
    result = SweepResult(now=now, checked=len(medications))
    logger.info("At %s found %d medications", now.isoformat(timespec='seconds'), len(medications))

    for medication in medications:
        try:
            due = due_usage_times(medication, now)
        except (TypeError, ValueError) as exc:
            logger.warning("Medication %s has malformed usage times %r: %s",
                           medication.id, medication.usage_times, exc)
            result.failures.append(DispatchFailure(medication.id, None, str(exc)))
            continue
        for usage_time in due:
            logger.info("%s due at %s", medication.name, usage_time.isoformat(timespec='minutes'))
            try:
                _dispatch(gateway, medication)
            except Exception as exc:
                logger.exception("Reminder for medication %s at %s failed", medication.id, usage_time)
                result.failures.append(DispatchFailure(medication.id, usage_time, str(exc)))
            else:
                result.dispatched += 1

    logger.info("Sweep at %s done: %d dispatched, %d failed",
                now.isoformat(timespec='seconds'), result.dispatched, len(result.failures))
    return result


@contextmanager
def sweep_lock(timeout: Optional[int] = None) -> Iterator[bool]:
    """Single-flight guard shared by every worker through the Django cache.

    Yields ``True`` when this caller owns the lock.
    """
    token = uuid.uuid4().hex
    ttl = timeout if timeout is not None else settings.MEDICATION_SWEEP_LOCK_TIMEOUT
    acquired = cache.add(SWEEP_LOCK_KEY, token, ttl)
    try:
        yield acquired
    finally:
        if acquired and cache.get(SWEEP_LOCK_KEY) == token:
            cache.delete(SWEEP_LOCK_KEY)


def check_medications(gateway: Optional[MessageGateway] = None,
                      now: Union[datetime.time, datetime.datetime, None] = None) -> Optional[SweepResult]:
    """Run one sweep unless another one is still in progress."""
    with sweep_lock() as acquired:
        if not acquired:
            logger.warning("Previous medication sweep still running; skipping this slot")
            return None
        return run_medication_sweep(gateway or build_gateway(), now=now)
