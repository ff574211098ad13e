import logging

from celery import shared_task

from care.services.reminders import check_medications as run_check

logger = logging.getLogger(__name__)


@shared_task(name='care.tasks.check_medications')
def check_medications() -> dict:
    """Periodic medication reminder sweep, scheduled every minute by beat."""
    result = run_check()
    if result is None:
        return {'skipped': True}
    return {
        'skipped': False,
        'checked': result.checked,
        'dispatched': result.dispatched,
        'failed': len(result.failures),
    }
