"""
Celery application for background and periodic jobs.

Configuration is read from Django settings under the ``CELERY_`` prefix;
the beat schedule (``CELERY_BEAT_SCHEDULE``) drives the once-a-minute
medication reminder sweep.  Start a worker with an embedded scheduler::

    celery -A homecare worker -B -l info
"""
import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'homecare.settings')

app = Celery('homecare')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
