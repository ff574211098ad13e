"""Homecare backend project package.

The Celery application is imported here so that ``shared_task``
decorators bind to it whenever Django starts.
"""
from .celery import app as celery_app

__all__ = ('celery_app',)
