"""Care application for the homecare backend.

This package contains models, serializers, views, services and the
periodic medication reminder job.
"""
