"""
ASGI config for homecare project.

Only HTTP is served; there are no WebSocket routes.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "homecare.settings")

application = get_asgi_application()
