"""
Token authentication for the API.

Kept in its own module so DRF can import it during settings
initialisation without pulling in any views.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication using the ``Token`` keyword.

    Tokens are issued out of band (Django admin or
    ``manage.py drf_create_token``).
    """

    keyword = 'Token'
