"""
Shared rate limiter.

Defined outside main.py so route modules can decorate endpoints without
importing the application.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from fleetmon.config import get_settings

settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_default}/minute"],
    storage_uri=settings.rate_limit_storage_uri,
)
