"""
Immutable service configuration.

Built once from Django settings the first time it is requested and
passed explicitly to the code that needs it. The cache is dropped when
Django reports a settings change (override_settings in tests).
"""

from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Tuple

from django.conf import settings
from django.core.signals import setting_changed


@dataclass(frozen=True)
class ServiceConfig:
    allowed_email_domains: Tuple[str, ...]
    frontend_url: str
    session_cookie_name: str
    session_cookie_secure: bool
    session_cookie_samesite: str
    session_lifetime: timedelta
    reset_token_ttl: timedelta
    points_per_passenger: int
    default_page_size: int
    max_page_size: int


@lru_cache(maxsize=1)
def get_config() -> ServiceConfig:
    options = getattr(settings, "RIDESHARE", {})
    return ServiceConfig(
        allowed_email_domains=tuple(d.lower() for d in getattr(settings, "CAMPUS_EMAIL_DOMAINS", ())),
        frontend_url=getattr(settings, "FRONTEND_URL", "").rstrip("/"),
        session_cookie_name=options.get("SESSION_COOKIE_NAME", "token"),
        session_cookie_secure=options.get("SESSION_COOKIE_SECURE", False),
        session_cookie_samesite=options.get("SESSION_COOKIE_SAMESITE", "Lax"),
        session_lifetime=options.get("SESSION_LIFETIME", timedelta(days=30)),
        reset_token_ttl=options.get("RESET_TOKEN_TTL", timedelta(minutes=10)),
        points_per_passenger=options.get("POINTS_PER_PASSENGER", 5),
        default_page_size=options.get("DEFAULT_PAGE_SIZE", 10),
        max_page_size=options.get("MAX_PAGE_SIZE", 100),
    )


def _reset_config(*args, **kwargs):
    if kwargs.get("setting") in ("RIDESHARE", "CAMPUS_EMAIL_DOMAINS", "FRONTEND_URL"):
        get_config.cache_clear()


setting_changed.connect(_reset_config)
