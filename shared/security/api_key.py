"""
Internal API key for the payment endpoints.

A missing INTERNAL_API_KEY does not crash the import: development keeps
working on an insecure default, and the misconfiguration is logged loudly.
"""
import os
import secrets

import structlog

logger = structlog.get_logger(__name__)

API_KEY_HEADER = "X-Internal-API-Key"

_INTERNAL_API_KEY: str = os.getenv("INTERNAL_API_KEY", "")

if not _INTERNAL_API_KEY:
    logger.warning(
        "internal_api_key_missing",
        detail="INTERNAL_API_KEY is not set, using an insecure default. Set it in production!",
    )
    _INTERNAL_API_KEY = "insecure-default-change-me"

INTERNAL_API_KEY: str = _INTERNAL_API_KEY


def verify_api_key(provided_key: str) -> bool:
    """Constant-time comparison against the configured key."""
    if not provided_key:
        return False
    return secrets.compare_digest(str(provided_key), str(INTERNAL_API_KEY))
