from .api_key import API_KEY_HEADER, verify_api_key
from .dependencies import verify_internal_api_key
from .rate_limiter import PAYMENT_RATE_LIMIT, api_key_or_ip, limiter

__all__ = [
    "API_KEY_HEADER",
    "verify_api_key",
    "verify_internal_api_key",
    "PAYMENT_RATE_LIMIT",
    "api_key_or_ip",
    "limiter",
]
