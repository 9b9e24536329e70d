import hashlib
import os

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from .api_key import API_KEY_HEADER

PAYMENT_RATE_LIMIT = os.getenv("PAYMENT_RATE_LIMIT", "30/minute")


def api_key_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Buckets callers by their API key (hashed, never kept in clear),
    falling back to the client's IP address.
    """
    api_key = request.headers.get(API_KEY_HEADER)
    if api_key:
        return f"key:{hashlib.sha256(api_key.encode('utf-8')).hexdigest()[:16]}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=api_key_or_ip)
