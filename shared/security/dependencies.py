from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from .api_key import API_KEY_HEADER, verify_api_key

# Defines the expected internal service header
api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


async def verify_internal_api_key(api_key: str = Depends(api_key_header)) -> bool:
    """Dependency guarding partner-facing payment endpoints."""
    if not verify_api_key(api_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Invalid or missing {API_KEY_HEADER} header"
        )
    return True
