import os
import secrets

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

from htasks.constants import API_KEY_HEADER, DEFAULT_API_KEY

# Shared secret of the mobile client, set HTASKS_API_KEY in production
API_KEY = os.getenv("HTASKS_API_KEY", DEFAULT_API_KEY)

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


async def verify_api_key(api_key: str = Security(api_key_header)):
    """Reject requests without the shared API key (401)"""
    if api_key and secrets.compare_digest(api_key.encode(), API_KEY.encode()):
        return api_key
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=f"Invalid or missing {API_KEY_HEADER} header"
    )
