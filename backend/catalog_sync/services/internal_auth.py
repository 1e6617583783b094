"""
Shared-secret check for internal (ops/cron) endpoints.
"""
import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

from ..config import get_settings


async def verify_internal_token(x_internal_token: Optional[str] = Header(default=None)) -> None:
    """Require the `x-internal-token` header to match INTERNAL_API_TOKEN."""
    expected = get_settings().internal_api_token
    # An unset token never authorizes anything
    if not expected or not x_internal_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing internal token",
        )
    if not secrets.compare_digest(x_internal_token.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid internal token",
        )
