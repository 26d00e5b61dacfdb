# app/core/auth.py

import hmac
import os
from typing import Annotated, Optional

from fastapi import Header, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.cors import CORS_HEADERS

# Bearer para integrarse con Swagger Authorize
_bearer = HTTPBearer(auto_error=False)


def _matches(supplied: Optional[str], expected: str) -> bool:
    return bool(supplied) and hmac.compare_digest(supplied, expected)


async def require_scheduler_token(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Security(_bearer)],
    x_admin_token: Optional[str] = Header(default=None, alias="X-Admin-Token"),
) -> None:
    """
    Protege los endpoints que dispara el cron.
    - Si SCHEDULER_TOKEN no está configurado (DEV), no se exige nada.
    - Si está, acepta `Authorization: Bearer <token>` o `X-Admin-Token: <token>`.
    """
    expected = os.getenv("SCHEDULER_TOKEN", "")
    if not expected:
        return

    bearer = None
    if credentials and credentials.scheme.lower() == "bearer":
        bearer = credentials.credentials

    if _matches(bearer, expected) or _matches(x_admin_token, expected):
        return

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer", **CORS_HEADERS},
    )
