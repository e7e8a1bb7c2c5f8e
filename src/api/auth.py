"""Bearer token authentication for dashboard endpoints.

Access tokens are HS256 JWTs issued by the hosted auth service; the ``sub``
claim is the user id that every dashboard query is scoped to.
"""

from dataclasses import dataclass

import jwt
import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.config import settings
from src.shared.exceptions import UnauthorizedError

logger = structlog.get_logger()

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: str | None = None
    role: str | None = None


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
        )
    except jwt.ExpiredSignatureError as exc:
        logger.warning("token_expired")
        raise UnauthorizedError("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        logger.warning("token_invalid", error=str(exc))
        raise UnauthorizedError("Invalid token") from exc


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),  # noqa: B008
) -> CurrentUser:
    if credentials is None:
        raise UnauthorizedError("No authorization header")

    payload = decode_access_token(credentials.credentials)
    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Token has no subject")

    return CurrentUser(id=user_id, email=payload.get("email"), role=payload.get("role"))
