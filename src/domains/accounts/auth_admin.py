"""Client for the hosted auth service's admin REST API."""

import httpx
import structlog

from src.config import settings
from src.shared.exceptions import UpstreamServiceError

logger = structlog.get_logger()


class AuthAdminClient:
    """Performs privileged user operations with the service role key."""

    def __init__(
        self,
        base_url: str | None = None,
        service_role_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.service_role_key = service_role_key or settings.supabase_service_role_key
        self.timeout = timeout or settings.auth_admin_timeout_seconds
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
        }

    async def delete_user(self, user_id: str) -> None:
        url = f"{self.base_url}/auth/v1/admin/users/{user_id}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.delete(url, headers=self._headers())
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "auth_user_delete_rejected",
                user_id=user_id,
                status_code=exc.response.status_code,
            )
            raise UpstreamServiceError(exc.response.text or str(exc)) from exc
        except httpx.HTTPError as exc:
            logger.error("auth_user_delete_failed", user_id=user_id, error=str(exc))
            raise UpstreamServiceError(str(exc)) from exc

        logger.info("auth_user_deleted", user_id=user_id)


def get_auth_admin_client() -> AuthAdminClient:
    return AuthAdminClient()
