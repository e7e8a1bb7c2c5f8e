"""Account lifecycle endpoints."""

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.auth import CurrentUser, get_current_user
from src.db.database import get_session
from src.domains.accounts.auth_admin import AuthAdminClient, get_auth_admin_client
from src.domains.accounts.deletion import delete_account

logger = structlog.get_logger()
router = APIRouter(prefix="/api/v1/accounts", tags=["accounts"])


class DeleteAccountRequest(BaseModel):
    user_id: str | None = Field(default=None, alias="userId")


@router.post("/delete")
async def delete_user_account(
    request: DeleteAccountRequest,
    user: CurrentUser = Depends(get_current_user),  # noqa: B008
    session: AsyncSession = Depends(get_session),  # noqa: B008
    auth_admin: AuthAdminClient = Depends(get_auth_admin_client),  # noqa: B008
) -> dict:
    """Delete the caller's data and auth user. Irreversible."""
    if not request.user_id:
        raise ValueError("userId is required")
    if request.user_id != user.id:
        logger.warning("account_delete_forbidden", caller=user.id, target=request.user_id)
        raise PermissionError("Cannot delete another user's account")

    await delete_account(session, request.user_id, auth_admin)
    return {
        "success": True,
        "message": "User account and all data deleted successfully",
    }
