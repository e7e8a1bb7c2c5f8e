"""Inbound relay webhook."""

import structlog
from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.db.database import get_session
from src.domains.relay.ingestion import ingest_relay_transaction, verify_relay_key
from src.domains.relay.models import RelayTransactionData, RelayWebhookResponse

logger = structlog.get_logger()
router = APIRouter(prefix="/api/v1/relay", tags=["relay"])


@router.post(
    "/webhook",
    response_model=RelayWebhookResponse,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": RelayTransactionData.model_json_schema()}
            },
        }
    },
)
async def relay_webhook(
    request: Request,
    x_relay_key: str | None = Header(default=None, alias="x-relay-key"),
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> RelayWebhookResponse:
    """Record a transaction submitted by the relay.

    The shared secret is checked before the body is read, so an unauthorized
    caller never gets validation feedback.
    """
    verify_relay_key(x_relay_key, settings.relay_api_secret)

    payload = await request.json()
    data = RelayTransactionData.model_validate(payload)

    transaction = await ingest_relay_transaction(session, data)
    return RelayWebhookResponse(transaction_id=transaction.id)
