"""Relay webhook ingestion: authorize, resolve the owning user, insert.

The relay forwards transactions it has screened for a partner. Each call is
attributed to a user either through the hash of the API key the partner used
or through the partner identifier on the developer profile.
"""

import hmac
import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import ApiKey, DeveloperProfile, Transaction
from src.domains.relay.models import RelayTransactionData
from src.shared.exceptions import PersistenceError, UnauthorizedError

logger = structlog.get_logger()

DEFAULT_CURRENCY = "ETH"
DEFAULT_BLOCKCHAIN = "ethereum"


def verify_relay_key(provided: str | None, expected: str) -> None:
    """Raise UnauthorizedError unless the header matches the shared secret."""
    if not expected or not provided:
        logger.warning("relay_unauthorized", reason="missing_key")
        raise UnauthorizedError("Unauthorized")
    if not hmac.compare_digest(provided.encode(), expected.encode()):
        logger.warning("relay_unauthorized", reason="invalid_key")
        raise UnauthorizedError("Unauthorized")


async def resolve_user_id(session: AsyncSession, data: RelayTransactionData) -> str | None:
    """Find the user that owns the submitting API key or partner id.

    An API key hash takes precedence; an unknown hash does not fall back to
    the partner id.
    """
    if data.api_key_hash:
        stmt = select(ApiKey.user_id).where(ApiKey.key_hash == data.api_key_hash)
    elif data.partner_id:
        stmt = select(DeveloperProfile.user_id).where(
            DeveloperProfile.partner_id == data.partner_id
        )
    else:
        return None

    result = await session.execute(stmt)
    return result.scalars().first()


def build_transaction(data: RelayTransactionData, user_id: str) -> Transaction:
    return Transaction(
        id=str(uuid.uuid4()),
        user_id=user_id,
        from_address=data.from_address,
        to_address=data.to_address,
        amount=data.amount or 0,
        currency=data.currency or DEFAULT_CURRENCY,
        blockchain=data.blockchain or DEFAULT_BLOCKCHAIN,
        tx_hash=data.tx_hash,
        status=data.status.value,
        risk_level=data.risk_level,
        risk_score=data.risk_score or 0,
        customer_name=data.customer_name,
        customer_id=data.customer_id,
        description=data.description or f"Relay transaction via {data.partner_id or 'API'}",
    )


async def ingest_relay_transaction(
    session: AsyncSession, data: RelayTransactionData
) -> Transaction:
    logger.info(
        "relay_transaction_received",
        partner_id=data.partner_id,
        has_api_key_hash=bool(data.api_key_hash),
        status=data.status.value,
    )

    user_id = await resolve_user_id(session, data)
    if not user_id:
        logger.error(
            "relay_user_not_found",
            api_key_hash=data.api_key_hash,
            partner_id=data.partner_id,
        )
        raise ValueError("User not found for transaction")

    transaction = build_transaction(data, user_id)
    session.add(transaction)
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("relay_transaction_insert_failed", user_id=user_id, error=str(exc))
        raise PersistenceError("Failed to insert transaction", details=str(exc)) from exc

    logger.info("relay_transaction_inserted", transaction_id=transaction.id, user_id=user_id)
    return transaction
