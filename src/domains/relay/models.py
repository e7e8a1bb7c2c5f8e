"""Pydantic models for the relay webhook."""

from enum import StrEnum

from pydantic import BaseModel


class RelayStatus(StrEnum):
    APPROVED = "approved"
    REJECTED = "rejected"
    PENDING = "pending"


class RelayTransactionData(BaseModel):
    """Transaction submitted by the relay on behalf of a partner."""

    from_address: str
    to_address: str
    status: RelayStatus
    amount: float | None = None
    currency: str | None = None
    blockchain: str | None = None
    tx_hash: str | None = None
    risk_level: str | None = None
    risk_score: float | None = None
    customer_name: str | None = None
    customer_id: str | None = None
    description: str | None = None
    partner_id: str | None = None
    api_key_hash: str | None = None


class RelayWebhookResponse(BaseModel):
    success: bool = True
    transaction_id: str
    message: str = "Transaction logged successfully"
