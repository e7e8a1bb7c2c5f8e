"""Pydantic models for transaction listing, filtering and export."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RiskFilter(StrEnum):
    """Coarse bands used by the transactions page."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskLevel(StrEnum):
    """Finer bands used by the advanced filter."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DateRange(StrEnum):
    LAST_7_DAYS = "last-7-days"
    LAST_30_DAYS = "last-30-days"
    LAST_90_DAYS = "last-90-days"
    CUSTOM_RANGE = "custom-range"


class TransactionFilter(BaseModel):
    search: str | None = None
    status: str | None = None
    risk: RiskFilter | None = None
    risk_level: RiskLevel | None = None
    blockchain: str | None = None
    date_range: DateRange | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    limit: int = Field(default=100, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _custom_range_needs_bounds(self) -> "TransactionFilter":
        if self.date_range == DateRange.CUSTOM_RANGE and not (self.start_date or self.end_date):
            raise ValueError("custom-range requires start_date or end_date")
        return self


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    tx_hash: str | None = None
    from_address: str
    to_address: str
    amount: float | None = None
    currency: str | None = None
    blockchain: str | None = None
    status: str
    risk_score: float | None = None
    risk_level: str | None = None
    customer_name: str | None = None
    customer_id: str | None = None
    description: str | None = None
    geo_data: dict | None = None
    gas_price: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class FeedTransaction(TransactionOut):
    risk_label: str


class TransactionStats(BaseModel):
    total_transactions: int = 0
    total_amount: float = 0.0
    flagged: int = 0
    high_risk: int = 0
