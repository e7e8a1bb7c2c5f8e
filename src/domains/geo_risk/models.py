"""Models for the geographic risk aggregate."""

import math
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class RiskBand(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class LocationBucket(BaseModel):
    """Running totals for one (country, region, city) during aggregation."""

    country: str
    region: str | None = None
    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    total_transactions: int = 0
    blocked_transactions: int = 0
    allowed_transactions: int = 0
    risk_scores: list[float] = Field(default_factory=list)

    @property
    def risk_score_avg(self) -> float:
        if not self.risk_scores:
            return 0.0
        avg = sum(self.risk_scores) / len(self.risk_scores)
        # two decimals, ties rounded up
        return math.floor(avg * 100 + 0.5) / 100

    def to_row(self, last_updated: datetime) -> dict:
        return {
            "country": self.country,
            "region": self.region,
            "city": self.city,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "risk_score_avg": self.risk_score_avg,
            "total_transactions": self.total_transactions,
            "blocked_transactions": self.blocked_transactions,
            "allowed_transactions": self.allowed_transactions,
            "last_updated": last_updated,
        }


class AggregationRequest(BaseModel):
    window_days: int | None = Field(default=None, ge=1, le=365)


class AggregationResult(BaseModel):
    success: bool = True
    message: str
    locationsProcessed: int  # noqa: N815
    totalTransactions: int  # noqa: N815


class GeographicRiskPoint(BaseModel):
    id: str
    country: str
    region: str | None = None
    city: str | None = None
    latitude: float
    longitude: float
    risk_score_avg: float
    total_transactions: int
    blocked_transactions: int
    allowed_transactions: int
    last_updated: datetime | None = None
    risk_band: RiskBand
    marker_radius: int
