"""Group recent relay decisions and transactions by location."""

from collections.abc import Iterable
from typing import Any

from src.db.models import RelayLog, Transaction
from src.domains.geo_risk.models import LocationBucket, RiskBand

UNKNOWN_COUNTRY = "Unknown"

BLOCKED_STATUSES = frozenset({"blocked", "flagged"})
ALLOWED_STATUSES = frozenset({"completed"})

HIGH_RISK_THRESHOLD = 70
MEDIUM_RISK_THRESHOLD = 40


def _safe_float(val: Any) -> float | None:
    if val is None or val == "":
        return None
    try:
        return float(val)
    except (ValueError, TypeError):
        return None


def _first_present(data: dict, *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return None


def location_key(country: str, region: str | None, city: str | None) -> tuple[str, str, str]:
    return (country, region or "", city or "")


def extract_location(geo_data: dict) -> dict[str, Any]:
    """Normalize the geo_data shapes written by the various IP lookup providers."""
    return {
        "country": _first_present(geo_data, "country") or UNKNOWN_COUNTRY,
        "region": _first_present(geo_data, "region", "regionName"),
        "city": _first_present(geo_data, "city"),
        "latitude": _safe_float(_first_present(geo_data, "lat", "latitude")),
        "longitude": _safe_float(_first_present(geo_data, "lon", "longitude")),
    }


def aggregate_locations(
    relay_logs: Iterable[RelayLog],
    transactions: Iterable[Transaction],
) -> list[LocationBucket]:
    """Build one bucket per distinct (country, region, city).

    Relay logs carry no geolocation and all land in the Unknown country
    bucket. Transactions without a dict geo_data are skipped.
    """
    buckets: dict[tuple[str, str, str], LocationBucket] = {}

    for log in relay_logs:
        key = location_key(UNKNOWN_COUNTRY, None, None)
        if key not in buckets:
            buckets[key] = LocationBucket(country=UNKNOWN_COUNTRY)

        b = buckets[key]
        b.total_transactions += 1
        b.risk_scores.append(log.risk_score or 0)
        if log.decision == "BLOCK":
            b.blocked_transactions += 1
        elif log.decision == "ALLOW":
            b.allowed_transactions += 1

    for tx in transactions:
        if not isinstance(tx.geo_data, dict):
            continue

        loc = extract_location(tx.geo_data)
        key = location_key(loc["country"], loc["region"], loc["city"])
        if key not in buckets:
            buckets[key] = LocationBucket(**loc)

        b = buckets[key]
        b.total_transactions += 1
        b.risk_scores.append(tx.risk_score or 0)
        if tx.status in BLOCKED_STATUSES:
            b.blocked_transactions += 1
        elif tx.status in ALLOWED_STATUSES:
            b.allowed_transactions += 1

    return list(buckets.values())


def risk_band(risk_score: float) -> RiskBand:
    if risk_score >= HIGH_RISK_THRESHOLD:
        return RiskBand.HIGH
    if risk_score >= MEDIUM_RISK_THRESHOLD:
        return RiskBand.MEDIUM
    return RiskBand.LOW


def marker_radius(total_transactions: int) -> int:
    if total_transactions > 100:
        return 12
    if total_transactions > 20:
        return 8
    return 5
