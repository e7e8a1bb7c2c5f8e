"""CSV export of filtered transactions."""

import csv
import io
from collections.abc import Sequence
from datetime import datetime

from src.db.models import Transaction

EXPORT_COLUMNS = [
    "id",
    "created_at",
    "tx_hash",
    "blockchain",
    "from_address",
    "to_address",
    "amount",
    "currency",
    "status",
    "risk_score",
    "risk_level",
    "customer_name",
    "customer_id",
    "country",
    "description",
]


def _row(tx: Transaction) -> dict:
    geo = tx.geo_data if isinstance(tx.geo_data, dict) else {}
    return {
        "id": tx.id,
        "created_at": tx.created_at.isoformat() if tx.created_at else "",
        "tx_hash": tx.tx_hash or "",
        "blockchain": tx.blockchain or "",
        "from_address": tx.from_address,
        "to_address": tx.to_address,
        "amount": tx.amount if tx.amount is not None else "",
        "currency": tx.currency or "",
        "status": tx.status,
        "risk_score": tx.risk_score if tx.risk_score is not None else "",
        "risk_level": tx.risk_level or "",
        "customer_name": tx.customer_name or "",
        "customer_id": tx.customer_id or "",
        "country": geo.get("country") or geo.get("country_name") or "",
        "description": tx.description or "",
    }


def transactions_to_csv(transactions: Sequence[Transaction]) -> str:
    """Header row is always written, even for an empty export."""
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    writer.writerows(_row(tx) for tx in transactions)
    return output.getvalue()


def export_filename(now: datetime) -> str:
    return f"transactions-{now.strftime('%Y%m%d-%H%M%S')}.csv"
