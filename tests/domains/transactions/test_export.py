"""Tests for the transactions CSV export."""

import csv
import io
from datetime import UTC, datetime

from src.db.models import Transaction
from src.domains.transactions.export import (
    EXPORT_COLUMNS,
    export_filename,
    transactions_to_csv,
)


def _rows(content: str) -> list[dict]:
    return list(csv.DictReader(io.StringIO(content)))


class TestTransactionsToCsv:
    def test_header_only_for_empty_export(self):
        content = transactions_to_csv([])
        assert content.splitlines() == [",".join(EXPORT_COLUMNS)]

    def test_row_values(self):
        tx = Transaction(
            id="550e8400-e29b-41d4-a716-446655440000",
            user_id="u1",
            from_address="0xaaa",
            to_address="0xbbb",
            amount=2.5,
            currency="ETH",
            blockchain="ethereum",
            status="flagged",
            risk_score=88.0,
            customer_name="Acme, Inc.",
            geo_data={"country_name": "Portugal"},
            created_at=datetime(2024, 3, 1, 9, 30, tzinfo=UTC),
        )
        rows = _rows(transactions_to_csv([tx]))

        assert len(rows) == 1
        row = rows[0]
        assert row["customer_name"] == "Acme, Inc."
        assert row["country"] == "Portugal"
        assert row["created_at"] == "2024-03-01T09:30:00+00:00"
        assert row["amount"] == "2.5"
        assert row["tx_hash"] == ""

    def test_missing_optional_values_are_blank(self):
        tx = Transaction(
            id="660e8400-e29b-41d4-a716-446655440001",
            user_id="u1",
            from_address="0xaaa",
            to_address="0xbbb",
            status="pending",
            geo_data=None,
        )
        row = _rows(transactions_to_csv([tx]))[0]
        assert row["risk_score"] == ""
        assert row["country"] == ""
        assert row["created_at"] == ""


class TestExportFilename:
    def test_timestamped(self):
        now = datetime(2024, 12, 31, 23, 59, 1, tzinfo=UTC)
        assert export_filename(now) == "transactions-20241231-235901.csv"
