"""Tests for the aggregation command line entry point."""

from unittest.mock import AsyncMock, patch

import pytest

from src.domains.geo_risk import cli
from src.domains.geo_risk.models import AggregationResult


class TestAggregationCli:
    def test_runs_and_prints_result(self, monkeypatch, capsys):
        result = AggregationResult(
            message="Processed 2 locations", locationsProcessed=2, totalTransactions=9
        )
        monkeypatch.setattr("sys.argv", ["ledgerlens-geo-aggregate", "--window-days", "14"])

        with (
            patch.object(cli, "run", new=AsyncMock(return_value=result)) as run,
            patch.object(cli, "setup_logging") as setup_logging,
        ):
            cli.main()

        run.assert_awaited_once_with(14)
        setup_logging.assert_called_once()
        assert '"locationsProcessed":2' in capsys.readouterr().out

    def test_rejects_non_positive_window(self, monkeypatch):
        monkeypatch.setattr("sys.argv", ["ledgerlens-geo-aggregate", "--window-days", "0"])
        with pytest.raises(SystemExit):
            cli.main()
