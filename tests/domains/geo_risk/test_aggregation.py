"""Tests for location bucketing of relay logs and transactions."""

from datetime import UTC, datetime

from src.db.models import RelayLog, Transaction
from src.domains.geo_risk.aggregation import (
    UNKNOWN_COUNTRY,
    aggregate_locations,
    extract_location,
    location_key,
    marker_radius,
    risk_band,
)
from src.domains.geo_risk.models import LocationBucket, RiskBand


def _tx(geo_data, status="completed", risk_score=10.0) -> Transaction:
    return Transaction(
        user_id="u1",
        from_address="0xaaa",
        to_address="0xbbb",
        status=status,
        risk_score=risk_score,
        geo_data=geo_data,
    )


def _by_key(buckets: list[LocationBucket]) -> dict:
    return {location_key(b.country, b.region, b.city): b for b in buckets}


class TestExtractLocation:
    def test_ip_api_shape(self):
        loc = extract_location(
            {
                "country": "US",
                "regionName": "California",
                "city": "San Francisco",
                "lat": "37.77",
                "lon": -122.42,
            }
        )
        assert loc == {
            "country": "US",
            "region": "California",
            "city": "San Francisco",
            "latitude": 37.77,
            "longitude": -122.42,
        }

    def test_long_coordinate_keys(self):
        loc = extract_location({"country": "DE", "latitude": 52.5, "longitude": 13.4})
        assert loc["latitude"] == 52.5
        assert loc["longitude"] == 13.4
        assert loc["region"] is None

    def test_missing_country(self):
        assert extract_location({"city": "Nowhere"})["country"] == UNKNOWN_COUNTRY

    def test_zero_coordinates_are_valid(self):
        loc = extract_location({"country": "GH", "lat": 0, "lon": 0})
        assert loc["latitude"] == 0.0
        assert loc["longitude"] == 0.0

    def test_unparseable_coordinates(self):
        loc = extract_location({"country": "FR", "lat": "n/a", "lon": ""})
        assert loc["latitude"] is None
        assert loc["longitude"] is None


class TestAggregateLocations:
    def test_relay_logs_land_in_unknown(self):
        logs = [
            RelayLog(decision="BLOCK", risk_score=90),
            RelayLog(decision="ALLOW", risk_score=10),
            RelayLog(decision="REVIEW", risk_score=None),
        ]
        buckets = aggregate_locations(logs, [])

        assert len(buckets) == 1
        bucket = buckets[0]
        assert bucket.country == UNKNOWN_COUNTRY
        assert bucket.total_transactions == 3
        assert bucket.blocked_transactions == 1
        assert bucket.allowed_transactions == 1
        assert bucket.risk_score_avg == 33.33

    def test_groups_transactions_by_location(self):
        sf = {"country": "US", "region": "CA", "city": "San Francisco", "lat": 37.7, "lon": -122.4}
        transactions = [
            _tx(sf, status="completed", risk_score=20),
            _tx(sf, status="blocked", risk_score=80),
            _tx(sf, status="flagged", risk_score=50),
            _tx({"country": "US", "region": "NY", "city": "New York"}, status="pending"),
        ]
        buckets = _by_key(aggregate_locations([], transactions))

        sf_bucket = buckets[("US", "CA", "San Francisco")]
        assert sf_bucket.total_transactions == 3
        assert sf_bucket.blocked_transactions == 2
        assert sf_bucket.allowed_transactions == 1
        assert sf_bucket.risk_score_avg == 50.0
        assert sf_bucket.latitude == 37.7

        ny_bucket = buckets[("US", "NY", "New York")]
        assert ny_bucket.total_transactions == 1
        assert ny_bucket.blocked_transactions == 0
        assert ny_bucket.allowed_transactions == 0

    def test_transactions_without_geo_dict_are_skipped(self):
        transactions = [_tx(None), _tx("US"), _tx(["US"])]
        assert aggregate_locations([], transactions) == []

    def test_unknown_country_transactions_share_relay_bucket(self):
        logs = [RelayLog(decision="BLOCK", risk_score=60)]
        transactions = [_tx({"city": None}, risk_score=20)]
        buckets = aggregate_locations(logs, transactions)

        assert len(buckets) == 1
        assert buckets[0].total_transactions == 2
        assert buckets[0].risk_score_avg == 40.0

    def test_counts_add_up(self):
        logs = [RelayLog(decision="ALLOW", risk_score=5) for _ in range(4)]
        transactions = [_tx({"country": "BR"}) for _ in range(3)]
        buckets = aggregate_locations(logs, transactions)

        assert sum(b.total_transactions for b in buckets) == 7
        for b in buckets:
            assert b.blocked_transactions + b.allowed_transactions <= b.total_transactions


class TestLocationBucket:
    def test_empty_average(self):
        assert LocationBucket(country="US").risk_score_avg == 0.0

    def test_average_ties_round_up(self):
        assert LocationBucket(country="US", risk_scores=[0.125]).risk_score_avg == 0.13
        assert LocationBucket(country="US", risk_scores=[10, 10.25]).risk_score_avg == 10.13

    def test_to_row(self):
        now = datetime(2024, 5, 1, tzinfo=UTC)
        bucket = LocationBucket(country="US", total_transactions=2, risk_scores=[10, 15])
        row = bucket.to_row(last_updated=now)
        assert row["risk_score_avg"] == 12.5
        assert row["last_updated"] == now
        assert "risk_scores" not in row


class TestBandsAndMarkers:
    def test_risk_band(self):
        assert risk_band(70) == RiskBand.HIGH
        assert risk_band(69.99) == RiskBand.MEDIUM
        assert risk_band(40) == RiskBand.MEDIUM
        assert risk_band(39.9) == RiskBand.LOW

    def test_marker_radius(self):
        assert marker_radius(101) == 12
        assert marker_radius(100) == 8
        assert marker_radius(21) == 8
        assert marker_radius(20) == 5
        assert marker_radius(0) == 5
