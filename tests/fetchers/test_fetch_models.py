"""
Fetch Model Tests.

Tests for FetchResult, MeasuredValue and fetch status classification.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import pytest

from data_sources.models import DataSourceProvider
from fetchers.models import (
    FetchResult,
    FetchStatus,
    MeasuredValue,
    MetricsRecord,
    classify_fetch_status,
)
from fetchers.providers import BitnodesMetrics, SolanaMetrics


@dataclass(frozen=True)
class ThreeFieldMetrics(MetricsRecord):
    a: Optional[int] = None
    b: Optional[int] = None
    c: Optional[int] = None


NOW = datetime(2025, 1, 15, tzinfo=timezone.utc)


class TestFetchResult:
    """Tests for FetchResult constructors."""

    def test_ok(self):
        result = FetchResult.ok({"x": 1}, status_code=200)

        assert result.success
        assert result.error is None

    def test_fail(self):
        result = FetchResult.fail("HTTP 404: Not Found", 404)

        assert not result.success
        assert result.data is None
        assert result.to_dict() == {"success": False, "error": "HTTP 404: Not Found", "status_code": 404}


class TestMeasuredValue:
    """Tests for MeasuredValue."""

    def test_confidence_bounds(self):
        with pytest.raises(ValueError):
            MeasuredValue(value=1, timestamp=NOW, provider=DataSourceProvider.BITNODES, confidence=1.5)

    def test_to_dict(self):
        value = MeasuredValue(value=67, timestamp=NOW, provider=DataSourceProvider.BITNODES, confidence=0.8)

        assert value.to_dict() == {
            "value": 67,
            "timestamp": "2025-01-15T00:00:00+00:00",
            "provider": "bitnodes",
            "confidence": 0.8,
        }
        assert value.is_sampled


class TestFetchStatus:
    """Tests for classify_fetch_status() and MetricsRecord helpers."""

    def test_all_resolved(self):
        assert ThreeFieldMetrics(a=1, b=2, c=3).fetch_status() == FetchStatus.SUCCESS

    def test_some_resolved(self):
        assert ThreeFieldMetrics(a=1).fetch_status() == FetchStatus.PARTIAL

    def test_none_resolved(self):
        assert ThreeFieldMetrics().fetch_status() == FetchStatus.FAILED

    def test_zero_counts_as_resolved(self):
        assert ThreeFieldMetrics(a=0, b=0, c=0).fetch_status() == FetchStatus.SUCCESS

    def test_explicit_threshold(self):
        record = ThreeFieldMetrics(a=1, b=2)

        assert classify_fetch_status(record, ("a", "b", "c"), success_threshold=2) == FetchStatus.SUCCESS
        assert classify_fetch_status(record, ("c",)) == FetchStatus.FAILED

    def test_solana_threshold(self):
        record = SolanaMetrics(
            total_validators=1,
            active_validators=1,
            nakamoto_coefficient=1,
            top5_concentration=100.0,
        )
        assert record.fetch_status() == FetchStatus.PARTIAL

    def test_empty(self):
        record = SolanaMetrics.empty()

        assert record.is_empty()
        assert record.resolved_fields() == []

    def test_to_dict_serializes_measured_values(self):
        record = BitnodesMetrics(
            total_nodes=MeasuredValue(value=20000, timestamp=NOW, provider=DataSourceProvider.BITNODES),
        )
        data = record.to_dict()

        assert data["total_nodes"]["value"] == 20000
        assert data["cloud_percentage"] is None


class TestMeasuredValues:
    """Tests for MetricsRecord.measured_values()."""

    def test_plain_values_get_provider_provenance(self):
        record = SolanaMetrics(total_validators=1500, nakamoto_coefficient=19)

        values = record.measured_values(DataSourceProvider.SOLANA_RPC, NOW)

        assert values["nakamoto_coefficient"] == MeasuredValue(
            value=19, timestamp=NOW, provider=DataSourceProvider.SOLANA_RPC,
        )
        assert values["total_validators"].confidence == 1.0
        assert values["client_versions"] is None

    def test_measured_fields_keep_their_own_provenance(self):
        sampled = MeasuredValue(
            value=67, timestamp=NOW, provider=DataSourceProvider.BITNODES, confidence=0.8,
        )
        record = BitnodesMetrics(cloud_percentage=sampled)

        values = record.measured_values(DataSourceProvider.BLOCKCHAIN, datetime(2030, 1, 1, tzinfo=timezone.utc))

        assert values["cloud_percentage"] is sampled
        assert values["total_nodes"] is None
