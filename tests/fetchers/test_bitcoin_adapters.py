"""
Bitcoin Adapter Tests.

============================================================
PURPOSE
============================================================
Tests for the Bitcoin adapters: mining pool distribution from
blockchain.info and sampled node hosting/geo from Bitnodes.

TEST CATEGORIES:
1. Pool distribution - Unknown handling, majority threshold
2. Node sampling - shared draw, confidence caps, .onion exclusion
3. Failure handling - failed snapshot, malformed payloads

============================================================
"""

import random
from unittest.mock import AsyncMock, patch

import pytest

from data_sources.models import DataSourceProvider
from fetchers.models import FetchResult, FetchStatus
from fetchers.providers import BitnodesAdapter, BlockchainInfoAdapter, NodeDetail, parse_node_key
from fetchers.providers.bitnodes import SNAPSHOT_ENDPOINT


# ============================================================
# FIXTURES
# ============================================================

POOLS = {
    "Foundry USA": 300,
    "AntPool": 200,
    "ViaBTC": 120,
    "F2Pool": 80,
    "Binance Pool": 40,
    "MARA Pool": 30,
    "Luxor": 10,
    "SBI Crypto": 5,
    "Ocean": 5,
    "Unknown": 210,
}


def node_data(country, asn):
    """Bitnodes detail row: country at index 7, ASN at index 11."""
    row = [70016, "/Satoshi:27.0.0/", 1700000000, 1033, 850000,
           "host.example", "City", country, 0.0, 0.0, "UTC", asn, "Org"]
    return FetchResult.ok({"data": row})


def snapshot(keys, total_nodes=None):
    return FetchResult.ok({
        "timestamp": 1700000000,
        "total_nodes": len(keys) if total_nodes is None else total_nodes,
        "latest_height": 850000,
        "nodes": {key: [] for key in keys},
    })


NODE_KEYS = [
    "1.1.1.1:8333",
    "2.2.2.2:8333",
    "[2001:db8::1]:8333",
    "3.3.3.3:8333",
    "abcdefghijklmnop.onion:8333",
]


@pytest.fixture
def bitnodes_responses():
    return {
        SNAPSHOT_ENDPOINT: snapshot(NODE_KEYS),
        "/api/v1/nodes/1.1.1.1-8333/": node_data("US", "AS16509"),
        "/api/v1/nodes/2.2.2.2-8333/": node_data("DE", "AS3320"),
        "/api/v1/nodes/2001:db8::1-8333/": node_data("DE", "AS24940"),
        # 3.3.3.3 is not configured and fails
    }


def make_bitnodes(client, clock, sample_size=40, seed=7):
    return BitnodesAdapter(client, clock, sample_size=sample_size, rng=random.Random(seed))


# ============================================================
# BLOCKCHAIN.INFO
# ============================================================

class TestBlockchainInfoAdapter:
    """Tests for BlockchainInfoAdapter."""

    @pytest.mark.asyncio
    async def test_pool_metrics(self, make_fake_client, clock):
        client = make_fake_client(DataSourceProvider.BLOCKCHAIN, {"/pools": FetchResult.ok(POOLS)})

        metrics = await BlockchainInfoAdapter(client, clock).get_all_metrics()

        assert metrics.total_blocks == 1000
        assert metrics.top5_pool_pct == 74
        assert metrics.largest_pool_pct == 30
        # Pools with at least 1% of blocks; Unknown is not a pool
        assert metrics.pool_diversity == 7
        assert metrics.fetch_status() == FetchStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_nakamoto_uses_majority_threshold(self, make_fake_client, clock):
        client = make_fake_client(DataSourceProvider.BLOCKCHAIN, {"/pools": FetchResult.ok(POOLS)})

        metrics = await BlockchainInfoAdapter(client, clock).get_all_metrics()

        # 300 + 200 reaches exactly half of 1000
        assert metrics.nakamoto_coefficient == 2

    @pytest.mark.asyncio
    async def test_timespan_param(self, make_fake_client, clock):
        client = make_fake_client(DataSourceProvider.BLOCKCHAIN, {"/pools": FetchResult.ok(POOLS)})

        await BlockchainInfoAdapter(client, clock, timespan="24hours").get_all_metrics()

        assert client.requests == [("/pools", {"timespan": "24hours"})]

    @pytest.mark.asyncio
    async def test_only_unknown_blocks(self, make_fake_client, clock):
        client = make_fake_client(
            DataSourceProvider.BLOCKCHAIN,
            {"/pools": FetchResult.ok({"Unknown": 10})},
        )

        metrics = await BlockchainInfoAdapter(client, clock).get_all_metrics()

        assert metrics.total_blocks == 10
        assert metrics.top5_pool_pct == 0
        assert metrics.pool_diversity == 0
        assert metrics.largest_pool_pct is None
        assert metrics.nakamoto_coefficient is None

    @pytest.mark.asyncio
    async def test_no_blocks_is_failed(self, make_fake_client, clock):
        client = make_fake_client(DataSourceProvider.BLOCKCHAIN, {"/pools": FetchResult.ok({})})

        metrics = await BlockchainInfoAdapter(client, clock).get_all_metrics()

        assert metrics.is_empty()
        assert metrics.fetch_status() == FetchStatus.FAILED

    @pytest.mark.asyncio
    async def test_non_object_payload_is_failed(self, make_fake_client, clock):
        client = make_fake_client(
            DataSourceProvider.BLOCKCHAIN,
            {"/pools": FetchResult.ok(["Foundry USA", 300])},
        )

        metrics = await BlockchainInfoAdapter(client, clock).get_all_metrics()

        assert metrics.fetch_status() == FetchStatus.FAILED


# ============================================================
# BITNODES
# ============================================================

class TestParseNodeKey:
    """Tests for parse_node_key()."""

    def test_ipv4(self):
        assert parse_node_key("1.2.3.4:8333") == ("1.2.3.4", "8333")

    def test_ipv6(self):
        assert parse_node_key("[2001:db8::1]:8333") == ("2001:db8::1", "8333")

    def test_malformed(self):
        with pytest.raises(ValueError):
            parse_node_key("no-port")


class TestBitnodesAdapter:
    """Tests for BitnodesAdapter."""

    @pytest.mark.asyncio
    async def test_total_nodes_is_exact(self, make_fake_client, bitnodes_responses, clock):
        client = make_fake_client(DataSourceProvider.BITNODES, bitnodes_responses)

        metrics = await make_bitnodes(client, clock).get_all_metrics()

        assert metrics.total_nodes.value == 5
        assert metrics.total_nodes.confidence == 1.0
        assert metrics.total_nodes.provider == DataSourceProvider.BITNODES

    @pytest.mark.asyncio
    async def test_sampled_estimates(self, make_fake_client, bitnodes_responses, clock):
        client = make_fake_client(DataSourceProvider.BITNODES, bitnodes_responses)

        metrics = await make_bitnodes(client, clock).get_all_metrics()

        # 2 of 3 resolved nodes sit in cloud ASNs; US + DE cover all 3
        assert metrics.cloud_percentage.value == 67
        assert metrics.top5_country_pct.value == 100
        # 3 resolved out of 40 requested
        assert metrics.cloud_percentage.confidence == pytest.approx(0.075)
        assert metrics.top5_country_pct.confidence == pytest.approx(0.075)
        assert metrics.fetch_status() == FetchStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_one_draw_serves_both_estimates(self, make_fake_client, bitnodes_responses, clock):
        client = make_fake_client(DataSourceProvider.BITNODES, bitnodes_responses)

        await make_bitnodes(client, clock).get_all_metrics()

        detail_calls = [e for e in client.endpoints if e.startswith("/api/v1/nodes/")]
        assert len(detail_calls) == 4
        assert len(set(detail_calls)) == 4

    @pytest.mark.asyncio
    async def test_onion_nodes_are_never_sampled(self, make_fake_client, bitnodes_responses, clock):
        client = make_fake_client(DataSourceProvider.BITNODES, bitnodes_responses)

        await make_bitnodes(client, clock).get_all_metrics()

        assert not any(".onion" in e for e in client.endpoints)

    @pytest.mark.asyncio
    async def test_confidence_caps(self, make_fake_client, bitnodes_responses, clock):
        bitnodes_responses["/api/v1/nodes/3.3.3.3-8333/"] = node_data("FR", "AS16276")
        client = make_fake_client(DataSourceProvider.BITNODES, bitnodes_responses)

        metrics = await make_bitnodes(client, clock, sample_size=2).get_all_metrics()

        # 2 of 2 resolved would be 1.0
        assert metrics.cloud_percentage.confidence == 0.8
        assert metrics.top5_country_pct.confidence == 0.7

    @pytest.mark.asyncio
    async def test_sample_never_exceeds_budget(self, make_fake_client, bitnodes_responses, clock):
        client = make_fake_client(DataSourceProvider.BITNODES, bitnodes_responses)

        await make_bitnodes(client, clock, sample_size=2).get_all_metrics()

        # Snapshot + 2 detail calls
        assert len(client.requests) == 3

    @pytest.mark.asyncio
    async def test_failed_snapshot_is_failed(self, make_fake_client, clock):
        client = make_fake_client(DataSourceProvider.BITNODES)

        metrics = await make_bitnodes(client, clock).get_all_metrics()

        assert metrics.is_empty()
        assert metrics.fetch_status() == FetchStatus.FAILED
        assert client.endpoints == [SNAPSHOT_ENDPOINT]

    @pytest.mark.asyncio
    async def test_all_details_failing_leaves_estimates_unset(self, make_fake_client, clock):
        client = make_fake_client(
            DataSourceProvider.BITNODES,
            {SNAPSHOT_ENDPOINT: snapshot(["1.1.1.1:8333", "2.2.2.2:8333"])},
        )

        metrics = await make_bitnodes(client, clock).get_all_metrics()

        assert metrics.total_nodes.value == 2
        assert metrics.cloud_percentage is None
        assert metrics.top5_country_pct is None
        assert metrics.fetch_status() == FetchStatus.PARTIAL

    @pytest.mark.asyncio
    async def test_transport_exception_never_escapes(self, make_fake_client, clock):
        client = make_fake_client(
            DataSourceProvider.BITNODES,
            {SNAPSHOT_ENDPOINT: RuntimeError("socket closed")},
        )

        metrics = await make_bitnodes(client, clock).get_all_metrics()

        assert metrics.is_empty()

    @pytest.mark.asyncio
    async def test_short_detail_row(self, make_fake_client, clock):
        client = make_fake_client(
            DataSourceProvider.BITNODES,
            {"/api/v1/nodes/1.1.1.1-8333/": FetchResult.ok({"data": [70016, "/Satoshi/"]})},
        )

        detail = await make_bitnodes(client, clock).fetch_node_detail("1.1.1.1:8333")

        assert detail == NodeDetail(address="1.1.1.1", asn=None, country=None)
        assert detail.is_cloud_hosted is False

    @pytest.mark.asyncio
    async def test_malformed_key_is_skipped(self, make_fake_client, clock):
        client = make_fake_client(DataSourceProvider.BITNODES)

        detail = await make_bitnodes(client, clock).fetch_node_detail("garbage")

        assert detail is None
        assert client.requests == []

    @pytest.mark.asyncio
    async def test_detail_fetcher_called_once_per_sampled_node(self, make_fake_client, bitnodes_responses, clock):
        client = make_fake_client(DataSourceProvider.BITNODES, bitnodes_responses)
        adapter = make_bitnodes(client, clock, sample_size=3)
        detail = NodeDetail(address="1.1.1.1", asn="AS16509", country="US")

        with patch.object(adapter, "fetch_node_detail", AsyncMock(return_value=detail)) as mocked:
            metrics = await adapter.get_all_metrics()

        assert mocked.await_count == 3
        assert metrics.cloud_percentage.value == 100
        assert metrics.cloud_percentage.confidence == 0.8
