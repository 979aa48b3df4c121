"""
Bitnodes Adapter - Bitcoin reachable-node census.

Free tier: ~50 requests/day without authentication.

Endpoints:
- /api/v1/snapshots/latest/: node count plus the node key list (one call)
- /api/v1/nodes/<address>-<port>/: per-node detail with ASN and country

The snapshot has no geo data, so hosting and country concentration are
estimated from one shared random sample of per-node detail calls.
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, Optional

from analytics.sampling import SampleDraw, SamplingEstimator, share_matching, top_n_share
from analytics.units import parse_int_amount
from core.clock import ClockProtocol
from fetchers.adapter import BaseSourceAdapter
from fetchers.base import RateLimitedClient
from fetchers.config import get_config
from fetchers.exceptions import FetcherError
from fetchers.models import MeasuredValue, MetricsRecord


logger = logging.getLogger(__name__)


SNAPSHOT_ENDPOINT = "/api/v1/snapshots/latest/"

# Known cloud / hosting provider ASNs
CLOUD_ASNS = frozenset({
    "AS16509",   # Amazon
    "AS14618",   # Amazon
    "AS15169",   # Google
    "AS8075",    # Microsoft
    "AS396982",  # Google Cloud
    "AS13335",   # Cloudflare
    "AS14061",   # DigitalOcean
    "AS20473",   # Vultr
    "AS63949",   # Linode
    "AS24940",   # Hetzner
    "AS51167",   # Contabo
    "AS16276",   # OVH
    "AS12876",   # Scaleway
})

CLOUD_CONFIDENCE_CAP = 0.8
COUNTRY_CONFIDENCE_CAP = 0.7

# Positions inside the node detail `data` array
COUNTRY_INDEX = 7
ASN_INDEX = 11


@dataclass(frozen=True)
class NodeDetail:
    """Geo/hosting attributes of one sampled node."""
    address: str
    asn: Optional[str] = None
    country: Optional[str] = None

    @property
    def is_cloud_hosted(self) -> bool:
        return self.asn in CLOUD_ASNS


@dataclass(frozen=True)
class BitnodesMetrics(MetricsRecord):
    """Bitcoin node count and sampled hosting/geo concentration."""

    CORE_METRICS = (
        "total_nodes",
        "cloud_percentage",
        "top5_country_pct",
    )

    total_nodes: Optional[MeasuredValue] = None
    cloud_percentage: Optional[MeasuredValue] = None
    top5_country_pct: Optional[MeasuredValue] = None


def parse_node_key(key: str) -> tuple[str, str]:
    """
    Split a snapshot node key into (address, port).

    '1.2.3.4:8333' -> ('1.2.3.4', '8333')
    '[2001:db8::1]:8333' -> ('2001:db8::1', '8333')
    """
    if key.startswith("["):
        address = key[1:key.rindex("]")]
        port = key.rsplit(":", 1)[1]
        return address, port
    address, port = key.rsplit(":", 1)
    return address, port


class BitnodesAdapter(BaseSourceAdapter):
    """
    Bitnodes adapter.

    Total nodes comes from the snapshot (confidence 1.0). Cloud hosting
    and top-5 country share are estimated from a single random sample
    of sample_size nodes; .onion nodes are never sampled.
    """

    metrics_type = BitnodesMetrics

    def __init__(
        self,
        client: RateLimitedClient,
        clock: Optional[ClockProtocol] = None,
        sample_size: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(client, clock)
        self._sample_size = sample_size or get_config().sample_size
        self._rng = rng

    @property
    def sample_size(self) -> int:
        return self._sample_size

    async def collect(self) -> BitnodesMetrics:
        snapshot = await self.fetch_snapshot()
        if snapshot is None:
            return BitnodesMetrics()

        total_nodes = None
        try:
            total_nodes = self.measured(parse_int_amount(self.dig(snapshot, "total_nodes")))
        except (FetcherError, TypeError, ValueError) as e:
            logger.warning(f"[{self.name}] total_nodes unavailable: {e}")

        node_keys = [k for k in (snapshot.get("nodes") or {}) if ".onion" not in k]

        async def load_population() -> list[str]:
            return node_keys

        estimator = SamplingEstimator(
            population_loader=load_population,
            detail_fetcher=self.fetch_node_detail,
            rng=self._rng,
            name=self.name,
        )
        draw = await estimator.draw(self._sample_size)

        return BitnodesMetrics(
            total_nodes=total_nodes,
            cloud_percentage=self._estimate(
                estimator, draw,
                share_matching(lambda node: node.is_cloud_hosted),
                CLOUD_CONFIDENCE_CAP,
            ),
            top5_country_pct=self._estimate(
                estimator, draw,
                top_n_share(lambda node: node.country, n=5),
                COUNTRY_CONFIDENCE_CAP,
            ),
        )

    def _estimate(
        self,
        estimator: SamplingEstimator,
        draw: Optional[SampleDraw],
        aggregate: Any,
        cap: float,
    ) -> Optional[MeasuredValue]:
        estimate = estimator.summarize(draw, aggregate, cap)
        if estimate is None:
            return None
        return self.measured(estimate.value, estimate.confidence)

    async def fetch_snapshot(self) -> Optional[dict[str, Any]]:
        result = await self._client.request(SNAPSHOT_ENDPOINT)
        if not result.success or not isinstance(result.data, dict):
            return None
        return result.data

    async def fetch_node_detail(self, node_key: str) -> Optional[NodeDetail]:
        """Detail for one node; None when the call fails or lacks data."""
        try:
            address, port = parse_node_key(node_key)
        except ValueError:
            logger.debug(f"[{self.name}] Skipping malformed node key {node_key!r}")
            return None

        result = await self._client.request(f"/api/v1/nodes/{address}-{port}/")
        if not result.success or not isinstance(result.data, dict):
            return None

        data = result.data.get("data")
        if not isinstance(data, list):
            return None

        return NodeDetail(
            address=address,
            asn=data[ASN_INDEX] if len(data) > ASN_INDEX else None,
            country=data[COUNTRY_INDEX] if len(data) > COUNTRY_INDEX else None,
        )
