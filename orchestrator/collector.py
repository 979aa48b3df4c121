"""
Orchestrator - Network Data Collector.

============================================================
RESPONSIBILITY
============================================================
Runs the source adapters of each project and produces the snapshot
document that downstream persistence consumes:

    {lastUpdated, source, totalScore, fetchStatus, metrics}

- One RateLimitedClient per provider, shared by every project that
  uses the provider (the rate budget is per provider)
- Projects are collected in parallel; they share no mutable state
- Nothing here writes files

============================================================
FETCH STATUS
============================================================
Each adapter record is classified by its resolved core metrics.
A project with several adapters is SUCCESS only if all of them are,
FAILED only if all of them are, PARTIAL otherwise.

============================================================
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

import aiohttp

from core.clock import ClockFactory, ClockProtocol, to_iso8601
from data_sources.models import DataSourceProvider
from fetchers.adapter import BaseSourceAdapter
from fetchers.base import RateLimitedClient
from fetchers.config import FetcherSettings, get_config
from fetchers.models import FetchStatus, MeasuredValue, MetricsRecord
from fetchers.providers import ADAPTER_CLASSES, BitnodesAdapter


logger = logging.getLogger(__name__)


# Adapters run for each project, in source order
PROJECT_ADAPTERS: dict[str, tuple[DataSourceProvider, ...]] = {
    "bitcoin": (DataSourceProvider.BLOCKCHAIN, DataSourceProvider.BITNODES),
    "solana": (DataSourceProvider.SOLANA_RPC,),
    "cosmos": (DataSourceProvider.COSMOS_LCD,),
    "sui": (DataSourceProvider.SUI_RPC,),
    "aptos": (DataSourceProvider.APTOS,),
    "filecoin": (DataSourceProvider.FILFOX,),
}


def combine_statuses(statuses: Iterable[FetchStatus]) -> FetchStatus:
    """Overall status of several adapter runs."""
    statuses = list(statuses)
    if not statuses or all(s is FetchStatus.FAILED for s in statuses):
        return FetchStatus.FAILED
    if all(s is FetchStatus.SUCCESS for s in statuses):
        return FetchStatus.SUCCESS
    return FetchStatus.PARTIAL


@dataclass(frozen=True)
class NetworkSnapshot:
    """Collected metrics of one project at one point in time."""
    project_id: str
    last_updated: datetime
    sources: tuple[DataSourceProvider, ...]
    fetch_status: FetchStatus
    records: tuple[MetricsRecord, ...] = field(default_factory=tuple)
    total_score: Optional[float] = None

    @property
    def source(self) -> str:
        return "+".join(p.value for p in self.sources)

    @property
    def metrics(self) -> dict[str, Optional[MeasuredValue]]:
        """Flattened metrics of every record; earlier sources win on clashes."""
        merged: dict[str, Optional[MeasuredValue]] = {}
        for provider, record in zip(self.sources, self.records):
            for name, value in record.measured_values(provider, self.last_updated).items():
                merged.setdefault(name, value)
        return merged

    def to_dict(self) -> dict[str, Any]:
        """Document handed to persistence collaborators."""
        return {
            "lastUpdated": to_iso8601(self.last_updated),
            "source": self.source,
            "totalScore": self.total_score,
            "fetchStatus": self.fetch_status.value,
            "metrics": {
                name: value.to_dict() if value is not None else None
                for name, value in self.metrics.items()
            },
        }


class NetworkDataCollector:
    """
    Collects snapshots for one or many projects.

    Usage:
        async with NetworkDataCollector() as collector:
            snapshots = await collector.collect_all()

        for project_id, snapshot in snapshots.items():
            print(project_id, snapshot.fetch_status.value)
    """

    def __init__(
        self,
        settings: Optional[FetcherSettings] = None,
        clients: Optional[Mapping[DataSourceProvider, RateLimitedClient]] = None,
        project_adapters: Optional[Mapping[str, tuple[DataSourceProvider, ...]]] = None,
        clock: Optional[ClockProtocol] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._settings = settings or get_config()
        self._clients: dict[DataSourceProvider, RateLimitedClient] = dict(clients or {})
        self._project_adapters = dict(project_adapters or PROJECT_ADAPTERS)
        self._clock = clock or ClockFactory.get_clock()
        self._session = session

    @property
    def projects(self) -> list[str]:
        return sorted(self._project_adapters)

    def client_for(self, provider: DataSourceProvider) -> RateLimitedClient:
        """The shared client of a provider, created on first use."""
        client = self._clients.get(provider)
        if client is None:
            client = RateLimitedClient(
                provider,
                self._settings.for_provider(provider),
                session=self._session,
                clock=self._clock,
            )
            self._clients[provider] = client
        return client

    def build_adapter(self, provider: DataSourceProvider) -> BaseSourceAdapter:
        try:
            adapter_class = ADAPTER_CLASSES[provider]
        except KeyError:
            raise ValueError(f"No adapter for provider '{provider.value}'") from None
        kwargs: dict[str, Any] = {"clock": self._clock}
        if issubclass(adapter_class, BitnodesAdapter):
            kwargs["sample_size"] = self._settings.sample_size
        return adapter_class(self.client_for(provider), **kwargs)

    async def collect(
        self,
        project_id: str,
        total_score: Optional[float] = None,
    ) -> NetworkSnapshot:
        """
        Run every adapter of a project concurrently.

        Raises:
            KeyError: Unknown project
        """
        providers = self._project_adapters[project_id]
        adapters = [self.build_adapter(p) for p in providers]

        records = await asyncio.gather(*(a.get_all_metrics() for a in adapters))
        status = combine_statuses(r.fetch_status() for r in records)

        log = logger.warning if status is FetchStatus.FAILED else logger.info
        log(f"[{project_id}] Collection finished: {status.value}")

        return NetworkSnapshot(
            project_id=project_id,
            last_updated=self._clock.now(),
            sources=tuple(providers),
            fetch_status=status,
            records=tuple(records),
            total_score=total_score,
        )

    async def collect_all(
        self,
        project_ids: Optional[Iterable[str]] = None,
        total_scores: Optional[Mapping[str, float]] = None,
    ) -> dict[str, NetworkSnapshot]:
        """Collect several projects in parallel; one failure never stops the rest."""
        project_ids = list(project_ids) if project_ids is not None else self.projects
        total_scores = total_scores or {}

        results = await asyncio.gather(
            *(self.collect(p, total_scores.get(p)) for p in project_ids),
            return_exceptions=True,
        )

        snapshots: dict[str, NetworkSnapshot] = {}
        for project_id, result in zip(project_ids, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, Exception):
                logger.error(f"[{project_id}] Collection failed: {result!r}")
                continue
            snapshots[project_id] = result
        return snapshots

    async def close(self) -> None:
        """Close every client."""
        for client in self._clients.values():
            await client.close()

    async def __aenter__(self) -> "NetworkDataCollector":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
