"""
Orchestrator Package - Per-project collection runs.

Quick Start:
    from orchestrator import NetworkDataCollector

    async def refresh():
        async with NetworkDataCollector() as collector:
            snapshot = await collector.collect("solana")

        document = snapshot.to_dict()
        # {"lastUpdated": ..., "source": "solana_rpc", "totalScore": None,
        #  "fetchStatus": "success", "metrics": {...}}
"""

from orchestrator.collector import (
    PROJECT_ADAPTERS,
    NetworkDataCollector,
    NetworkSnapshot,
    combine_statuses,
)


__all__ = [
    "PROJECT_ADAPTERS",
    "NetworkDataCollector",
    "NetworkSnapshot",
    "combine_statuses",
]
