"""
Data Sources Package - Where each scoring criterion's data comes from.

Quick Start:
    from data_sources import SourceRegistry

    registry = SourceRegistry()
    mapping = registry.resolve("A4", "bitcoin")

    print(mapping.primary.provider)      # DataSourceProvider.BITNODES
    for source in mapping.fallbacks:
        print(source.provider)

Overrides replace only the primary source. Fallbacks are shared by
every project.
"""

from data_sources.mappings import CRITERION_MAPPINGS, PROJECT_SOURCES
from data_sources.models import (
    CriterionDataMapping,
    DataSourceConfig,
    DataSourceProvider,
    ProjectDataSources,
    ProjectIdentifiers,
    UpdateFrequency,
)
from data_sources.registry import (
    SourceRegistry,
    apply_override,
    get_data_source,
    get_default_registry,
)


__all__ = [
    # Models
    "CriterionDataMapping",
    "DataSourceConfig",
    "DataSourceProvider",
    "ProjectDataSources",
    "ProjectIdentifiers",
    "UpdateFrequency",

    # Tables
    "CRITERION_MAPPINGS",
    "PROJECT_SOURCES",

    # Registry
    "SourceRegistry",
    "apply_override",
    "get_data_source",
    "get_default_registry",
]
