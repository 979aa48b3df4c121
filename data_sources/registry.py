"""
Source Registry - Criterion to provider resolution.

A pure lookup over immutable tables:
- Default mapping per criterion (primary + ordered fallbacks)
- Per-project overrides replacing only the primary source
- No I/O and no mutable state

Walking primary -> fallbacks at runtime is left to the caller.
"""

import logging
from dataclasses import replace
from types import MappingProxyType
from typing import Iterable, Optional

from data_sources.mappings import CRITERION_MAPPINGS, PROJECT_SOURCES
from data_sources.models import (
    CriterionDataMapping,
    DataSourceConfig,
    ProjectDataSources,
    ProjectIdentifiers,
)


logger = logging.getLogger(__name__)


def apply_override(
    mapping: CriterionDataMapping,
    override: Optional[DataSourceConfig],
) -> CriterionDataMapping:
    """Return the mapping with its primary replaced; fallbacks stay shared."""
    if override is None:
        return mapping
    return replace(mapping, primary=override)


class SourceRegistry:
    """
    Read-only registry of criterion data sources.

    Usage:
        registry = SourceRegistry()
        mapping = registry.resolve("A2", "bitcoin")

        for source in mapping.source_chain():
            ...  # try each until one yields a usable value
    """

    def __init__(
        self,
        mappings: Iterable[CriterionDataMapping] = CRITERION_MAPPINGS,
        projects: Iterable[ProjectDataSources] = PROJECT_SOURCES,
    ) -> None:
        by_criterion: dict[str, CriterionDataMapping] = {}
        for mapping in mappings:
            if mapping.criterion_id in by_criterion:
                raise ValueError(f"Duplicate mapping for criterion '{mapping.criterion_id}'")
            by_criterion[mapping.criterion_id] = mapping

        by_project: dict[str, ProjectDataSources] = {}
        for project in projects:
            if project.project_id in by_project:
                raise ValueError(f"Duplicate sources for project '{project.project_id}'")
            unknown = set(project.overrides) - set(by_criterion)
            if unknown:
                raise ValueError(
                    f"Project '{project.project_id}' overrides unknown criteria: {sorted(unknown)}"
                )
            by_project[project.project_id] = project

        self._mappings = MappingProxyType(by_criterion)
        self._projects = MappingProxyType(by_project)

        logger.debug(
            f"Source registry loaded: {len(self._mappings)} criteria, "
            f"{len(self._projects)} projects with overrides"
        )

    def resolve(
        self,
        criterion_id: str,
        project_id: str,
    ) -> Optional[CriterionDataMapping]:
        """
        Effective mapping for a criterion and project.

        Args:
            criterion_id: Criterion identifier (A1, B5, ...)
            project_id: Project slug

        Returns:
            Mapping with any project override applied, or None for an
            unknown criterion
        """
        mapping = self._mappings.get(criterion_id)
        if mapping is None:
            return None

        project = self._projects.get(project_id)
        override = project.override_for(criterion_id) if project else None
        return apply_override(mapping, override)

    def resolve_project(self, project_id: str) -> list[CriterionDataMapping]:
        """Every criterion's effective mapping for a project, in declaration order."""
        return [
            self.resolve(criterion_id, project_id)
            for criterion_id in self._mappings
        ]

    def source_chain(
        self,
        criterion_id: str,
        project_id: str,
    ) -> tuple[DataSourceConfig, ...]:
        """Sources to try for a criterion, primary first. Empty when unknown."""
        mapping = self.resolve(criterion_id, project_id)
        return mapping.source_chain() if mapping else ()

    def has_override(self, criterion_id: str, project_id: str) -> bool:
        project = self._projects.get(project_id)
        return bool(project and project.override_for(criterion_id))

    def identifiers(self, project_id: str) -> Optional[ProjectIdentifiers]:
        project = self._projects.get(project_id)
        return project.identifiers if project else None

    def criteria(self) -> list[str]:
        return list(self._mappings)

    def projects(self) -> list[str]:
        return list(self._projects)


_default_registry: Optional[SourceRegistry] = None


def get_default_registry() -> SourceRegistry:
    """Registry built from the bundled mapping tables."""
    global _default_registry
    if _default_registry is None:
        _default_registry = SourceRegistry()
    return _default_registry


def get_data_source(criterion_id: str, project_id: str) -> Optional[CriterionDataMapping]:
    """Resolve against the default registry."""
    return get_default_registry().resolve(criterion_id, project_id)
