"""
Fetcher Models - Uniform results and normalized metrics records.

Every value produced by the acquisition layer is either a concrete
number or None. None means "unavailable" and is never coerced to 0.
"""

from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from data_sources.models import DataSourceProvider


Scalar = Union[int, float, str]


class FetchStatus(Enum):
    """Outcome of one collection run for a project."""
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchResult:
    """
    Uniform outcome of a single remote call.

    Transport errors, timeouts and non-2xx responses all arrive here
    as success=False with a human-readable error.
    """
    success: bool
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @classmethod
    def ok(cls, data: Any, status_code: Optional[int] = None) -> "FetchResult":
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def fail(cls, error: str, status_code: Optional[int] = None) -> "FetchResult":
        return cls(success=False, error=error, status_code=status_code)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "error": self.error,
            "status_code": self.status_code,
        }


@dataclass(frozen=True)
class MeasuredValue:
    """A single measurement with provenance and confidence."""
    value: Optional[Scalar]
    timestamp: datetime
    provider: DataSourceProvider
    confidence: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")

    @property
    def is_available(self) -> bool:
        return self.value is not None

    @property
    def is_sampled(self) -> bool:
        """True when the value came from a partial measurement."""
        return self.confidence < 1.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "value": self.value,
            "timestamp": self.timestamp.isoformat(),
            "provider": self.provider.value,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class MetricsRecord:
    """
    Base class for per-adapter metrics records.

    Subclasses declare Optional fields defaulting to None, plus the
    CORE_METRICS subset used for fetch status classification.
    """

    CORE_METRICS: ClassVar[tuple[str, ...]] = ()
    # Resolved core metrics needed for SUCCESS; None means all of them
    SUCCESS_THRESHOLD: ClassVar[Optional[int]] = None

    @classmethod
    def empty(cls) -> "MetricsRecord":
        """Record with every field unavailable."""
        return cls(**{f.name: None for f in fields(cls)})

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            data[f.name] = value.to_dict() if isinstance(value, MeasuredValue) else value
        return data

    def measured_values(
        self,
        provider: DataSourceProvider,
        timestamp: datetime,
    ) -> dict[str, Optional[MeasuredValue]]:
        """
        Every field with provenance attached.

        Plain values are exact readings of the given provider; fields
        that already carry a MeasuredValue keep their own provenance.
        """
        data: dict[str, Optional[MeasuredValue]] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or isinstance(value, MeasuredValue):
                data[f.name] = value
            else:
                data[f.name] = MeasuredValue(value=value, timestamp=timestamp, provider=provider)
        return data

    def resolved_fields(self) -> list[str]:
        """Names of fields holding a value."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def is_empty(self) -> bool:
        return not self.resolved_fields()

    def fetch_status(self) -> FetchStatus:
        return classify_fetch_status(
            self,
            self.CORE_METRICS or tuple(self.field_names()),
            self.SUCCESS_THRESHOLD,
        )


def classify_fetch_status(
    record: MetricsRecord,
    core_fields: tuple[str, ...],
    success_threshold: Optional[int] = None,
) -> FetchStatus:
    """
    Classify a collection run by how many core metrics resolved.

    Args:
        record: Metrics record produced by an adapter
        core_fields: Field names that count towards the classification
        success_threshold: Resolved count needed for SUCCESS (defaults to all)

    Returns:
        SUCCESS, PARTIAL or FAILED
    """
    resolved = sum(1 for name in core_fields if getattr(record, name, None) is not None)
    threshold = success_threshold if success_threshold is not None else len(core_fields)

    if resolved == 0:
        return FetchStatus.FAILED
    if resolved >= threshold:
        return FetchStatus.SUCCESS
    return FetchStatus.PARTIAL
