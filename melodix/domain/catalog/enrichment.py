"""Outcome of a best-effort enrichment lookup against the catalog provider."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class EnrichmentResult:
    """One enrichment attempt: found with data, not found, or failed and ignored.

    Callers fall back to their own defaults unless ``found`` is true; the
    failure is carried along so it can be logged and counted.
    """

    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"

    status: str
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def found_with(cls, data: Dict[str, Any]) -> "EnrichmentResult":
        return cls(status=cls.FOUND, data=dict(data))

    @classmethod
    def not_found(cls) -> "EnrichmentResult":
        return cls(status=cls.NOT_FOUND)

    @classmethod
    def failed(cls, error: object) -> "EnrichmentResult":
        return cls(status=cls.FAILED, error=str(error))

    @property
    def found(self) -> bool:
        return self.status == self.FOUND

    def value(self, key: str, default: Any = None) -> Any:
        """Return the enriched value for ``key`` or ``default`` when absent/empty."""
        if not self.found:
            return default
        candidate = self.data.get(key)
        if candidate is None or candidate == "":
            return default
        return candidate


__all__ = ["EnrichmentResult"]
