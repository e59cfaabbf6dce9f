"""
System boundaries for farm emission accounting.

A boundary says which emission sources count toward a farm total.
Predefined scopes follow the usual life-cycle stages of milk:

- farm_gate: on-farm sources only (enteric, manure, soil, energy, inputs)
- processing: farm_gate plus transport and processing
- full_cycle: processing plus packaging and consumer stages
- full: unbounded, every source counts

A custom iterable of source names gives a "custom" boundary. Boundaries
are immutable and safe to share between worker threads.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from cowfoot.core.config import settings

# =============================================================================
# Source Catalogue
# =============================================================================

FARM_GATE_SOURCES = ("enteric", "manure", "soil", "energy", "inputs")
PROCESSING_SOURCES = FARM_GATE_SOURCES + ("transport", "processing")
FULL_CYCLE_SOURCES = PROCESSING_SOURCES + ("packaging", "consumer")

PRESET_SCOPES: dict[str, tuple[str, ...]] = {
    "farm_gate": FARM_GATE_SOURCES,
    "processing": PROCESSING_SOURCES,
    "full_cycle": FULL_CYCLE_SOURCES,
}

# Older result records name the enteric source "entero"
SOURCE_ALIASES = {"entero": "enteric"}


def canonical_source(name: str) -> str:
    """Map a source name to its canonical spelling."""
    key = name.strip().lower()
    return SOURCE_ALIASES.get(key, key)


class BoundaryScope(Enum):
    """Whether a boundary restricts the source set."""

    FULL = "full"
    PARTIAL = "partial"


@dataclass(frozen=True)
class SystemBoundary:
    """Which emission sources count toward a total.

    include=None means the boundary is unbounded and every source counts.
    """

    scope: str
    include: frozenset[str] | None = None
    factors: str = "IPCC2019"

    @property
    def kind(self) -> BoundaryScope:
        return BoundaryScope.FULL if self.include is None else BoundaryScope.PARTIAL

    @property
    def excluded(self) -> frozenset[str]:
        """Catalogued sources left out of this boundary."""
        if self.include is None:
            return frozenset()
        return frozenset(FULL_CYCLE_SOURCES) - self.include

    def is_included(self, source_name: str) -> bool:
        if self.include is None:
            return True
        return canonical_source(source_name) in self.include

    def describe(self) -> str:
        if self.include is None:
            return f"{self.scope} (all sources)"
        return f"{self.scope} ({', '.join(sorted(self.include))})"


UNBOUNDED = SystemBoundary(scope="full", include=None)


def set_system_boundaries(
    scope: str | Iterable[str] | None = None,
    include: Iterable[str] | None = None,
    factors: str | None = None,
) -> SystemBoundary:
    """
    Build a system boundary.

    Args:
        scope: A preset name ("farm_gate", "processing", "full_cycle", "full"),
               "partial" together with include, or an iterable of source names
               (defaults to settings.default_scope)
        include: Explicit source names; overrides the preset's source set
        factors: Emission factor set label (defaults to settings.emission_factors)

    Returns:
        Frozen SystemBoundary

    Raises:
        ValueError: If scope names no preset and include is not given
    """
    factors = factors or settings.emission_factors
    if scope is None:
        scope = settings.default_scope

    if not isinstance(scope, str):
        names = _normalize_names(scope)
        return SystemBoundary(scope="custom", include=names, factors=factors)

    scope = scope.strip().lower()
    if include is not None:
        return SystemBoundary(scope=scope, include=_normalize_names(include), factors=factors)
    if scope == "full":
        return SystemBoundary(scope="full", include=None, factors=factors)
    if scope in PRESET_SCOPES:
        return SystemBoundary(scope=scope, include=frozenset(PRESET_SCOPES[scope]), factors=factors)

    valid = ", ".join(["full", *PRESET_SCOPES])
    raise ValueError(f"Unknown boundary scope {scope!r} without include list. Valid: {valid}")


def resolve_boundary(boundary: SystemBoundary | None) -> SystemBoundary:
    """Return boundary, or the unbounded boundary when None."""
    return UNBOUNDED if boundary is None else boundary


def _normalize_names(names: Iterable[str]) -> frozenset[str]:
    if isinstance(names, str):
        names = [names]
    result = frozenset(canonical_source(name) for name in names if name and name.strip())
    if not result:
        raise ValueError("Boundary include list must name at least one source")
    return result
