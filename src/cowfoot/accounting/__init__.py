"""Accounting - system boundaries, result normalization and totals."""

from cowfoot.accounting.boundaries import (
    BoundaryScope,
    SystemBoundary,
    resolve_boundary,
    set_system_boundaries,
)
from cowfoot.accounting.normalize import (
    ExtractionError,
    NormalizedContribution,
    SourceResult,
    normalize_result,
)
from cowfoot.accounting.total import (
    AggregatedTotal,
    AggregationError,
    aggregate,
    calc_total_emissions,
)

__all__ = [
    "BoundaryScope",
    "SystemBoundary",
    "resolve_boundary",
    "set_system_boundaries",
    "ExtractionError",
    "NormalizedContribution",
    "SourceResult",
    "normalize_result",
    "AggregatedTotal",
    "AggregationError",
    "aggregate",
    "calc_total_emissions",
]
