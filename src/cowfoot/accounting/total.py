"""
Combine normalized source contributions into a farm total.

Sums use math.fsum, which rounds once, so the total and every
per-source entry are identical for any ordering of the inputs.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from cowfoot.accounting.normalize import NormalizedContribution, normalize_result
from cowfoot.core.coerce import scalar_num
from cowfoot.core.units import EMISSION_UNITS


class AggregationError(ValueError):
    """Aggregation was called without any contributions."""


@dataclass(frozen=True)
class AggregatedTotal:
    """Farm total and per-source breakdown in kg CO2eq per year."""

    total: float
    breakdown: dict[str, float] = field(default_factory=dict)
    source_count: int = 0
    units: str = EMISSION_UNITS

    # Aliases used by callers that read result dicts
    @property
    def co2eq_kg(self) -> float:
        return self.total

    @property
    def total_co2eq_kg(self) -> float:
        return self.total

    def by_source(self) -> list[dict]:
        """One row per source, in name order."""
        return [{"source": name, "co2eq_kg": amount} for name, amount in self.breakdown.items()]

    def shares(self) -> dict[str, float]:
        """Percentage share of each source (empty if the total is 0)."""
        if self.total <= 0:
            return {}
        return {name: round(100 * amount / self.total, 1) for name, amount in self.breakdown.items()}

    def to_dict(self) -> dict:
        return {
            "co2eq_kg": self.total,
            "total_co2eq_kg": self.total,
            "breakdown": dict(self.breakdown),
            "n_sources": self.source_count,
            "units": self.units,
        }


def aggregate(contributions: Iterable[NormalizedContribution]) -> AggregatedTotal:
    """
    Sum contributions, grouping by source name.

    Contributions sharing a name are summed into one breakdown entry.
    source_count counts contributions, not distinct names.

    Raises:
        AggregationError: If contributions is empty
    """
    contributions = list(contributions)
    if not contributions:
        raise AggregationError("Must provide at least one emission source")

    grouped: dict[str, list[float]] = {}
    for contribution in contributions:
        grouped.setdefault(contribution.source_name, []).append(contribution.amount)

    breakdown = {name: math.fsum(grouped[name]) for name in sorted(grouped)}
    # Total is the sum of the breakdown in name order, so the two always agree
    total = sum(breakdown.values())
    return AggregatedTotal(total=total, breakdown=breakdown, source_count=len(contributions))


def calc_total_emissions(*results: Mapping[str, Any], **named_results: Mapping[str, Any]) -> AggregatedTotal:
    """
    Normalize and aggregate source results.

    Positional results are named from their own keys; keyword results
    are named by their keyword.

    Example:
        >>> calc_total_emissions({"source": "enteric", "co2eq_kg": 100.0}, soil={"total": 20})
        AggregatedTotal(total=120.0, breakdown={'enteric': 100.0, 'soil': 20.0}, ...)

    Raises:
        AggregationError: If no results are given
        ExtractionError: If a result has no readable total
    """
    contributions = [normalize_result(result, i) for i, result in enumerate(results, start=1)]
    offset = len(contributions)
    for i, (name, result) in enumerate(named_results.items(), start=offset + 1):
        contributions.append(normalize_result(result, i, name=name))
    return aggregate(contributions)


def ensure_source(result: Mapping[str, Any], name: str) -> dict:
    """Return a copy of result with a source name and a finite co2eq_kg.

    Used where a missing total should count as 0 rather than fail.
    Excluded results are returned as they are.
    """
    fixed = dict(result)
    if not fixed.get("source"):
        fixed["source"] = name
    if fixed.get("excluded") is True:
        return fixed
    if "co2eq_kg" in fixed and scalar_num(fixed["co2eq_kg"]) is None:
        fixed["co2eq_kg"] = 0.0
    return fixed
