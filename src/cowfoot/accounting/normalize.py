"""
Reduce heterogeneous source results to one numeric contribution.

Source models disagree on where they put their total. This module
checks a fixed, ordered set of locations and records which one it
used, so every contribution carries its provenance.

Lookup order (first match wins):
1. Exclusion markers: excluded=True, methodology "excluded_by_boundaries",
   or co2eq_kg present but null. The contribution is 0.
2. A direct total in TOTAL_FIELDS.
3. A nested breakdown in BREAKDOWN_FIELDS (mapping, list of numbers,
   or a table given as a list of row mappings).
4. The sum of every numeric leaf in the result, if finite and positive.
"""

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal, TypedDict

from cowfoot.core.coerce import first_non_null, numeric_leaves, scalar_num, scalar_str

logger = logging.getLogger(__name__)

EXCLUDED_METHODOLOGY = "excluded_by_boundaries"

TOTAL_FIELDS = ("co2eq_kg", "total_co2eq_kg", "total_co2eq", "total", "emissions_total_kg")
BREAKDOWN_FIELDS = ("breakdown", "emissions_breakdown", "summary")
AMOUNT_COLUMNS = ("co2eq_kg", "CO2eq_kg", "co2eq", "kg_co2eq", "emissions_kg", "value", "valor")
NAME_FIELDS = ("source", "type", "category")

Method = Literal["excluded", "direct", "breakdown", "flattened"]


class SourceResult(TypedDict, total=False):
    """Known keys of a source model result. Any other keys may be present."""

    source: str
    type: str
    category: str
    co2eq_kg: float | None
    total_co2eq_kg: float
    total_co2eq: float
    total: float
    emissions_total_kg: float
    breakdown: Any
    emissions_breakdown: Any
    summary: Any
    excluded: bool
    methodology: str


class ExtractionError(ValueError):
    """No numeric total could be read from a source result."""

    def __init__(self, message: str, source_name: str | None = None):
        super().__init__(message)
        self.source_name = source_name


@dataclass(frozen=True)
class NormalizedContribution:
    """One source's amount in kg CO2eq, with where it came from."""

    source_name: str
    amount: float
    method: Method
    field: str | None = None


# =============================================================================
# Name Resolution
# =============================================================================


def resolve_source_name(result: Mapping[str, Any], index: int, name: str | None = None) -> str:
    """Pick the name a contribution is aggregated under.

    Order: caller-supplied name, then source, type, category keys, then
    a positional "source_<index>" (1-based).
    """
    candidates = [scalar_str(name)] + [scalar_str(result.get(key)) for key in NAME_FIELDS]
    chosen = first_non_null(*candidates)
    return chosen if chosen is not None else f"source_{index}"


# =============================================================================
# Extraction
# =============================================================================


def is_excluded(result: Mapping[str, Any]) -> bool:
    """Check the exclusion markers that short-circuit extraction."""
    if result.get("excluded") is True:
        return True
    if scalar_str(result.get("methodology")) == EXCLUDED_METHODOLOGY:
        return True
    return "co2eq_kg" in result and result["co2eq_kg"] is None


def _is_table(value: Any) -> bool:
    return (
        isinstance(value, Sequence)
        and not isinstance(value, str | bytes)
        and len(value) > 0
        and all(isinstance(row, Mapping) for row in value)
    )


def sum_breakdown(value: Any) -> float | None:
    """Sum a nested breakdown.

    Tables use the first column found in AMOUNT_COLUMNS, or every numeric
    cell when none matches. Mappings and sequences sum all numeric leaves.
    Returns None when nothing numeric is found.
    """
    if value is None:
        return None
    if _is_table(value):
        for column in AMOUNT_COLUMNS:
            if any(column in row for row in value):
                values = [scalar_num(row.get(column)) for row in value]
                return math.fsum(v for v in values if v is not None)
        leaves = list(numeric_leaves(value))
        return math.fsum(leaves) if leaves else None
    number = scalar_num(value)
    if number is not None:
        return number
    leaves = list(numeric_leaves(value))
    return math.fsum(leaves) if leaves else None


def normalize_result(
    result: Mapping[str, Any],
    index: int,
    name: str | None = None,
) -> NormalizedContribution:
    """
    Extract a single numeric contribution from a source result.

    Args:
        result: Source result mapping
        index: 1-based position of the result in its batch
        name: Caller-supplied name binding (wins over keys in the result)

    Returns:
        NormalizedContribution with the amount and how it was found

    Raises:
        ExtractionError: If no total can be found, or the total is negative
    """
    if not isinstance(result, Mapping):
        label = name or f"source_{index}"
        raise ExtractionError(
            f"Source result for '{label}' must be a mapping, got {type(result).__name__}",
            label,
        )

    source_name = resolve_source_name(result, index, name)

    if is_excluded(result):
        return NormalizedContribution(source_name, 0.0, "excluded")

    for field in TOTAL_FIELDS:
        if field in result:
            amount = scalar_num(result[field])
            if amount is not None:
                return _checked(source_name, amount, "direct", field)

    for field in BREAKDOWN_FIELDS:
        value = result.get(field)
        if value is not None:
            amount = sum_breakdown(value)
            if amount is not None:
                return _checked(source_name, amount, "breakdown", field)
            break

    leaves = list(numeric_leaves(result))
    flattened = math.fsum(leaves) if leaves else 0.0
    if math.isfinite(flattened) and flattened > 0:
        logger.warning(
            "Source '%s' has no total field; summed %d numeric values instead",
            source_name,
            len(leaves),
        )
        return NormalizedContribution(source_name, flattened, "flattened")

    raise ExtractionError(f"Could not extract a numeric total from source '{source_name}'", source_name)


def _checked(source_name: str, amount: float, method: Method, field: str) -> NormalizedContribution:
    if not math.isfinite(amount):
        raise ExtractionError(f"Total for source '{source_name}' is not finite", source_name)
    if amount < 0:
        raise ExtractionError(
            f"Total for source '{source_name}' is negative ({amount}) in '{field}'",
            source_name,
        )
    return NormalizedContribution(source_name, amount, method, field)
