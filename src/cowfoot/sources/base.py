"""Helpers shared by the source models."""

from cowfoot.accounting.boundaries import SystemBoundary, resolve_boundary
from cowfoot.accounting.normalize import EXCLUDED_METHODOLOGY
from cowfoot.core.units import EMISSION_UNITS

# Global warming potentials, 100-year horizon (IPCC AR6)
GWP_CH4 = 27.2
GWP_N2O = 273.0


def is_excluded_by(boundaries: SystemBoundary | None, source: str) -> bool:
    """Check whether a boundary leaves a source out (None includes everything)."""
    return not resolve_boundary(boundaries).is_included(source)


def excluded_result(source: str) -> dict:
    """Result for a source outside the system boundary."""
    return {
        "source": source,
        "co2eq_kg": 0.0,
        "units": EMISSION_UNITS,
        "methodology": EXCLUDED_METHODOLOGY,
        "excluded": True,
    }
