"""Core module - configuration, units, coercion and validation."""

from cowfoot.core import coerce, units
from cowfoot.core.config import get_output_dir, settings
from cowfoot.core.units import EMISSION_UNITS, format_co2eq, litres_to_kg
from cowfoot.core.validation import InputValidationError

__all__ = [
    "coerce",
    "units",
    "settings",
    "get_output_dir",
    "EMISSION_UNITS",
    "format_co2eq",
    "litres_to_kg",
    "InputValidationError",
]
