"""Unit conversion utilities using pint.

All internal data is stored in metric units:
- Mass: kilograms (kg)
- Volume: litres (L)
- Area: hectares (ha)
- Emissions: kg CO2 equivalent per year (kg CO2eq yr-1)

Display units are controlled by settings.display_units:
- "kg": Display as stored
- "t": Convert emissions to tonnes CO2eq
"""

import pint

from cowfoot.core.config import settings

# Create a unit registry (lazily initialized)
_ureg: pint.UnitRegistry | None = None

EMISSION_UNITS = "kg CO2eq yr-1"

# Molecular weight ratio N2O / N2O-N
N2O_PER_N = 44 / 28


def get_ureg() -> pint.UnitRegistry:
    """Get the pint unit registry (lazily initialized)."""
    global _ureg
    if _ureg is None:
        _ureg = pint.UnitRegistry()
    return _ureg


# =============================================================================
# Milk Conversions
# =============================================================================


def litres_to_kg(litres: float, density_kg_per_l: float = 1.03) -> float:
    """Convert a milk volume to mass.

    Args:
        litres: Milk volume in litres
        density_kg_per_l: Milk density in kg/L

    Returns:
        Milk mass in kg
    """
    ureg = get_ureg()
    volume = litres * ureg.liter
    density = density_kg_per_l * ureg.kilogram / ureg.liter
    return (volume * density).to(ureg.kilogram).magnitude


# =============================================================================
# Emission Conversions
# =============================================================================


def kg_to_tonnes(value_kg: float) -> float:
    """Convert kilograms to metric tonnes."""
    ureg = get_ureg()
    return (value_kg * ureg.kilogram).to(ureg.metric_ton).magnitude


def tonnes_to_kg(value_t: float) -> float:
    """Convert metric tonnes to kilograms."""
    ureg = get_ureg()
    return (value_t * ureg.metric_ton).to(ureg.kilogram).magnitude


def is_tonnes() -> bool:
    """Check if display units are tonnes."""
    return settings.display_units == "t"


def co2eq_to_display(value_kg: float) -> tuple[float, str]:
    """Convert kg CO2eq to display units.

    Returns:
        Tuple of (value, unit_label) in display units
    """
    if is_tonnes():
        return (kg_to_tonnes(value_kg), "t CO2eq")
    return (value_kg, "kg CO2eq")


def format_co2eq(value_kg: float | None, decimals: int | None = None) -> str:
    """Format an emission amount for display.

    Args:
        value_kg: Emissions in kg CO2eq (None renders as "n/a")
        decimals: Decimal places (default: 0 for kg, 2 for tonnes)

    Returns:
        Formatted string like "451,513 kg CO2eq" or "451.51 t CO2eq"
    """
    if value_kg is None:
        return "n/a"
    value, unit = co2eq_to_display(value_kg)
    if decimals is None:
        decimals = 2 if is_tonnes() else 0
    return f"{value:,.{decimals}f} {unit}"
