"""
Emission intensities: farm totals per unit of milk and per hectare.

Milk is normalized to fat- and protein-corrected milk (FPCM):

    FPCM (kg) = milk (kg) x (0.1226 x fat% + 0.0776 x protein% + 0.2534)

A zero or missing denominator gives None (undefined) rather than an
error; negative inputs and out-of-range percentages raise
InputValidationError.

References:
-----------
[1] IDF (2022). "The IDF global Carbon Footprint standard for the dairy
    sector." Bulletin of the IDF No. 520/2022, Eq. 1.
"""

import logging
import math
from collections.abc import Mapping
from typing import Any

from cowfoot.accounting.total import AggregatedTotal
from cowfoot.core.coerce import scalar_num
from cowfoot.core.units import litres_to_kg
from cowfoot.core.validation import InputValidationError, check_non_negative, check_percentage

logger = logging.getLogger(__name__)

# Land-use categories accepted in an area breakdown
AREA_CATEGORIES = (
    "pasture_permanent",
    "pasture_temporary",
    "crops_feed",
    "crops_cash",
    "infrastructure",
    "woodland",
)

# Categories that do not produce milk
NON_PRODUCTIVE_AREAS = ("infrastructure", "woodland")


def fpcm_factor(fat: float, protein: float) -> float:
    """FPCM correction factor for a milk composition (% fat, % protein)."""
    return 0.1226 * fat + 0.0776 * protein + 0.2534


def total_value(total_emissions: float | AggregatedTotal | Mapping[str, Any]) -> float:
    """Read a total from a number, an AggregatedTotal or a total dict."""
    if isinstance(total_emissions, AggregatedTotal):
        value = total_emissions.total
    elif isinstance(total_emissions, Mapping):
        value = scalar_num(total_emissions.get("total_co2eq_kg", total_emissions.get("co2eq_kg")))
        if value is None:
            raise InputValidationError("total_emissions has no numeric total", "total_emissions")
    else:
        value = total_emissions
    return check_non_negative(value, "total_emissions")


def _ratio(numerator: float, denominator: float | None) -> float | None:
    if denominator is None or denominator == 0:
        return None
    return numerator / denominator


def calc_intensity_litre(
    total_emissions: float | AggregatedTotal | Mapping[str, Any],
    milk_litres: float | None,
    fat: float = 4.0,
    protein: float = 3.3,
    milk_density: float = 1.03,
) -> dict:
    """
    Emission intensity per kg of FPCM and per litre of milk.

    Args:
        total_emissions: Farm total (kg CO2eq/year)
        milk_litres: Milk delivered (L/year)
        fat: Milk fat (%)
        protein: Milk protein (%)
        milk_density: kg/L

    Returns:
        Dict with intensity_co2eq_per_kg_fpcm, intensity_co2eq_per_litre,
        fpcm_production_kg, milk_production_kg and the inputs used.
        Intensities are None when there is no milk.
    """
    total = total_value(total_emissions)
    fat = check_percentage(fat, "fat")
    protein = check_percentage(protein, "protein")
    milk_density = check_non_negative(milk_density, "milk_density")
    litres = scalar_num(milk_litres)
    if litres is not None:
        litres = check_non_negative(litres, "milk_litres")

    factor = fpcm_factor(fat, protein)
    milk_kg = litres_to_kg(litres, milk_density) if litres is not None else None
    fpcm_kg = milk_kg * factor if milk_kg is not None else None

    intensity_fpcm = _ratio(total, fpcm_kg)
    intensity_litre = _ratio(total, litres)
    if intensity_fpcm is None:
        logger.debug("No milk production; milk intensity undefined")

    return {
        "intensity_co2eq_per_kg_fpcm": intensity_fpcm,
        "intensity_co2eq_per_litre": intensity_litre,
        "total_emissions_co2eq": total,
        "milk_production_litres": litres,
        "milk_production_kg": milk_kg,
        "fpcm_production_kg": fpcm_kg,
        "fpcm_factor": factor,
        "fat_percent": fat,
        "protein_percent": protein,
        "milk_density_kg_per_l": milk_density,
        "units": "kg CO2eq/kg FPCM",
    }


def calc_intensity_area(
    total_emissions: float | AggregatedTotal | Mapping[str, Any],
    area_total_ha: float | None,
    area_productive_ha: float | None = None,
    area_breakdown: Mapping[str, float] | None = None,
    validate_area_sum: bool = False,
) -> dict:
    """
    Emission intensity per hectare of total and productive land.

    Args:
        total_emissions: Farm total (kg CO2eq/year)
        area_total_ha: Whole farm area (ha)
        area_productive_ha: Area producing feed or milk (ha); defaults to
            the breakdown's productive categories, then to the total area
        area_breakdown: Hectares by land-use category (AREA_CATEGORIES)
        validate_area_sum: Require the breakdown to add up to area_total_ha
            (within 1%)

    Returns:
        Dict with intensity_per_total_ha, intensity_per_productive_ha,
        land_use_efficiency and, with a breakdown, emissions allocated to
        each land use by its share of the area
    """
    total = total_value(total_emissions)
    area_total = scalar_num(area_total_ha)
    if area_total is not None:
        area_total = check_non_negative(area_total, "area_total_ha")

    breakdown = None
    if area_breakdown:
        breakdown = {}
        for name, hectares in area_breakdown.items():
            if name not in AREA_CATEGORIES:
                raise InputValidationError(f"Unknown land-use category {name!r}", "area_breakdown")
            breakdown[name] = check_non_negative(hectares, f"area_breakdown.{name}")

        breakdown_sum = math.fsum(breakdown.values())
        if validate_area_sum and area_total:
            if abs(breakdown_sum - area_total) > 0.01 * area_total:
                raise InputValidationError(
                    f"Area breakdown sums to {breakdown_sum:.1f} ha, expected {area_total:.1f} ha",
                    "area_breakdown",
                )

    area_productive = scalar_num(area_productive_ha)
    if area_productive is not None:
        area_productive = check_non_negative(area_productive, "area_productive_ha")
    elif breakdown:
        area_productive = math.fsum(v for k, v in breakdown.items() if k not in NON_PRODUCTIVE_AREAS)
    else:
        area_productive = area_total

    if area_productive is not None and area_total and area_productive > area_total:
        raise InputValidationError("area_productive_ha cannot exceed area_total_ha", "area_productive_ha")

    result = {
        "intensity_per_total_ha": _ratio(total, area_total),
        "intensity_per_productive_ha": _ratio(total, area_productive),
        "total_emissions_co2eq": total,
        "area_total_ha": area_total,
        "area_productive_ha": area_productive,
        "land_use_efficiency": _ratio(area_productive, area_total) if area_productive is not None else None,
        "area_breakdown": breakdown,
        "emissions_by_land_use": None,
        "units": "kg CO2eq/ha",
    }

    if breakdown:
        breakdown_sum = math.fsum(breakdown.values())
        if breakdown_sum > 0:
            result["emissions_by_land_use"] = {
                name: {
                    "area_ha": hectares,
                    "area_share_pct": round(100 * hectares / breakdown_sum, 1),
                    "emissions_co2eq_kg": total * hectares / breakdown_sum,
                }
                for name, hectares in breakdown.items()
            }

    return result
