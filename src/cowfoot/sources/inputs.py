"""
Indirect emissions from purchased farm inputs.

Covers concentrate and other purchased feeds, nitrogen fertilizer and
agricultural plastics, using the regional factor tables in
cowfoot.sources.factors. An optional transport adjustment charges feed
haulage, and an optional Monte Carlo run gives an uncertainty range.
"""

import logging
import math

from cowfoot.accounting.boundaries import SystemBoundary
from cowfoot.core.config import settings
from cowfoot.core.units import EMISSION_UNITS
from cowfoot.core.validation import check_choice, check_non_negative
from cowfoot.sources.base import excluded_result, is_excluded_by
from cowfoot.sources.factors import (
    FEED_CLASSES,
    FERTILIZER_TYPES,
    PLASTIC_TYPES,
    REGIONS,
    FactorRange,
    get_regional_factors,
)
from cowfoot.sources.uncertainty import simulate_total, summarize_draws

logger = logging.getLogger(__name__)

# Truck haulage, kg CO2eq per kg of feed per km
TRUCK_EF = 1e-4


def normalize_plastic_type(plastic_type: str) -> str:
    """Accept plastic types in any case ("ldpe" -> "LDPE", "MIXED" -> "mixed")."""
    if plastic_type.lower() == "mixed":
        return "mixed"
    upper = plastic_type.upper()
    check_choice(upper, PLASTIC_TYPES, "plastic_type")
    return upper


def calc_emissions_inputs(
    conc_kg: float = 0,
    fert_n_kg: float = 0,
    plastic_kg: float = 0,
    feed_grain_dry_kg: float = 0,
    feed_grain_wet_kg: float = 0,
    feed_ration_kg: float = 0,
    feed_byproducts_kg: float = 0,
    feed_proteins_kg: float = 0,
    feed_corn_kg: float = 0,
    feed_soy_kg: float = 0,
    feed_wheat_kg: float = 0,
    region: str | None = None,
    fert_type: str = "mixed",
    plastic_type: str = "mixed",
    include_uncertainty: bool = False,
    transport_km: float | None = None,
    ef_conc: float | None = None,
    ef_fert: float | None = None,
    ef_plastic: float | None = None,
    boundaries: SystemBoundary | None = None,
    seed: int | None = None,
) -> dict:
    """
    Estimate emissions embodied in purchased inputs.

    Args:
        conc_kg: Purchased concentrate (kg/year)
        fert_n_kg: Purchased fertilizer (kg N/year)
        plastic_kg: Agricultural plastics (kg/year)
        feed_*_kg: Other purchased feeds by class (kg DM/year)
        region: Factor table ("global", "EU", "US", "Brazil", "Argentina",
                "Australia"); defaults to settings.inputs_region
        fert_type: "mixed", "urea", "ammonium_nitrate" or "organic"
        plastic_type: "mixed", "LDPE", "HDPE" or "PP" (any case)
        include_uncertainty: Add a Monte Carlo summary under "uncertainty"
        transport_km: Average feed haulage distance (km)
        ef_conc, ef_fert, ef_plastic: Factor overrides (fixed in the Monte Carlo)
        boundaries: System boundary; "inputs" must be included
        seed: Random seed for the Monte Carlo draws

    Returns:
        Dict with co2eq_kg (and the duplicate total_co2eq_kg), an
        emissions_breakdown, the factors used and contribution shares
    """
    region = region or settings.inputs_region
    check_choice(region, REGIONS, "region")
    check_choice(fert_type, FERTILIZER_TYPES, "fert_type")
    plastic_type = normalize_plastic_type(plastic_type)

    feed_kg = {
        "grain_dry": feed_grain_dry_kg,
        "grain_wet": feed_grain_wet_kg,
        "ration": feed_ration_kg,
        "byproducts": feed_byproducts_kg,
        "proteins": feed_proteins_kg,
        "corn": feed_corn_kg,
        "soy": feed_soy_kg,
        "wheat": feed_wheat_kg,
    }
    conc_kg = check_non_negative(conc_kg, "conc_kg")
    fert_n_kg = check_non_negative(fert_n_kg, "fert_n_kg")
    plastic_kg = check_non_negative(plastic_kg, "plastic_kg")
    feed_kg = {name: check_non_negative(qty, f"feed_{name}_kg") for name, qty in feed_kg.items()}
    transport_km = 0.0 if transport_km is None else check_non_negative(transport_km, "transport_km")
    ef_conc = None if ef_conc is None else check_non_negative(ef_conc, "ef_conc")
    ef_fert = None if ef_fert is None else check_non_negative(ef_fert, "ef_fert")
    ef_plastic = None if ef_plastic is None else check_non_negative(ef_plastic, "ef_plastic")

    if is_excluded_by(boundaries, "inputs"):
        result = excluded_result("inputs")
        result["total_co2eq_kg"] = 0.0
        return result

    tables = get_regional_factors(region)
    conc_factor: FactorRange | float = tables["feeds"]["concentrate"] if ef_conc is None else ef_conc
    fert_factor: FactorRange | float = tables["fertilizer"][fert_type] if ef_fert is None else ef_fert
    plastic_factor: FactorRange | float = tables["plastic"][plastic_type] if ef_plastic is None else ef_plastic
    feed_factors = {name: tables["feeds"][name] for name in FEED_CLASSES}

    conc_co2 = conc_kg * _mean(conc_factor)
    fert_co2 = fert_n_kg * _mean(fert_factor)
    plastic_co2 = plastic_kg * _mean(plastic_factor)
    feed_co2 = {name: feed_kg[name] * feed_factors[name].mean for name in FEED_CLASSES}
    total_feed_co2 = math.fsum(feed_co2.values())

    transport_co2 = 0.0
    if transport_km > 0:
        total_feed_kg = conc_kg + math.fsum(feed_kg.values())
        transport_co2 = total_feed_kg * transport_km * TRUCK_EF

    total_co2 = conc_co2 + fert_co2 + plastic_co2 + total_feed_co2 + transport_co2

    result = {
        "source": "inputs",
        "co2eq_kg": round(total_co2, 2),
        "total_co2eq_kg": round(total_co2, 2),
        "units": EMISSION_UNITS,
        "region": region,
        "emissions_breakdown": {
            "concentrate_co2eq_kg": round(conc_co2, 2),
            "fertilizer_co2eq_kg": round(fert_co2, 2),
            "plastic_co2eq_kg": round(plastic_co2, 2),
            "feeds_co2eq_kg": {name: round(value, 2) for name, value in feed_co2.items()},
            "total_feeds_co2eq_kg": round(total_feed_co2, 2),
            "transport_adjustment_co2eq_kg": round(transport_co2, 2),
        },
        "emission_factors_used": {
            "concentrate": {"value": _mean(conc_factor), "unit": "kg CO2e/kg"},
            "fertilizer": {"value": _mean(fert_factor), "type": fert_type, "unit": "kg CO2e/kg N"},
            "plastic": {"value": _mean(plastic_factor), "type": plastic_type, "unit": "kg CO2e/kg"},
            "feeds": {name: {"value": f.mean, "unit": "kg CO2e/kg"} for name, f in feed_factors.items()},
            "region_source": region,
            "transport_km": transport_km,
        },
        "inputs_summary": {
            "concentrate_kg": conc_kg,
            "fertilizer_n_kg": fert_n_kg,
            "plastic_kg": plastic_kg,
            "total_feeds_kg": math.fsum(feed_kg.values()),
            "feed_breakdown_kg": feed_kg,
        },
        "contribution_analysis": None,
        "uncertainty": None,
        "methodology": "Regional emission factors with optional uncertainty analysis",
        "standards": "IDF 2022; generic LCI sources",
    }

    if total_co2 > 0:
        result["contribution_analysis"] = {
            "concentrate_pct": round(conc_co2 / total_co2 * 100, 1),
            "fertilizer_pct": round(fert_co2 / total_co2 * 100, 1),
            "plastic_pct": round(plastic_co2 / total_co2 * 100, 1),
            "feeds_pct": round(total_feed_co2 / total_co2 * 100, 1),
            "transport_pct": round(transport_co2 / total_co2 * 100, 1),
        }

    if include_uncertainty:
        quantities = {"conc": conc_kg, "fert": fert_n_kg, "plastic": plastic_kg, **feed_kg}
        factors = {"conc": conc_factor, "fert": fert_factor, "plastic": plastic_factor, **feed_factors}
        draws = simulate_total(quantities, factors, seed=seed)
        result["uncertainty"] = summarize_draws(draws)
        logger.debug("Inputs uncertainty from %d draws", draws.size)

    return result


def _mean(factor: FactorRange | float) -> float:
    return factor.mean if isinstance(factor, FactorRange) else factor
