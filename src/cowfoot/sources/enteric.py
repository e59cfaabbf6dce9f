"""
Enteric methane from cattle.

Tier 1 uses fixed emission factors by cattle category and production
system. Tier 2 derives the factor from gross energy intake:

    GE (GJ/yr) = DMI (kg/day) x 18.45 MJ/kg x 365 / 1000
    EF (kg CH4/head/yr) = GE x Ym / 55.65 MJ/kg CH4 x 1000

Without a dry-matter intake, dairy cows use an energy-requirement
estimate (maintenance, lactation and pregnancy) and other categories a
body-weight proxy. A Tier 2 factor that is not positive falls back to
Tier 1 with a logged warning.

References:
-----------
[1] IPCC (2019). "2019 Refinement to the 2006 IPCC Guidelines for
    National Greenhouse Gas Inventories." Vol 4, Ch 10, Eq 10.21.
[2] IDF (2022). Bulletin of the IDF No. 520/2022.
"""

import logging
from collections.abc import Iterable, Mapping

from cowfoot.accounting.boundaries import SystemBoundary
from cowfoot.core.coerce import numeric_leaves
from cowfoot.core.units import EMISSION_UNITS
from cowfoot.core.validation import InputValidationError, check_choice, check_non_negative
from cowfoot.sources.base import GWP_CH4, excluded_result, is_excluded_by

logger = logging.getLogger(__name__)

CATTLE_CATEGORIES = ("dairy_cows", "heifers", "calves", "bulls")
PRODUCTION_SYSTEMS = ("intensive", "extensive", "mixed")

# IPCC Tier 1 emission factors (kg CH4/head/year)
TIER1_FACTORS = {
    "dairy_cows": {"intensive": 120, "extensive": 100, "mixed": 115},
    "heifers": {"intensive": 85, "extensive": 75, "mixed": 80},
    "calves": {"intensive": 45, "extensive": 40, "mixed": 42},
    "bulls": {"intensive": 110, "extensive": 95, "mixed": 105},
}

DEFAULT_BODY_WEIGHTS = {
    "dairy_cows": 550,
    "heifers": 350,
    "calves": 150,
    "bulls": 700,
}

GE_MJ_PER_KG_DM = 18.45
CH4_MJ_PER_KG = 55.65


def tier2_emission_factor(
    cattle_category: str,
    body_weight: float,
    milk_yield: float,
    dry_matter_intake: float | None,
    ym_percent: float,
) -> float:
    """Tier 2 emission factor (kg CH4/head/year)."""
    if dry_matter_intake is not None:
        gross_energy_gj = dry_matter_intake * GE_MJ_PER_KG_DM * 365 / 1000
        return gross_energy_gj * ym_percent / 100 / CH4_MJ_PER_KG * 1000

    if cattle_category == "dairy_cows":
        maintenance = 0.335 * body_weight**0.75
        lactation = milk_yield * 5.15 / 365
        pregnancy = 10
        net_energy_gj = (maintenance + lactation + pregnancy) * 365 / 1000
        gross_energy_gj = net_energy_gj / 0.6
        return gross_energy_gj * 1000 * ym_percent / 100 / CH4_MJ_PER_KG

    # Body-weight proxy for young stock and bulls
    return body_weight * 0.022 * 365


def calc_emissions_enteric(
    n_animals: float,
    cattle_category: str = "dairy_cows",
    production_system: str = "mixed",
    avg_milk_yield: float = 6000,
    avg_body_weight: float | None = None,
    dry_matter_intake: float | None = None,
    feed_inputs: Mapping[str, float] | Iterable[float] | None = None,
    ym_percent: float = 6.5,
    emission_factor_ch4: float | None = None,
    tier: int = 1,
    gwp_ch4: float = GWP_CH4,
    boundaries: SystemBoundary | None = None,
) -> dict:
    """
    Estimate enteric methane for one cattle group.

    Args:
        n_animals: Number of head
        cattle_category: "dairy_cows", "heifers", "calves" or "bulls"
        production_system: "intensive", "extensive" or "mixed"
        avg_milk_yield: Milk yield (kg/cow/year), Tier 2 dairy cows only
        avg_body_weight: Live weight (kg); defaults by category
        dry_matter_intake: Intake (kg DM/head/day), Tier 2 only
        feed_inputs: Annual feed quantities (kg DM) used to estimate intake
                     when dry_matter_intake is not given
        ym_percent: Methane conversion factor (% of gross energy)
        emission_factor_ch4: Override (kg CH4/head/year)
        tier: 1 or 2
        gwp_ch4: Global warming potential of CH4
        boundaries: System boundary; "enteric" must be included

    Returns:
        Dict with ch4_kg, co2eq_kg, factors used and per-animal values
    """
    check_choice(cattle_category, CATTLE_CATEGORIES, "cattle_category")
    check_choice(production_system, PRODUCTION_SYSTEMS, "production_system")
    if tier not in (1, 2):
        raise InputValidationError("Invalid tier. Use 1 or 2.", "tier")
    n_animals = check_non_negative(n_animals, "n_animals")
    avg_milk_yield = check_non_negative(avg_milk_yield, "avg_milk_yield")

    if is_excluded_by(boundaries, "enteric"):
        result = excluded_result("enteric")
        result.update(category=cattle_category, ch4_kg=0.0)
        return result

    if avg_body_weight is None:
        avg_body_weight = DEFAULT_BODY_WEIGHTS[cattle_category]
    avg_body_weight = check_non_negative(avg_body_weight, "avg_body_weight")

    if dry_matter_intake is None and feed_inputs and n_animals > 0:
        values = feed_inputs.values() if isinstance(feed_inputs, Mapping) else feed_inputs
        dry_matter_intake = sum(numeric_leaves(list(values))) / (n_animals * 365)

    if emission_factor_ch4 is None:
        if tier == 1:
            emission_factor_ch4 = TIER1_FACTORS[cattle_category][production_system]
        else:
            emission_factor_ch4 = tier2_emission_factor(
                cattle_category, avg_body_weight, avg_milk_yield, dry_matter_intake, ym_percent
            )

    if emission_factor_ch4 <= 0:
        logger.warning(
            "Tier 2 factor for %s is %.2f; falling back to Tier 1 defaults",
            cattle_category,
            emission_factor_ch4,
        )
        tier = 1
        emission_factor_ch4 = TIER1_FACTORS[cattle_category]["mixed"]

    ch4_kg = n_animals * emission_factor_ch4
    co2eq_kg = ch4_kg * gwp_ch4

    milk_intensity = None
    if cattle_category == "dairy_cows" and avg_milk_yield > 0:
        milk_intensity = round(emission_factor_ch4 * gwp_ch4 / avg_milk_yield * 1000, 2)

    method = "energy-based" if tier == 2 else "default factors"
    return {
        "source": "enteric",
        "category": cattle_category,
        "production_system": production_system,
        "ch4_kg": round(ch4_kg, 2),
        "co2eq_kg": round(co2eq_kg, 2),
        "units": EMISSION_UNITS,
        "emission_factors": {
            "emission_factor_ch4": round(emission_factor_ch4, 1),
            "gwp_ch4": gwp_ch4,
            "method_used": f"Tier {tier}",
        },
        "inputs": {
            "n_animals": n_animals,
            "avg_body_weight": avg_body_weight,
            "avg_milk_yield": avg_milk_yield,
            "dry_matter_intake": dry_matter_intake,
            "ym_percent": ym_percent,
            "tier": tier,
        },
        "per_animal": {
            "ch4_kg": round(emission_factor_ch4, 1),
            "co2eq_kg": round(emission_factor_ch4 * gwp_ch4, 2),
            "milk_intensity": milk_intensity,
        },
        "methodology": f"IPCC Tier {tier} ({method})",
        "standards": "IPCC 2019 Refinement, IDF 2022",
    }
