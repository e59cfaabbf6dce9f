"""
Soil N2O from nitrogen applied to or deposited on land.

Direct N2O uses an emission factor by soil drainage and climate.
Indirect N2O comes from volatilised N (NH3 + NOx) redeposited on soils
and from N lost to leaching and runoff.

References:
-----------
[1] IPCC (2019). "2019 Refinement to the 2006 IPCC Guidelines for
    National Greenhouse Gas Inventories." Vol 4, Ch 11, Tables 11.1
    and 11.3.
"""

import logging

from cowfoot.accounting.boundaries import SystemBoundary
from cowfoot.core.coerce import scalar_num
from cowfoot.core.units import EMISSION_UNITS, N2O_PER_N
from cowfoot.core.validation import check_choice, check_non_negative
from cowfoot.sources.base import GWP_N2O, excluded_result, is_excluded_by

logger = logging.getLogger(__name__)

SOIL_TYPES = ("well_drained", "poorly_drained")
SOIL_CLIMATES = ("temperate", "tropical")

# Direct N2O-N emission factors (kg N2O-N per kg N)
DIRECT_FACTORS = {
    "temperate": {"well_drained": 0.010, "poorly_drained": 0.015},
    "tropical": {"well_drained": 0.012, "poorly_drained": 0.018},
}

# Volatilised fraction of N by input
FRAC_VOL_SYNTHETIC = 0.10
FRAC_VOL_ORGANIC = 0.20
FRAC_VOL_EXCRETA = 0.20
EF_VOL = 0.01

FRAC_LEACH = 0.30
EF_LEACH = 0.0075


def calc_emissions_soil(
    n_fertilizer_synthetic: float = 0,
    n_fertilizer_organic: float = 0,
    n_excreta_pasture: float = 0,
    n_crop_residues: float = 0,
    area_ha: float | None = None,
    soil_type: str = "well_drained",
    climate: str = "temperate",
    ef_direct: float | None = None,
    include_indirect: bool = True,
    gwp_n2o: float = GWP_N2O,
    boundaries: SystemBoundary | None = None,
) -> dict:
    """
    Estimate soil N2O emissions.

    Args:
        n_fertilizer_synthetic: Synthetic fertilizer N (kg N/year)
        n_fertilizer_organic: Organic fertilizer N (kg N/year)
        n_excreta_pasture: Dung and urine N deposited on pasture (kg N/year)
        n_crop_residues: Crop residue N (kg N/year)
        area_ha: Area for per-hectare metrics (optional)
        soil_type: "well_drained" or "poorly_drained"
        climate: "temperate" or "tropical"
        ef_direct: Direct EF override (kg N2O-N per kg N)
        include_indirect: Add volatilisation and leaching pathways
        boundaries: System boundary; "soil" must be included

    Returns:
        Dict with co2eq_kg, an emissions_breakdown in kg N2O, nitrogen
        inputs, and per-hectare metrics when area_ha is given
    """
    check_choice(soil_type, SOIL_TYPES, "soil_type")
    check_choice(climate, SOIL_CLIMATES, "climate")
    n_synthetic = check_non_negative(n_fertilizer_synthetic, "n_fertilizer_synthetic")
    n_organic = check_non_negative(n_fertilizer_organic, "n_fertilizer_organic")
    n_excreta = check_non_negative(n_excreta_pasture, "n_excreta_pasture")
    n_residues = check_non_negative(n_crop_residues, "n_crop_residues")
    if ef_direct is not None:
        ef_direct = check_non_negative(ef_direct, "ef_direct")

    if is_excluded_by(boundaries, "soil"):
        return excluded_result("soil")

    if ef_direct is None:
        ef_direct = DIRECT_FACTORS[climate][soil_type]
        factors_source = f"IPCC-style defaults ({climate}, {soil_type})"
    else:
        factors_source = "User-provided"
        if ef_direct > 0.05:
            logger.warning("ef_direct %.4f is unusual (typical range is ~0.005 to 0.02)", ef_direct)

    total_n = n_synthetic + n_organic + n_excreta + n_residues
    n2o_direct = total_n * ef_direct * N2O_PER_N

    n2o_vol = 0.0
    n2o_leach = 0.0
    if include_indirect:
        n_vol = n_synthetic * FRAC_VOL_SYNTHETIC + n_organic * FRAC_VOL_ORGANIC + n_excreta * FRAC_VOL_EXCRETA
        n2o_vol = n_vol * EF_VOL * N2O_PER_N
        n2o_leach = total_n * FRAC_LEACH * EF_LEACH * N2O_PER_N
    n2o_indirect = n2o_vol + n2o_leach

    n2o_total = n2o_direct + n2o_indirect
    co2eq = n2o_total * gwp_n2o

    result = {
        "source": "soil",
        "soil_conditions": {"soil_type": soil_type, "climate": climate},
        "nitrogen_inputs": {
            "synthetic_fertilizer_kg_n": n_synthetic,
            "organic_fertilizer_kg_n": n_organic,
            "excreta_pasture_kg_n": n_excreta,
            "crop_residues_kg_n": n_residues,
            "total_kg_n": total_n,
        },
        "emissions_breakdown": {
            "direct_n2o_kg": round(n2o_direct, 3),
            "indirect_volatilization_n2o_kg": round(n2o_vol, 3),
            "indirect_leaching_n2o_kg": round(n2o_leach, 3),
            "total_indirect_n2o_kg": round(n2o_indirect, 3),
            "total_n2o_kg": round(n2o_total, 3),
        },
        "co2eq_kg": round(co2eq, 2),
        "units": EMISSION_UNITS,
        "emission_factors": {
            "ef_direct": ef_direct,
            "ef_volatilization": EF_VOL if include_indirect else None,
            "ef_leaching": EF_LEACH if include_indirect else None,
            "gwp_n2o": gwp_n2o,
            "factors_source": factors_source,
        },
        "methodology": "Tier 1-style (direct + indirect)" if include_indirect else "Tier 1-style (direct only)",
        "standards": "IPCC 2019 Refinement, IDF 2022",
    }

    area = scalar_num(area_ha)
    if area is not None and area > 0:
        result["per_hectare_metrics"] = {
            "n_input_kg_per_ha": round(total_n / area, 1),
            "n2o_kg_per_ha": round(n2o_total / area, 3),
            "co2eq_kg_per_ha": round(co2eq / area, 2),
            "emission_intensity_kg_co2eq_per_kg_n": round(co2eq / total_n, 2) if total_n > 0 else None,
        }

    if total_n > 0:
        result["source_contributions"] = {
            "synthetic_fertilizer_pct": round(n_synthetic / total_n * 100, 1),
            "organic_fertilizer_pct": round(n_organic / total_n * 100, 1),
            "excreta_pasture_pct": round(n_excreta / total_n * 100, 1),
            "crop_residues_pct": round(n_residues / total_n * 100, 1),
            "direct_emissions_pct": round(n2o_direct / n2o_total * 100, 1) if n2o_total > 0 else 0.0,
            "indirect_emissions_pct": round(n2o_indirect / n2o_total * 100, 1) if n2o_total > 0 else 0.0,
        }

    return result
