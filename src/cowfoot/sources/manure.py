"""
Manure management emissions: CH4 from storage and N2O from excreted N.

Tier 1 uses default CH4 factors per manure system. Tier 2 estimates CH4
from volatile solids (VS), maximum methane capacity (B0) and the
methane conversion factor (MCF) for the system and climate, with
simple adjustments for storage temperature and retention time.

N2O is direct (N excreted x EF x 44/28) plus, optionally, indirect
losses through volatilisation and leaching. When protein intake is
known, N excretion is derived from it instead of the default.

References:
-----------
[1] IPCC (2019). "2019 Refinement to the 2006 IPCC Guidelines for
    National Greenhouse Gas Inventories." Vol 4, Ch 10 (Tables 10.14,
    10.17) and Ch 11 (Table 11.3).
"""

from dataclasses import dataclass

from cowfoot.accounting.boundaries import SystemBoundary
from cowfoot.core.units import EMISSION_UNITS, N2O_PER_N
from cowfoot.core.validation import (
    InputValidationError,
    check_choice,
    check_non_negative,
    check_positive,
)
from cowfoot.sources.base import GWP_CH4, GWP_N2O, excluded_result, is_excluded_by

MANURE_SYSTEMS = ("pasture", "solid_storage", "liquid_storage", "anaerobic_digester")
CLIMATES = ("cold", "temperate", "warm")

# Tier 1 CH4 emission factors (kg CH4/cow/year)
TIER1_CH4_FACTORS = {
    "pasture": 1.5,
    "solid_storage": 20.0,
    "liquid_storage": 30.0,
    "anaerobic_digester": 10.0,
}

# Methane conversion factors (% of B0) by system and climate
MCF_PERCENT = {
    "pasture": {"cold": 1.0, "temperate": 1.5, "warm": 2.0},
    "solid_storage": {"cold": 2.0, "temperate": 3.5, "warm": 5.5},
    "liquid_storage": {"cold": 17.0, "temperate": 39.0, "warm": 65.0},
    "anaerobic_digester": {"cold": 20.0, "temperate": 75.0, "warm": 85.0},
}

# kg CH4 per m3 CH4
CH4_DENSITY = 0.67

# Indirect N2O (fraction of N lost, EF per kg N lost)
FRAC_VOL = 0.20
EF_VOL = 0.01
FRAC_LEACH = 0.30
EF_LEACH = 0.0075
# Tier 2 uses slightly lower loss fractions
FRAC_VOL_TIER2 = 0.18
FRAC_LEACH_TIER2 = 0.25


@dataclass
class ManureCH4Tier2:
    """Intermediate values of the Tier 2 CH4 calculation."""

    ch4_kg_total: float
    ch4_kg_per_cow: float
    vs_kg_per_day: float
    b0_used: float
    mcf_percent: float


def calc_ch4_tier2(
    n_cows: float,
    avg_body_weight: float,
    diet_digestibility: float,
    manure_system: str,
    climate: str,
    retention_days: float | None = None,
    system_temperature: float | None = None,
) -> ManureCH4Tier2:
    """Tier 2 manure CH4 from VS x B0 x MCF."""
    # Adults and young stock excrete VS at different rates
    rate = 0.04 if avg_body_weight > 200 else 0.05
    vs_kg_per_day = rate * avg_body_weight * (2 - diet_digestibility)

    if diet_digestibility > 0.70:
        b0 = 0.20
    elif diet_digestibility > 0.60:
        b0 = 0.18
    else:
        b0 = 0.15

    mcf = MCF_PERCENT[manure_system][climate] / 100

    if system_temperature is not None:
        if system_temperature < 15:
            mcf *= 0.8
        elif system_temperature > 25:
            mcf *= 1.2

    if retention_days is not None and manure_system != "pasture":
        if retention_days < 30:
            mcf *= 0.7
        elif retention_days > 120:
            mcf *= 1.1

    per_cow = vs_kg_per_day * b0 * mcf * 365 * CH4_DENSITY
    return ManureCH4Tier2(
        ch4_kg_total=n_cows * per_cow,
        ch4_kg_per_cow=per_cow,
        vs_kg_per_day=vs_kg_per_day,
        b0_used=b0,
        mcf_percent=mcf * 100,
    )


def calc_n2o(
    n_cows: float,
    n_excreted: float,
    ef_n2o_direct: float,
    include_indirect: bool,
    protein_intake_kg: float | None = None,
    tier2: bool = False,
) -> dict:
    """Direct and indirect N2O (kg N2O/year) from excreted nitrogen."""
    if protein_intake_kg is not None:
        # Crude protein is 16% N; 25% of intake N is retained in milk
        n_excreted = protein_intake_kg / 6.25 * (1 - 0.25) * 365

    n2o_direct = n_cows * n_excreted * ef_n2o_direct * N2O_PER_N

    n2o_indirect = 0.0
    if include_indirect:
        frac_vol = FRAC_VOL_TIER2 if tier2 else FRAC_VOL
        frac_leach = FRAC_LEACH_TIER2 if tier2 else FRAC_LEACH
        n2o_indirect = n_cows * n_excreted * (frac_vol * EF_VOL + frac_leach * EF_LEACH) * N2O_PER_N

    return {"n2o_direct": n2o_direct, "n2o_indirect": n2o_indirect, "n_excreted_used": n_excreted}


def calc_emissions_manure(
    n_cows: float,
    manure_system: str = "pasture",
    tier: int = 1,
    ef_ch4: float | None = None,
    n_excreted: float = 100,
    ef_n2o_direct: float = 0.02,
    include_indirect: bool = False,
    climate: str = "temperate",
    avg_body_weight: float = 600,
    diet_digestibility: float = 0.65,
    protein_intake_kg: float | None = None,
    retention_days: float | None = None,
    system_temperature: float | None = None,
    gwp_ch4: float = GWP_CH4,
    gwp_n2o: float = GWP_N2O,
    boundaries: SystemBoundary | None = None,
) -> dict:
    """
    Estimate manure CH4 and N2O for a herd.

    Args:
        n_cows: Number of animals (> 0)
        manure_system: "pasture", "solid_storage", "liquid_storage" or
                       "anaerobic_digester"
        tier: 1 (default factors) or 2 (VS x B0 x MCF)
        ef_ch4: Tier 1 CH4 factor override (kg CH4/cow/year)
        n_excreted: N excreted per animal (kg N/year)
        ef_n2o_direct: Direct N2O-N emission factor
        include_indirect: Add volatilisation and leaching N2O
        climate: "cold", "temperate" or "warm"
        avg_body_weight: Live weight (kg), Tier 2
        diet_digestibility: Digestible fraction in (0, 1], Tier 2
        protein_intake_kg: Crude protein intake (kg/animal/day)
        retention_days: Storage retention time, Tier 2
        system_temperature: Storage temperature (°C), Tier 2
        boundaries: System boundary; "manure" must be included

    Returns:
        Dict with ch4_kg, N2O components, co2eq_kg and per-cow values
    """
    n_cows = check_positive(n_cows, "n_cows")
    check_choice(manure_system, MANURE_SYSTEMS, "manure_system")
    if tier not in (1, 2):
        raise InputValidationError("Invalid tier. Use 1 or 2.", "tier")
    check_choice(climate, CLIMATES, "climate")
    n_excreted = check_non_negative(n_excreted, "n_excreted")
    ef_n2o_direct = check_non_negative(ef_n2o_direct, "ef_n2o_direct")
    if not 0 < diet_digestibility <= 1:
        raise InputValidationError("diet_digestibility must be in (0, 1]", "diet_digestibility")

    if is_excluded_by(boundaries, "manure"):
        result = excluded_result("manure")
        result.update(system=manure_system, tier=tier)
        return result

    tier2_details = None
    if tier == 1:
        ef_ch4 = TIER1_CH4_FACTORS[manure_system] if ef_ch4 is None else check_non_negative(ef_ch4, "ef_ch4")
        ch4 = n_cows * ef_ch4
        n2o = calc_n2o(n_cows, n_excreted, ef_n2o_direct, include_indirect, protein_intake_kg)
        methodology = "IPCC Tier 1 (default emission factors)"
    else:
        details = calc_ch4_tier2(
            n_cows,
            avg_body_weight,
            diet_digestibility,
            manure_system,
            climate,
            retention_days,
            system_temperature,
        )
        ch4 = details.ch4_kg_total
        ef_ch4 = None
        n2o = calc_n2o(n_cows, n_excreted, ef_n2o_direct, include_indirect, protein_intake_kg, tier2=True)
        methodology = "IPCC Tier 2 (VS_B0_MCF calculation)"
        tier2_details = {
            "vs_kg_per_day": details.vs_kg_per_day,
            "b0_used": details.b0_used,
            "mcf_used": details.mcf_percent,
        }

    n2o_total = n2o["n2o_direct"] + n2o["n2o_indirect"]
    co2eq = ch4 * gwp_ch4 + n2o_total * gwp_n2o

    result = {
        "source": "manure",
        "system": manure_system,
        "tier": tier,
        "climate": climate,
        "ch4_kg": round(ch4, 2),
        "n2o_direct_kg": round(n2o["n2o_direct"], 2),
        "n2o_indirect_kg": round(n2o["n2o_indirect"], 2),
        "n2o_total_kg": round(n2o_total, 2),
        "co2eq_kg": round(co2eq, 2),
        "units": EMISSION_UNITS,
        "emission_factors": {
            "ef_ch4": ef_ch4,
            "ef_n2o_direct": ef_n2o_direct,
            "gwp_ch4": gwp_ch4,
            "gwp_n2o": gwp_n2o,
        },
        "inputs": {
            "n_cows": n_cows,
            "n_excreted": n2o["n_excreted_used"],
            "include_indirect": include_indirect,
            "avg_body_weight": avg_body_weight if tier == 2 else None,
            "diet_digestibility": diet_digestibility if tier == 2 else None,
        },
        "per_cow": {
            "ch4_kg": round(ch4 / n_cows, 4),
            "n2o_kg": round(n2o_total / n_cows, 6),
            "co2eq_kg": round(co2eq / n_cows, 4),
        },
        "methodology": methodology,
        "standards": "IPCC 2019 Refinement, IDF 2022",
    }
    if tier2_details is not None:
        result["tier2_details"] = tier2_details
    return result
