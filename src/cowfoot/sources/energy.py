"""
On-farm energy emissions: fuels burned on farm and purchased electricity.

Electricity uses a national grid factor. Optional upstream factors add
the emissions of producing and delivering each energy carrier.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from cowfoot.accounting.boundaries import SystemBoundary
from cowfoot.core.coerce import scalar_num
from cowfoot.core.units import EMISSION_UNITS
from cowfoot.core.validation import check_non_negative
from cowfoot.sources.base import excluded_result, is_excluded_by

logger = logging.getLogger(__name__)

# Combustion factors
EF_DIESEL = 2.67  # kg CO2/L
EF_PETROL = 2.31  # kg CO2/L
EF_LPG = 3.0  # kg CO2/kg
EF_NATURAL_GAS = 2.0  # kg CO2/m3
EF_COAL = 2.42  # kg CO2/kg, bituminous
EF_BIOMASS = 0.0  # biogenic CO2 is not counted

# Grid electricity (kg CO2/kWh)
GRID_FACTORS = {
    "UY": 0.08,
    "AR": 0.35,
    "BR": 0.12,
    "NZ": 0.15,
    "US": 0.45,
    "AU": 0.75,
    "DE": 0.40,
    "DK": 0.25,
    "NL": 0.35,
    "IE": 0.30,
}
DEFAULT_GRID_FACTOR = 0.35

# Upstream emissions as a fraction of direct emissions
UPSTREAM_FACTORS = {
    "diesel": 0.15,
    "petrol": 0.12,
    "lpg": 0.08,
    "natural_gas": 0.10,
    "coal": 0.10,
    "electricity": 0.05,
}

# Consumption column -> fuel name
CARRIERS = {
    "diesel_l": "diesel",
    "petrol_l": "petrol",
    "lpg_kg": "lpg",
    "natural_gas_m3": "natural_gas",
    "coal_kg": "coal",
    "biomass_kg": "biomass",
    "electricity_kwh": "electricity",
}


def grid_factor(country: str | None) -> float:
    """Grid emission factor for a country code (0.35 when unknown)."""
    if country is None or country == "global":
        return DEFAULT_GRID_FACTOR
    factor = GRID_FACTORS.get(country.upper())
    if factor is None:
        logger.warning("Unknown country code %r; using default %.2f kg CO2/kWh", country, DEFAULT_GRID_FACTOR)
        return DEFAULT_GRID_FACTOR
    return factor


def _use_rows(energy_breakdown: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> dict[str, Mapping[str, Any]]:
    """Name each use. Row sequences use a "use" key or their position."""
    if isinstance(energy_breakdown, Mapping):
        return dict(energy_breakdown)
    rows = {}
    for i, row in enumerate(energy_breakdown, start=1):
        rows[str(row.get("use") or i)] = row
    return rows


def calc_emissions_energy(
    diesel_l: float = 0,
    petrol_l: float = 0,
    lpg_kg: float = 0,
    natural_gas_m3: float = 0,
    electricity_kwh: float = 0,
    coal_kg: float = 0,
    biomass_kg: float = 0,
    country: str | None = "global",
    ef_diesel: float = EF_DIESEL,
    ef_petrol: float = EF_PETROL,
    ef_lpg: float = EF_LPG,
    ef_natural_gas: float = EF_NATURAL_GAS,
    ef_coal: float = EF_COAL,
    ef_electricity: float | None = None,
    include_upstream: bool = False,
    energy_breakdown: Mapping[str, Any] | Sequence[Mapping[str, Any]] | None = None,
    boundaries: SystemBoundary | None = None,
) -> dict:
    """
    Estimate CO2 from on-farm energy use.

    Args:
        diesel_l, petrol_l: Fuel use (L/year)
        lpg_kg, coal_kg, biomass_kg: Fuel use (kg/year)
        natural_gas_m3: Gas use (m3/year)
        electricity_kwh: Purchased electricity (kWh/year)
        country: ISO code for the grid factor ("global" = world default)
        ef_*: Factor overrides
        include_upstream: Add fuel production and delivery emissions
        energy_breakdown: Consumption by use, either {use: {carrier: qty}} or
                          a list of rows with an optional "use" key. When
                          given, totals are summed from it.
        boundaries: System boundary; "energy" must be included

    Returns:
        Dict with co2eq_kg, per-fuel emissions and energy metrics
    """
    rows = _use_rows(energy_breakdown) if energy_breakdown is not None else None
    if rows is not None:
        totals = {carrier: 0.0 for carrier in CARRIERS}
        for use, row in rows.items():
            for carrier in CARRIERS:
                qty = scalar_num(row.get(carrier)) or 0.0
                totals[carrier] += check_non_negative(qty, f"{use}.{carrier}")
        diesel_l = totals["diesel_l"]
        petrol_l = totals["petrol_l"]
        lpg_kg = totals["lpg_kg"]
        natural_gas_m3 = totals["natural_gas_m3"]
        coal_kg = totals["coal_kg"]
        biomass_kg = totals["biomass_kg"]
        electricity_kwh = totals["electricity_kwh"]

    diesel_l = check_non_negative(diesel_l, "diesel_l")
    petrol_l = check_non_negative(petrol_l, "petrol_l")
    lpg_kg = check_non_negative(lpg_kg, "lpg_kg")
    natural_gas_m3 = check_non_negative(natural_gas_m3, "natural_gas_m3")
    coal_kg = check_non_negative(coal_kg, "coal_kg")
    biomass_kg = check_non_negative(biomass_kg, "biomass_kg")
    electricity_kwh = check_non_negative(electricity_kwh, "electricity_kwh")
    ef_diesel = check_non_negative(ef_diesel, "ef_diesel")
    ef_petrol = check_non_negative(ef_petrol, "ef_petrol")
    ef_lpg = check_non_negative(ef_lpg, "ef_lpg")
    ef_natural_gas = check_non_negative(ef_natural_gas, "ef_natural_gas")
    ef_coal = check_non_negative(ef_coal, "ef_coal")
    if ef_electricity is not None:
        ef_electricity = check_non_negative(ef_electricity, "ef_electricity")

    if is_excluded_by(boundaries, "energy"):
        return excluded_result("energy")

    if ef_electricity is None:
        ef_electricity = grid_factor(country)

    fuel = {
        "diesel": diesel_l * ef_diesel,
        "petrol": petrol_l * ef_petrol,
        "lpg": lpg_kg * ef_lpg,
        "natural_gas": natural_gas_m3 * ef_natural_gas,
        "coal": coal_kg * ef_coal,
        "biomass": biomass_kg * EF_BIOMASS,
        "electricity": electricity_kwh * ef_electricity,
    }
    total_direct = sum(fuel.values())

    upstream = 0.0
    if include_upstream:
        upstream = sum(fuel[name] * factor for name, factor in UPSTREAM_FACTORS.items())

    total = total_direct + upstream

    result = {
        "source": "energy",
        "fuel_emissions": {f"{name}_co2_kg": round(value, 2) for name, value in fuel.items()},
        "direct_co2eq_kg": round(total_direct, 2),
        "upstream_co2eq_kg": round(upstream, 2),
        "co2eq_kg": round(total, 2),
        "units": EMISSION_UNITS,
        "emission_factors": {
            "diesel_kg_co2_per_l": ef_diesel,
            "petrol_kg_co2_per_l": ef_petrol,
            "lpg_kg_co2_per_kg": ef_lpg,
            "natural_gas_kg_co2_per_m3": ef_natural_gas,
            "coal_kg_co2_per_kg": ef_coal,
            "electricity_kg_co2_per_kwh": ef_electricity,
            "electricity_country": country,
        },
        "inputs": {
            "diesel_l": diesel_l,
            "petrol_l": petrol_l,
            "lpg_kg": lpg_kg,
            "natural_gas_m3": natural_gas_m3,
            "coal_kg": coal_kg,
            "biomass_kg": biomass_kg,
            "electricity_kwh": electricity_kwh,
            "include_upstream": include_upstream,
        },
        "methodology": "IPCC 2019 emission factors" + (" + upstream" if include_upstream else ""),
        "standards": "IPCC 2019 Refinement, IDF 2022",
    }

    if rows is not None:
        factors = {
            "diesel_l": ef_diesel,
            "petrol_l": ef_petrol,
            "lpg_kg": ef_lpg,
            "natural_gas_m3": ef_natural_gas,
            "coal_kg": ef_coal,
            "biomass_kg": EF_BIOMASS,
            "electricity_kwh": ef_electricity,
        }
        by_use = {}
        for use, row in rows.items():
            use_co2 = {carrier: (scalar_num(row.get(carrier)) or 0.0) * factor for carrier, factor in factors.items()}
            by_use[use] = {f"{CARRIERS[carrier]}_co2": round(value, 2) for carrier, value in use_co2.items()}
            by_use[use]["total_co2"] = round(sum(use_co2.values()), 2)
        result["breakdown_by_use"] = by_use

    if total_direct > 0:
        electricity = fuel["electricity"]
        result["energy_metrics"] = {
            "electricity_share_pct": round(100 * electricity / total_direct, 1),
            "fossil_fuel_share_pct": round(100 * (total_direct - electricity) / total_direct, 1),
            "co2_intensity_kg_per_mwh": round(electricity / (electricity_kwh / 1000), 2)
            if electricity_kwh > 0
            else None,
        }

    return result
