"""
Farm record columns, defaults and input resolution.

One row of the batch table describes one farm-year. Column names match
the CSV template written by write_template(). Missing cells fall back
through a fixed default cascade; present cells must be numeric and
non-negative where a quantity is expected.
"""

import csv
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from cowfoot.core.coerce import first_non_null, is_absent, scalar_num, scalar_str
from cowfoot.core.config import settings
from cowfoot.core.validation import InputValidationError

# =============================================================================
# Column Map
# =============================================================================

REQUIRED_COLUMNS = ("FarmID", "Milk_litres", "Cows_milking")

# Land-use columns -> area breakdown categories
AREA_COLUMNS = {
    "Pasture_permanent_ha": "pasture_permanent",
    "Pasture_temporary_ha": "pasture_temporary",
    "Crops_feed_ha": "crops_feed",
    "Crops_cash_ha": "crops_cash",
    "Infrastructure_ha": "infrastructure",
    "Woodland_ha": "woodland",
}

# Purchased feed columns -> calc_emissions_inputs keyword
FEED_COLUMNS = {
    "Feed_grain_dry_kg": "feed_grain_dry_kg",
    "Feed_grain_wet_kg": "feed_grain_wet_kg",
    "Feed_ration_kg": "feed_ration_kg",
    "Feed_byproducts_kg": "feed_byproducts_kg",
    "Feed_proteins_kg": "feed_proteins_kg",
    "Feed_corn_kg": "feed_corn_kg",
    "Feed_soy_kg": "feed_soy_kg",
    "Feed_wheat_kg": "feed_wheat_kg",
}

TEMPLATE_COLUMNS = (
    # Identification and milk
    "FarmID",
    "Year",
    "Milk_litres",
    "Fat_percent",
    "Protein_percent",
    "Milk_density",
    # Herd
    "Cows_milking",
    "Cows_dry",
    "Heifers_total",
    "Calves_total",
    "Bulls_total",
    "Body_weight_cows_kg",
    "Body_weight_cows_dry_kg",
    "Body_weight_heifers_kg",
    "Body_weight_calves_kg",
    "Body_weight_bulls_kg",
    "Milk_yield_kg_cow_year",
    # Feed
    "MS_intake_cows_milking_kg_day",
    "MS_intake_cows_dry_kg_day",
    "MS_intake_heifers_kg_day",
    "MS_intake_calves_kg_day",
    "MS_intake_bulls_kg_day",
    "Ym_percent",
    # Soil nitrogen
    "N_fertilizer_kg",
    "N_fertilizer_organic_kg",
    "N_excreta_pasture_kg",
    "N_crop_residues_kg",
    # Land
    "Area_total_ha",
    "Area_productive_ha",
    "Area_fertilized_ha",
    "Soil_type",
    "Climate_zone",
    *AREA_COLUMNS,
    # Energy
    "Diesel_litres",
    "Petrol_litres",
    "Electricity_kWh",
    "LPG_kg",
    "Natural_gas_m3",
    "Coal_kg",
    "Biomass_kg",
    "Country",
    # Purchased inputs
    "Concentrate_feed_kg",
    "Plastic_kg",
    *FEED_COLUMNS,
    "Region",
    # Manure
    "Manure_system",
    "N_excreted_per_cow_kg",
)

EXAMPLE_ROWS = (
    {
        "FarmID": "FARM001",
        "Year": "2024",
        "Milk_litres": "750000",
        "Fat_percent": "3.8",
        "Protein_percent": "3.2",
        "Cows_milking": "100",
        "Cows_dry": "20",
        "Heifers_total": "30",
        "Calves_total": "25",
        "Bulls_total": "2",
        "MS_intake_cows_milking_kg_day": "18",
        "N_fertilizer_kg": "1500",
        "Area_total_ha": "150",
        "Area_productive_ha": "140",
        "Pasture_permanent_ha": "120",
        "Crops_feed_ha": "20",
        "Infrastructure_ha": "10",
        "Diesel_litres": "8000",
        "Electricity_kWh": "35000",
        "Country": "UY",
        "Concentrate_feed_kg": "150000",
        "Manure_system": "pasture",
    },
    {
        "FarmID": "FARM002",
        "Year": "2024",
        "Milk_litres": "1200000",
        "Cows_milking": "150",
        "Cows_dry": "25",
        "Heifers_total": "40",
        "N_fertilizer_kg": "3000",
        "Area_total_ha": "220",
        "Soil_type": "poorly_drained",
        "Diesel_litres": "12000",
        "Electricity_kWh": "60000",
        "Country": "NZ",
        "Concentrate_feed_kg": "300000",
        "Manure_system": "liquid_storage",
    },
)


@dataclass(frozen=True)
class FarmInputs:
    """Resolved, defaulted and validated inputs for one farm-year."""

    farm_id: str
    year: str
    tier: int

    # Milk
    milk_litres: float
    fat_percent: float = 4.0
    protein_percent: float = 3.3
    milk_density: float = 1.03

    # Herd
    cows_milking: float = 0.0
    cows_dry: float = 0.0
    heifers: float = 0.0
    calves: float = 0.0
    bulls: float = 0.0
    bw_cows: float = 550.0
    bw_cows_dry: float = 550.0
    bw_heifers: float = 350.0
    bw_calves: float = 150.0
    bw_bulls: float = 700.0
    milk_yield_kg_cow_year: float | None = None

    # Feed (intake is only used at Tier 2)
    dmi_cows_milking: float | None = None
    dmi_cows_dry: float | None = None
    dmi_heifers: float | None = None
    dmi_calves: float | None = None
    dmi_bulls: float | None = None
    ym_percent: float = 6.5

    # Soil nitrogen (kg N/year)
    n_fertilizer_synthetic: float = 0.0
    n_fertilizer_organic: float = 0.0
    n_excreta_pasture: float = 0.0
    n_crop_residues: float = 0.0

    # Land
    area_total_ha: float = 100.0
    area_productive_ha: float | None = None
    area_fertilized_ha: float = 100.0
    soil_type: str = "well_drained"
    climate: str = "temperate"
    area_breakdown: dict[str, float] | None = None

    # Energy
    diesel_l: float = 0.0
    petrol_l: float = 0.0
    electricity_kwh: float = 0.0
    lpg_kg: float = 0.0
    natural_gas_m3: float = 0.0
    coal_kg: float = 0.0
    biomass_kg: float = 0.0
    country: str = "global"

    # Purchased inputs
    concentrate_kg: float = 0.0
    plastic_kg: float = 0.0
    feeds_kg: dict[str, float] = field(default_factory=dict)
    region: str = "global"

    # Manure
    manure_system: str = "pasture"
    n_excreted_per_cow: float = 100.0

    @property
    def dairy_cows(self) -> float:
        return self.cows_milking + self.cows_dry

    @property
    def total_animals(self) -> float:
        return self.cows_milking + self.cows_dry + self.heifers + self.calves + self.bulls

    @property
    def energy_use(self) -> float:
        return (
            self.diesel_l
            + self.petrol_l
            + self.electricity_kwh
            + self.lpg_kg
            + self.natural_gas_m3
            + self.coal_kg
            + self.biomass_kg
        )

    @property
    def soil_n(self) -> float:
        return self.n_fertilizer_synthetic + self.n_fertilizer_organic + self.n_excreta_pasture + self.n_crop_residues

    @property
    def purchased_inputs(self) -> float:
        return self.concentrate_kg + self.plastic_kg + self.n_fertilizer_synthetic + sum(self.feeds_kg.values())


# =============================================================================
# Resolution
# =============================================================================


def missing_required(record: Mapping[str, Any]) -> list[str]:
    """Required columns that are absent or empty in a record."""
    return [name for name in REQUIRED_COLUMNS if is_absent(record.get(name))]


def _num(record: Mapping[str, Any], *names: str, default: float | None = None) -> float | None:
    """First present column among names as a non-negative float, else default."""
    for name in names:
        value = record.get(name)
        if is_absent(value):
            continue
        number = scalar_num(value)
        if number is None:
            raise InputValidationError(f"{name} must be numeric, got {value!r}", name)
        if number < 0:
            raise InputValidationError(f"{name} must be >= 0, got {number}", name)
        return number
    return default


def _text(record: Mapping[str, Any], name: str, default: str) -> str:
    value = scalar_str(record.get(name))
    return value if value is not None else default


def resolve_farm_inputs(record: Mapping[str, Any], tier: int, row: int) -> FarmInputs:
    """
    Apply the default cascade to one farm record.

    Args:
        record: Row mapping (e.g. from csv.DictReader)
        tier: IPCC tier of the batch (1 or 2)
        row: 1-based row number, used for a missing FarmID

    Raises:
        InputValidationError: If a present quantity is non-numeric or negative
    """
    farm_id = scalar_str(record.get("FarmID")) or f"Farm_{row}"
    year = scalar_str(record.get("Year")) or str(date.today().year)

    bw_cows = _num(record, "Body_weight_cows_kg", default=550.0)
    dmi_milking = dmi_dry = dmi_heifers = dmi_calves = dmi_bulls = None
    if tier == 2:
        dmi_milking = _num(record, "MS_intake_cows_milking_kg_day", "MS_intake_cows_kg_day")
        dmi_dry = first_non_null(_num(record, "MS_intake_cows_dry_kg_day"), dmi_milking)
        dmi_heifers = _num(record, "MS_intake_heifers_kg_day")
        dmi_calves = _num(record, "MS_intake_calves_kg_day")
        dmi_bulls = _num(record, "MS_intake_bulls_kg_day")

    area_total = _num(record, "Area_total_ha", default=100.0)
    areas = {category: _num(record, column, default=0.0) for column, category in AREA_COLUMNS.items()}
    area_breakdown = {category: ha for category, ha in areas.items() if ha > 0} or None

    return FarmInputs(
        farm_id=farm_id,
        year=year,
        tier=tier,
        milk_litres=_num(record, "Milk_litres", default=0.0),
        fat_percent=_num(record, "Fat_percent", default=4.0),
        protein_percent=_num(record, "Protein_percent", default=3.3),
        milk_density=_num(record, "Milk_density", default=1.03),
        cows_milking=_num(record, "Cows_milking", default=0.0),
        cows_dry=_num(record, "Cows_dry", default=0.0),
        heifers=_num(record, "Heifers_total", default=0.0),
        calves=_num(record, "Calves_total", default=0.0),
        bulls=_num(record, "Bulls_total", default=0.0),
        bw_cows=bw_cows,
        bw_cows_dry=_num(record, "Body_weight_cows_dry_kg", default=bw_cows),
        bw_heifers=_num(record, "Body_weight_heifers_kg", default=350.0),
        bw_calves=_num(record, "Body_weight_calves_kg", default=150.0),
        bw_bulls=_num(record, "Body_weight_bulls_kg", default=700.0),
        milk_yield_kg_cow_year=_num(record, "Milk_yield_kg_cow_year", default=6000.0 if tier == 2 else None),
        dmi_cows_milking=dmi_milking,
        dmi_cows_dry=dmi_dry,
        dmi_heifers=dmi_heifers,
        dmi_calves=dmi_calves,
        dmi_bulls=dmi_bulls,
        ym_percent=_num(record, "Ym_percent", default=6.5 if tier == 2 else 6.0),
        n_fertilizer_synthetic=_num(record, "N_fertilizer_kg", "N_fertilizer_synthetic_kg", default=0.0),
        n_fertilizer_organic=_num(record, "N_fertilizer_organic_kg", default=0.0),
        n_excreta_pasture=_num(record, "N_excreta_pasture_kg", default=0.0),
        n_crop_residues=_num(record, "N_crop_residues_kg", default=0.0),
        area_total_ha=area_total,
        area_productive_ha=_num(record, "Area_productive_ha"),
        area_fertilized_ha=_num(record, "Area_fertilized_ha", default=area_total),
        soil_type=_text(record, "Soil_type", "well_drained"),
        climate=_text(record, "Climate_zone", "temperate"),
        area_breakdown=area_breakdown,
        diesel_l=_num(record, "Diesel_litres", default=0.0),
        petrol_l=_num(record, "Petrol_litres", default=0.0),
        electricity_kwh=_num(record, "Electricity_kWh", "Electricity_KWh", default=0.0),
        lpg_kg=_num(record, "LPG_kg", default=0.0),
        natural_gas_m3=_num(record, "Natural_gas_m3", default=0.0),
        coal_kg=_num(record, "Coal_kg", default=0.0),
        biomass_kg=_num(record, "Biomass_kg", default=0.0),
        country=_text(record, "Country", "global"),
        concentrate_kg=_num(record, "Concentrate_feed_kg", default=0.0),
        plastic_kg=_num(record, "Plastic_kg", default=0.0),
        feeds_kg={keyword: _num(record, column, default=0.0) for column, keyword in FEED_COLUMNS.items()},
        region=_text(record, "Region", settings.inputs_region),
        manure_system=_text(record, "Manure_system", "pasture"),
        n_excreted_per_cow=_num(record, "N_excreted_per_cow_kg", default=100.0),
    )


# =============================================================================
# CSV Files
# =============================================================================


def read_farm_records(path: Path | str) -> list[dict[str, str]]:
    """Read a farm CSV into one dict per row."""
    with open(path, newline="", encoding="utf-8-sig") as f:
        return list(csv.DictReader(f))


def write_template(path: Path | str, include_examples: bool = False) -> Path:
    """Write an empty (or example-filled) farm CSV template."""
    path = Path(path)
    rows: Iterable[Mapping[str, str]] = EXAMPLE_ROWS if include_examples else ()
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=TEMPLATE_COLUMNS, restval="")
        writer.writeheader()
        writer.writerows(rows)
    return path


def unknown_columns(columns: Sequence[str]) -> list[str]:
    """Columns not recognised by the resolver."""
    known = set(TEMPLATE_COLUMNS) | {
        "Electricity_KWh",
        "MS_intake_cows_kg_day",
        "N_fertilizer_synthetic_kg",
    }
    return [name for name in columns if name not in known]
