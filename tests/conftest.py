"""Shared test fixtures."""

import sys
from pathlib import Path

import pytest

# Add src/ to path so tests can import cowfoot
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cowfoot.accounting.boundaries import set_system_boundaries  # noqa: E402


@pytest.fixture
def farm_gate():
    """Boundary including the five on-farm sources."""
    return set_system_boundaries("farm_gate")


@pytest.fixture
def reference_results():
    """Source results for a 100-cow reference farm, one per source."""
    return [
        {"source": "enteric", "co2eq_kg": 312800.0},
        {"source": "manure", "co2eq_kg": 89880.0},
        {"source": "soil", "co2eq_kg": 39092.62},
        {"source": "energy", "co2eq_kg": 5740.0},
        {"source": "inputs", "co2eq_kg": 4000.0},
    ]


@pytest.fixture
def farm_record():
    """A minimal valid farm row, as read from CSV."""
    return {
        "FarmID": "FARM001",
        "Year": "2024",
        "Milk_litres": "750000",
        "Cows_milking": "100",
    }


@pytest.fixture
def full_farm_record():
    """A farm row using most template columns."""
    return {
        "FarmID": "FARM002",
        "Year": "2024",
        "Milk_litres": "1200000",
        "Fat_percent": "3.9",
        "Protein_percent": "3.3",
        "Cows_milking": "150",
        "Cows_dry": "25",
        "Heifers_total": "40",
        "Calves_total": "30",
        "Bulls_total": "2",
        "MS_intake_cows_milking_kg_day": "19",
        "N_fertilizer_kg": "3000",
        "N_excreta_pasture_kg": "8000",
        "Area_total_ha": "220",
        "Area_productive_ha": "200",
        "Pasture_permanent_ha": "180",
        "Crops_feed_ha": "20",
        "Infrastructure_ha": "20",
        "Diesel_litres": "12000",
        "Electricity_kWh": "60000",
        "Country": "NZ",
        "Concentrate_feed_kg": "300000",
        "Plastic_kg": "500",
        "Manure_system": "liquid_storage",
    }
