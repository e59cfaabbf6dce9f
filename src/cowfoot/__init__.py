"""Dairy farm greenhouse-gas accounting.

Estimates farm emissions from enteric fermentation, manure, soil
nitrogen, energy and purchased inputs, combines them within a system
boundary, and derives milk and area intensities for batches of farms.

Subpackages:
- cowfoot.core: Configuration, units, coercion and validation
- cowfoot.accounting: System boundaries, result normalization, totals
- cowfoot.sources: Emission source models
- cowfoot.analysis: Milk and area intensities
- cowfoot.batch: Batch orchestration, reports and CLI
"""

# Re-export common items for convenience
from cowfoot.accounting import calc_total_emissions, set_system_boundaries
from cowfoot.analysis import calc_intensity_area, calc_intensity_litre
from cowfoot.batch import calc_batch
from cowfoot.core import settings
from cowfoot.sources import (
    calc_emissions_energy,
    calc_emissions_enteric,
    calc_emissions_inputs,
    calc_emissions_manure,
    calc_emissions_soil,
)

__all__ = [
    "settings",
    "set_system_boundaries",
    "calc_total_emissions",
    "calc_emissions_enteric",
    "calc_emissions_manure",
    "calc_emissions_soil",
    "calc_emissions_energy",
    "calc_emissions_inputs",
    "calc_intensity_litre",
    "calc_intensity_area",
    "calc_batch",
]

__version__ = "0.1.0"
