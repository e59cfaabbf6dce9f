"""Emission source models - enteric, manure, soil, energy and purchased inputs.

Each model validates its inputs, returns the standard excluded result when
the system boundary leaves its source out, and otherwise returns a dict
with "source" and "co2eq_kg" (kg CO2eq per year).
"""

from cowfoot.sources.base import GWP_CH4, GWP_N2O, excluded_result
from cowfoot.sources.energy import calc_emissions_energy
from cowfoot.sources.enteric import calc_emissions_enteric
from cowfoot.sources.inputs import calc_emissions_inputs
from cowfoot.sources.manure import calc_emissions_manure
from cowfoot.sources.soil import calc_emissions_soil

__all__ = [
    "GWP_CH4",
    "GWP_N2O",
    "excluded_result",
    "calc_emissions_energy",
    "calc_emissions_enteric",
    "calc_emissions_inputs",
    "calc_emissions_manure",
    "calc_emissions_soil",
]
