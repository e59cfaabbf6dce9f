"""Analysis - emission intensities per unit of milk and per hectare."""

from cowfoot.analysis.intensity import (
    calc_intensity_area,
    calc_intensity_litre,
    fpcm_factor,
)

__all__ = [
    "calc_intensity_area",
    "calc_intensity_litre",
    "fpcm_factor",
]
