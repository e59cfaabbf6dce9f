"""
Regional emission factors for purchased farm inputs.

Cradle-to-farm-gate factors for fertilizers, feeds and plastics, as a
mean with a plausible (low, high) range. Ranges drive the Monte Carlo
uncertainty estimate in cowfoot.sources.uncertainty.

Units:
- fertilizer: kg CO2eq per kg N
- feeds: kg CO2eq per kg DM
- plastic: kg CO2eq per kg

References:
-----------
[1] IDF (2022). "The IDF global Carbon Footprint standard for the dairy
    sector." Bulletin of the IDF No. 520/2022.
[2] Generic life-cycle inventory sources (ecoinvent, Agri-footprint)
    for feed and plastic production.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FactorRange:
    """An emission factor with its plausible range."""

    mean: float
    low: float
    high: float


FERTILIZER_TYPES = ("mixed", "urea", "ammonium_nitrate", "organic")
FEED_TYPES = ("concentrate", "grain_dry", "grain_wet", "ration", "byproducts", "proteins", "corn", "soy", "wheat")
PLASTIC_TYPES = ("mixed", "LDPE", "HDPE", "PP")

# Feeds reported individually (concentrate is reported on its own line)
FEED_CLASSES = FEED_TYPES[1:]


def _table(values: dict[str, tuple[float, float, float]]) -> dict[str, FactorRange]:
    return {name: FactorRange(*triple) for name, triple in values.items()}


# (mean, low, high)
REGIONAL_FACTORS: dict[str, dict[str, dict[str, FactorRange]]] = {
    "global": {
        "fertilizer": _table(
            {
                "mixed": (6.6, 5.5, 7.8),
                "urea": (7.2, 6.1, 8.5),
                "ammonium_nitrate": (6.1, 5.2, 7.2),
                "organic": (0.8, 0.5, 1.2),
            }
        ),
        "feeds": _table(
            {
                "concentrate": (0.70, 0.50, 1.20),
                "grain_dry": (0.40, 0.30, 0.60),
                "grain_wet": (0.30, 0.25, 0.45),
                "ration": (0.60, 0.40, 0.80),
                "byproducts": (0.15, 0.10, 0.25),
                "proteins": (1.80, 1.20, 2.50),
                "corn": (0.45, 0.35, 0.65),
                "soy": (2.10, 1.50, 2.80),
                "wheat": (0.52, 0.40, 0.70),
            }
        ),
        "plastic": _table(
            {
                "mixed": (2.5, 1.8, 3.5),
                "LDPE": (2.8, 2.2, 3.6),
                "HDPE": (2.3, 1.9, 2.9),
                "PP": (2.1, 1.6, 2.8),
            }
        ),
    },
    "EU": {
        "fertilizer": _table(
            {
                "mixed": (6.8, 5.8, 7.9),
                "urea": (7.5, 6.5, 8.7),
                "ammonium_nitrate": (6.3, 5.5, 7.3),
                "organic": (0.9, 0.6, 1.3),
            }
        ),
        "feeds": _table(
            {
                "concentrate": (0.75, 0.55, 1.10),
                "grain_dry": (0.42, 0.32, 0.58),
                "grain_wet": (0.32, 0.26, 0.42),
                "ration": (0.65, 0.45, 0.85),
                "byproducts": (0.18, 0.12, 0.28),
                "proteins": (2.20, 1.60, 2.90),
                "corn": (0.48, 0.38, 0.65),
                "soy": (2.60, 2.10, 3.20),
                "wheat": (0.51, 0.42, 0.68),
            }
        ),
        "plastic": _table(
            {
                "mixed": (2.3, 1.9, 3.1),
                "LDPE": (2.6, 2.1, 3.3),
                "HDPE": (2.1, 1.8, 2.7),
                "PP": (1.9, 1.5, 2.5),
            }
        ),
    },
    "US": {
        "fertilizer": _table(
            {
                "mixed": (6.4, 5.3, 7.6),
                "urea": (6.9, 5.8, 8.1),
                "ammonium_nitrate": (5.9, 5.0, 6.9),
                "organic": (0.7, 0.4, 1.0),
            }
        ),
        "feeds": _table(
            {
                "concentrate": (0.65, 0.48, 0.95),
                "grain_dry": (0.35, 0.28, 0.48),
                "grain_wet": (0.28, 0.22, 0.38),
                "ration": (0.55, 0.38, 0.75),
                "byproducts": (0.12, 0.08, 0.18),
                "proteins": (1.50, 1.10, 2.10),
                "corn": (0.38, 0.31, 0.52),
                "soy": (1.60, 1.20, 2.20),
                "wheat": (0.45, 0.35, 0.61),
            }
        ),
        "plastic": _table(
            {
                "mixed": (2.4, 1.7, 3.4),
                "LDPE": (2.7, 2.0, 3.5),
                "HDPE": (2.2, 1.7, 2.8),
                "PP": (2.0, 1.5, 2.7),
            }
        ),
    },
    "Brazil": {
        "fertilizer": _table(
            {
                "mixed": (7.1, 6.0, 8.3),
                "urea": (7.8, 6.6, 9.2),
                "ammonium_nitrate": (6.5, 5.5, 7.6),
                "organic": (0.6, 0.3, 0.9),
            }
        ),
        "feeds": _table(
            {
                "concentrate": (0.68, 0.51, 0.98),
                "grain_dry": (0.36, 0.29, 0.49),
                "grain_wet": (0.29, 0.23, 0.39),
                "ration": (0.58, 0.41, 0.78),
                "byproducts": (0.13, 0.09, 0.19),
                "proteins": (1.40, 1.00, 1.90),
                "corn": (0.32, 0.26, 0.44),
                "soy": (1.20, 0.90, 1.60),
                "wheat": (0.58, 0.45, 0.78),
            }
        ),
        "plastic": _table(
            {
                "mixed": (2.7, 2.1, 3.6),
                "LDPE": (3.0, 2.4, 3.8),
                "HDPE": (2.5, 2.0, 3.2),
                "PP": (2.3, 1.8, 3.0),
            }
        ),
    },
    "Argentina": {
        "fertilizer": _table(
            {
                "mixed": (6.9, 5.8, 8.1),
                "urea": (7.6, 6.4, 8.9),
                "ammonium_nitrate": (6.3, 5.3, 7.4),
                "organic": (0.5, 0.3, 0.8),
            }
        ),
        "feeds": _table(
            {
                "concentrate": (0.62, 0.46, 0.89),
                "grain_dry": (0.34, 0.27, 0.46),
                "grain_wet": (0.27, 0.21, 0.37),
                "ration": (0.56, 0.39, 0.76),
                "byproducts": (0.11, 0.07, 0.17),
                "proteins": (1.30, 0.90, 1.80),
                "corn": (0.31, 0.25, 0.42),
                "soy": (1.10, 0.80, 1.50),
                "wheat": (0.41, 0.32, 0.56),
            }
        ),
        "plastic": _table(
            {
                "mixed": (2.8, 2.2, 3.7),
                "LDPE": (3.1, 2.5, 3.9),
                "HDPE": (2.6, 2.1, 3.3),
                "PP": (2.4, 1.9, 3.1),
            }
        ),
    },
    "Australia": {
        "fertilizer": _table(
            {
                "mixed": (6.5, 5.4, 7.7),
                "urea": (7.0, 5.9, 8.2),
                "ammonium_nitrate": (6.0, 5.1, 7.0),
                "organic": (0.8, 0.5, 1.1),
            }
        ),
        "feeds": _table(
            {
                "concentrate": (0.72, 0.53, 1.05),
                "grain_dry": (0.41, 0.33, 0.56),
                "grain_wet": (0.31, 0.25, 0.41),
                "ration": (0.63, 0.44, 0.84),
                "byproducts": (0.16, 0.11, 0.24),
                "proteins": (1.90, 1.40, 2.60),
                "corn": (0.46, 0.37, 0.62),
                "soy": (2.30, 1.80, 3.00),
                "wheat": (0.44, 0.35, 0.59),
            }
        ),
        "plastic": _table(
            {
                "mixed": (2.6, 2.0, 3.5),
                "LDPE": (2.9, 2.3, 3.7),
                "HDPE": (2.4, 1.9, 3.1),
                "PP": (2.2, 1.7, 2.9),
            }
        ),
    },
}

REGIONS = tuple(REGIONAL_FACTORS)


def get_regional_factors(region: str) -> dict[str, dict[str, FactorRange]]:
    """Get the factor tables for a region.

    Raises:
        KeyError: If the region has no table
    """
    return REGIONAL_FACTORS[region]
