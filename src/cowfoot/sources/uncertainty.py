"""Monte Carlo uncertainty for purchased-input emissions.

Each factor is drawn uniformly from its (low, high) range; factors
without a range (caller overrides) are held at their value. The total
is the quantity-weighted sum of the draws.
"""

from collections.abc import Mapping

import numpy as np

from cowfoot.core.config import settings
from cowfoot.sources.factors import FactorRange


def sample_factor(factor: FactorRange | float, draws: int, rng: np.random.Generator) -> np.ndarray:
    """Draw a factor uniformly from its range, or repeat a fixed value."""
    if isinstance(factor, FactorRange):
        return rng.uniform(factor.low, factor.high, size=draws)
    return np.full(draws, float(factor))


def simulate_total(
    quantities: Mapping[str, float],
    factors: Mapping[str, FactorRange | float],
    draws: int | None = None,
    seed: int | None = None,
) -> np.ndarray:
    """Simulate total emissions for quantities weighted by sampled factors.

    Only quantities that are positive contribute.
    """
    draws = draws or settings.monte_carlo_draws
    rng = np.random.default_rng(seed)
    total = np.zeros(draws)
    for name, quantity in quantities.items():
        if quantity > 0:
            total += quantity * sample_factor(factors[name], draws, rng)
    return total


def summarize_draws(total: np.ndarray) -> dict:
    """Summary statistics of simulated totals (kg CO2eq)."""
    mean = float(np.mean(total))
    sd = float(np.std(total, ddof=1)) if total.size > 1 else 0.0
    p = np.percentile(total, [2.5, 5, 25, 75, 95, 97.5])
    return {
        "mean": round(mean, 2),
        "median": round(float(np.median(total)), 2),
        "sd": round(sd, 2),
        "cv_percent": round(sd / mean * 100, 1) if mean > 0 else None,
        "percentiles": {
            "p5": round(float(p[1]), 2),
            "p25": round(float(p[2]), 2),
            "p75": round(float(p[3]), 2),
            "p95": round(float(p[4]), 2),
        },
        "confidence_interval_95": {
            "lower": round(float(p[0]), 2),
            "upper": round(float(p[5]), 2),
        },
        "draws": int(total.size),
    }
