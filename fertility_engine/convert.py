"""
Probability conversion utilities - odds transforms and annual/per-cycle rates
"""

import math
import logging
from typing import Iterable

import numpy as np

logger = logging.getLogger(__name__)

def _check_probability(p: float) -> None:
    if not 0.0 <= p <= 1.0 or math.isnan(p):
        raise ValueError(f"Invalid probability: {p}")

class ProbabilityConverter:
    """Converts between probabilities, odds and cycle-based rates"""

    def __init__(self, cycles_per_year: int = 12):
        if cycles_per_year < 1:
            raise ValueError(f"Invalid cycles per year: {cycles_per_year}")
        self.cycles_per_year = cycles_per_year

    def prob_to_odds(self, p: float) -> float:
        """
        odds = p / (1 - p), infinite when p >= 1
        """
        _check_probability(p)
        if p >= 1.0:
            return math.inf
        return p / (1.0 - p)

    def odds_to_prob(self, odds: float) -> float:
        """
        p = o / (1 + o), 1 when odds are infinite
        """
        if odds < 0 or math.isnan(odds):
            raise ValueError(f"Invalid odds: {odds}")
        if math.isinf(odds):
            return 1.0
        return odds / (1.0 + odds)

    def annual_to_per_cycle(self, annual: float) -> float:
        """
        Per-cycle rate whose cumulative probability over a year equals `annual`
        P_cycle = 1 - (1 - P_annual)^(1/n)
        """
        _check_probability(annual)
        return 1.0 - (1.0 - annual) ** (1.0 / self.cycles_per_year)

    def per_cycle_to_annual(self, per_cycle: float) -> float:
        """
        Cumulative probability over a year of independent cycles
        P_annual = 1 - (1 - P_cycle)^n
        """
        _check_probability(per_cycle)
        return 1.0 - (1.0 - per_cycle) ** self.cycles_per_year

    def combine_odds(self, baseline_prob: float, multipliers: Iterable[float]) -> float:
        """
        Apply multiplicative factors to the baseline in odds space
        """
        odds = self.prob_to_odds(baseline_prob)
        factors = np.asarray(list(multipliers), dtype=float)

        if factors.size == 0:
            return baseline_prob

        if np.any((factors < 0) | (factors > 1)):
            raise ValueError(f"Factors must lie in [0, 1]: {factors.tolist()}")

        product = float(np.prod(factors))
        if math.isinf(odds):
            # Infinite odds only collapse when a factor is exactly zero
            return 0.0 if product == 0.0 else 1.0

        return self.odds_to_prob(odds * product)

    def to_percentage(self, p: float) -> float:
        """Express a probability as a percentage clamped to [0, 100]"""
        return float(np.clip(p * 100.0, 0.0, 100.0))
