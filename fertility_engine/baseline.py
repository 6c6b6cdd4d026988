"""
Age baseline retrieval and age-matched benchmarks
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

OUT_OF_RANGE = "Out of clinical range"

@dataclass(frozen=True)
class AgeBand:
    """Age band with its reference per-cycle probability (%)"""
    label: str
    max_age: Optional[float]  # inclusive upper bound, None for the open last band
    probability: float
    potential: str

    def contains(self, age: float) -> bool:
        return self.max_age is None or age <= self.max_age

# Evaluated by ascending upper bound, first match wins
AGE_BANDS: Tuple[AgeBand, ...] = (
    AgeBand("<=24", 24, 27.5, "Excellent fertility"),
    AgeBand("25-29", 29, 22.5, "Very good fertility"),
    AgeBand("30-34", 34, 17.5, "Good fertility"),
    AgeBand("35-37", 37, 12.5, "Declining fecundity"),
    AgeBand("38-40", 40, 7.5, "Significant reduction"),
    AgeBand("41-42", 42, 4.0, "Low pregnancy rate"),
    AgeBand(">=43", None, 1.5, "Near-zero probability"),
)

@dataclass(frozen=True)
class BenchmarkBand:
    """Published per-cycle benchmark (%) for an age group"""
    label: str
    upper_age: Optional[float]
    inclusive: bool
    benchmark: float

BENCHMARK_BANDS: Tuple[BenchmarkBand, ...] = (
    BenchmarkBand("under 30", 30, False, 22.5),
    BenchmarkBand("30-34", 34, True, 17.5),
    BenchmarkBand("35-37", 37, True, 12.5),
    BenchmarkBand("38-40", 40, True, 7.5),
    BenchmarkBand("over 40", None, True, 3.0),
)

def find_age_band(age: float) -> AgeBand:
    for band in AGE_BANDS:
        if band.contains(age):
            return band
    return AGE_BANDS[-1]

def evaluate_age_baseline(age: float, min_age: float = 18.0,
                          max_age: float = 55.0) -> Tuple[float, str]:
    """
    Baseline per-cycle probability (%) and potential diagnostic for an age

    Ages outside the clinical range get a 0 baseline instead of an error.
    """
    if age < min_age or age > max_age:
        logger.warning(f"Age {age} outside clinical range [{min_age}, {max_age}], baseline set to 0")
        return 0.0, OUT_OF_RANGE

    band = find_age_band(age)
    return band.probability, band.potential

def get_benchmark(age: float) -> BenchmarkBand:
    """Age-matched benchmark band"""
    for band in BENCHMARK_BANDS:
        if band.upper_age is None:
            return band
        if age < band.upper_age or (band.inclusive and age <= band.upper_age):
            return band
    return BENCHMARK_BANDS[-1]
