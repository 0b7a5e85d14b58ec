"""Population statistics for herd metrics (GDP, target deviation, ...).

Values are banded against the population itself:

    poor      < mean - 0.4 * std_dev
    outstanding > mean + 0.4 * std_dev
    average   otherwise

The standard deviation is the population one (divide by N) so results
match the existing herd reports. Banding is only applied when the spread
is meaningful (std_dev > 10% of the mean); a near-uniform population, or a
single animal, is all Average.
"""

import math
from bisect import bisect_left
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

# Thresholds sit this many standard deviations from the mean
THRESHOLD_SIGMAS = 0.4

# Minimum std_dev / mean ratio for banding to apply
MIN_RELATIVE_SPREAD = 0.1

HISTOGRAM_BINS = 10


class PerformanceClass(Enum):
    POOR = "Poor"
    AVERAGE = "Average"
    OUTSTANDING = "Outstanding"


@dataclass
class PopulationStats:
    count: int
    mean: float
    std_dev: float
    poor_threshold: float
    excellent_threshold: float
    banded: bool  # False when every value classifies as Average


@dataclass
class HistogramBin:
    start: float
    end: float
    count: int


def population_stats(values: Sequence[float]) -> PopulationStats:
    """Mean, population standard deviation and banding thresholds."""
    n = len(values)
    if n == 0:
        return PopulationStats(0, 0.0, 0.0, 0.0, 0.0, banded=False)

    mean = sum(values) / n
    std_dev = math.sqrt(sum((v - mean) ** 2 for v in values) / n)

    return PopulationStats(
        count=n,
        mean=mean,
        std_dev=std_dev,
        poor_threshold=mean - THRESHOLD_SIGMAS * std_dev,
        excellent_threshold=mean + THRESHOLD_SIGMAS * std_dev,
        banded=std_dev > MIN_RELATIVE_SPREAD * mean,
    )


def classify_value(value: float, stats: PopulationStats) -> PerformanceClass:
    if not stats.banded:
        return PerformanceClass.AVERAGE
    if value < stats.poor_threshold:
        return PerformanceClass.POOR
    if value > stats.excellent_threshold:
        return PerformanceClass.OUTSTANDING
    return PerformanceClass.AVERAGE


def classify_population(values: Sequence[float]) -> list[PerformanceClass]:
    """Class of each value against the population it belongs to (same order)."""
    stats = population_stats(values)
    return [classify_value(v, stats) for v in values]


def percentile_rank(value: float, values: Sequence[float]) -> float:
    """Zero-based rank of value in the ascending population, over its size.

    Ties share the rank of their first occurrence. 0.0 for an empty population.
    """
    if not values:
        return 0.0
    ordered = sorted(values)
    return bisect_left(ordered, value) / len(ordered)


def distribution_counts(classes: Sequence[PerformanceClass]) -> dict[PerformanceClass, int]:
    """Animals per class, every class present."""
    counts = {c: 0 for c in PerformanceClass}
    for c in classes:
        counts[c] += 1
    return counts


def histogram(values: Sequence[float], bins: int = HISTOGRAM_BINS) -> list[HistogramBin]:
    """Equal-width histogram over [min, max]; the maximum lands in the last bin."""
    if not values or bins <= 0:
        return []

    low = min(values)
    high = max(values)
    width = (high - low) / bins

    if width == 0:
        return [HistogramBin(low, high, len(values))]

    result = [HistogramBin(low + i * width, low + (i + 1) * width, 0) for i in range(bins)]
    for v in values:
        index = min(int((v - low) / width), bins - 1)
        result[index].count += 1
    return result
