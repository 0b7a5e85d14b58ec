"""Body-weight series: weight at a given age, daily gain and trends.

Weighings are irregular: kids are weighed at birth, at weaning and then
whenever the herd passes through the scale. Weight at a fixed age (90,
180, 270 days) is therefore read from the series with a tolerance match
first, then linear interpolation between the surrounding weighings. The
series is never extrapolated: no weighing after the age means no answer.
"""

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import NamedTuple

from goatherd.core.dates import AGE_UNKNOWN, age_in_days, parse_date
from goatherd.data.records import Weighing

logger = logging.getLogger(__name__)

# A weighing this close to the queried age is used as is (days)
MATCH_TOLERANCE_DAYS = 5

# Weight changes below this are reported as stable (kg)
TREND_STABLE_MARGIN_KG = 0.15

# Weaning weight is standardised to this age (days)
WEANING_INDEX_AGE_DAYS = 60

# Precocity is read as the weight at 7 months (days)
PRECOCITY_AGE_DAYS = 213


class WeightPoint(NamedTuple):
    age_days: int
    kg: float


class Trend(Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"
    SINGLE = "single"


@dataclass
class GdpResult:
    """Average daily gain (kg/day). None where it cannot be computed."""

    overall: float | None
    recent: float | None


@dataclass
class WeighingTrend:
    trend: Trend
    difference: float  # kg, last minus previous
    is_long_trend: bool  # last three weighings move the same way


def build_series(
    weighings: Iterable[Weighing],
    birth_date: object,
    birth_weight: float | None = None,
) -> list[WeightPoint]:
    """Convert weighings to (age, kg) points sorted by age.

    A synthetic point at age 0 is added when a birth weight is known.
    Weighings without a usable date, or dated before birth, are dropped.
    Returns an empty list when the birth date is unknown.
    """
    birth = parse_date(birth_date)
    if birth is None:
        return []

    points = []
    if birth_weight:
        points.append(WeightPoint(0, float(birth_weight)))

    for w in weighings:
        if w.date is None or w.date < birth:
            continue
        points.append(WeightPoint((w.date - birth).days, w.kg))

    points.sort(key=lambda p: p.age_days)
    return points


def interpolate(points: Sequence[WeightPoint], target_age: float) -> float | None:
    """Weight at target_age from an age-sorted series (see weight_at_age)."""
    if not points:
        return None

    # Tolerance match: closest point within the window, earliest on ties
    nearest = min(points, key=lambda p: (abs(p.age_days - target_age), p.age_days))
    if abs(nearest.age_days - target_age) <= MATCH_TOLERANCE_DAYS:
        return round(nearest.kg, 2)

    before = [p for p in points if p.age_days < target_age]
    after = [p for p in points if p.age_days > target_age]
    if not before or not after:
        return None

    lo = before[-1]
    hi = after[0]
    fraction = (target_age - lo.age_days) / (hi.age_days - lo.age_days)
    return round(lo.kg + fraction * (hi.kg - lo.kg), 2)


def weight_at_age(
    weighings: Iterable[Weighing],
    birth_date: object,
    target_age: float,
    birth_weight: float | None = None,
) -> float | None:
    """Weight (kg) at an age in days.

    Args:
        weighings: Body weighings of one animal, in any order
        birth_date: Birth date (anything parse_date accepts)
        target_age: Age in days to read the weight at
        birth_weight: Optional birth weight, used as the day-0 point

    Returns:
        The weight rounded to 2 decimals, or None when the age is not
        covered by the series
    """
    return interpolate(build_series(weighings, birth_date, birth_weight), target_age)


def calculate_gdp(
    birth_date: object,
    birth_weight: float | None,
    weighings: Iterable[Weighing],
) -> GdpResult:
    """Average daily gain (GDP) in kg/day.

    overall: from birth (or the first weighing, if birth weight is unknown)
    to the last weighing. recent: between the last two weighings.
    """
    dated = sorted((w for w in weighings if w.date is not None), key=lambda w: w.date)
    if not dated:
        return GdpResult(overall=None, recent=None)

    last = dated[-1]
    overall = None
    birth = parse_date(birth_date)

    if birth_weight and birth is not None:
        days = (last.date - birth).days
        if days > 0:
            overall = (last.kg - birth_weight) / days
    elif len(dated) >= 2:
        days = (last.date - dated[0].date).days
        if days > 0:
            overall = (last.kg - dated[0].kg) / days

    recent = None
    if len(dated) >= 2:
        previous = dated[-2]
        days = (last.date - previous.date).days
        if days > 0:
            recent = (last.kg - previous.kg) / days

    return GdpResult(overall=overall, recent=recent)


def weaning_index(
    weaning_weight: float | None,
    weaning_date: object,
    birth_date: object,
    birth_weight: float | None = None,
) -> float | None:
    """Weaning weight standardised to 60 days of age.

    Uses the pre-weaning daily gain: birth + gain * 60.
    """
    weaned = parse_date(weaning_date)
    if not weaning_weight or weaned is None:
        return None
    age = age_in_days(birth_date, weaned)
    if age <= 0:
        return None
    start = birth_weight or 0.0
    daily_gain = (weaning_weight - start) / age
    return round(start + daily_gain * WEANING_INDEX_AGE_DAYS, 2)


def precocity_index(
    weighings: Iterable[Weighing], birth_date: object, birth_weight: float | None = None
) -> float | None:
    """Weight at 7 months (213 days), or None if the series does not cover it."""
    return weight_at_age(weighings, birth_date, PRECOCITY_AGE_DAYS, birth_weight)


def weighing_trend(weighings: Iterable[Weighing]) -> WeighingTrend:
    """Direction of the last weighing against the previous one."""
    dated = sorted((w for w in weighings if w.date is not None), key=lambda w: w.date)
    if len(dated) < 2:
        return WeighingTrend(trend=Trend.SINGLE, difference=0.0, is_long_trend=False)

    difference = dated[-1].kg - dated[-2].kg
    if difference > TREND_STABLE_MARGIN_KG:
        trend = Trend.UP
    elif difference < -TREND_STABLE_MARGIN_KG:
        trend = Trend.DOWN
    else:
        trend = Trend.STABLE

    is_long_trend = False
    if len(dated) >= 3 and trend is not Trend.STABLE:
        earlier = dated[-2].kg - dated[-3].kg
        if trend is Trend.UP:
            is_long_trend = earlier > TREND_STABLE_MARGIN_KG
        else:
            is_long_trend = earlier < -TREND_STABLE_MARGIN_KG

    return WeighingTrend(trend=trend, difference=round(difference, 2), is_long_trend=is_long_trend)


def days_to_target_weight(
    current_weight: float, target_weight: float, gdp_kg_day: float | None
) -> int | None:
    """Days until target_weight at the current daily gain.

    0 when already there; None when the animal is not gaining.
    """
    if current_weight >= target_weight:
        return 0
    if not gdp_kg_day or gdp_kg_day <= 0:
        return None
    remaining = target_weight - current_weight
    return math.ceil(remaining / gdp_kg_day)


def latest_weighing(weighings: Iterable[Weighing]) -> Weighing | None:
    dated = [w for w in weighings if w.date is not None]
    if not dated:
        return None
    return max(dated, key=lambda w: w.date)


def age_at(birth_date: object, on_date: date | None) -> int:
    """Age in days on a given date, AGE_UNKNOWN when either is missing."""
    if on_date is None:
        return AGE_UNKNOWN
    return age_in_days(birth_date, on_date)
