"""Growth target curve.

The target curve is built from a handful of (age, weight) anchors taken
from the herd configuration:

    birth (day 0), weaning age, 90 d, 180 d, 270 d, first-service age

Between anchors the target is linear. Below the first anchor it is the
birth weight, and past the last anchor it stays at the first-service
weight: old animals are not expected to keep gaining along the last slope.
"""

from enum import Enum

from goatherd.data.herd_config import CURVE_FIRST_SERVICE_WEIGHT_KG, AppConfig
from goatherd.data.records import Sex

# Deviation bands (current weight / target weight)
SUPERIOR_DEVIATION = 1.05
ON_TARGET_DEVIATION = 0.95

MAX_GROWTH_SCORE = 10.0


class TargetClassification(Enum):
    SUPERIOR = "Superior"
    ON_TARGET = "On-Target"
    BELOW_TARGET = "Below-Target"
    ALERT = "Alert"
    NO_DATA = "No-Data"


def target_curve(sex: Sex, config: AppConfig) -> list[tuple[int, float]]:
    """Anchor points (age_days, weight_kg) sorted by age."""
    anchors = [
        (0, config.birth_weight()),
        (config.weaning_age(), config.weaning_weight(sex)),
        (90, config.milestone_weight(90, sex)),
        (180, config.milestone_weight(180, sex)),
        (270, config.milestone_weight(270, sex)),
        (config.first_service_age_days(), config.first_service_weight(CURVE_FIRST_SERVICE_WEIGHT_KG)),
    ]
    return sorted(anchors, key=lambda a: a[0])


def target_weight_at_age(age_in_days: float, sex: Sex, config: AppConfig) -> float:
    """Target weight (kg) for an age in days.

    Args:
        age_in_days: Age in days
        sex: Sex (male targets override where configured)
        config: Herd configuration

    Returns:
        Interpolated target weight, flat outside the anchor range
    """
    anchors = target_curve(sex, config)

    first_age, first_weight = anchors[0]
    if age_in_days <= first_age:
        return first_weight

    for (age_a, weight_a), (age_b, weight_b) in zip(anchors, anchors[1:]):
        if age_a <= age_in_days <= age_b:
            if age_b == age_a:
                return weight_b
            fraction = (age_in_days - age_a) / (age_b - age_a)
            return weight_a + fraction * (weight_b - weight_a)

    return anchors[-1][1]


def target_deviation(current_weight: float | None, target_weight: float | None) -> float:
    """Ratio of current to target weight (0 when either is missing or target <= 0)."""
    if not current_weight or not target_weight or target_weight <= 0:
        return 0.0
    return current_weight / target_weight


def classify_target_deviation(
    deviation: float | None, alert_threshold: float = 0.85
) -> TargetClassification:
    """Band a target deviation ratio."""
    if not deviation or deviation <= 0:
        return TargetClassification.NO_DATA
    if deviation >= SUPERIOR_DEVIATION:
        return TargetClassification.SUPERIOR
    if deviation >= ON_TARGET_DEVIATION:
        return TargetClassification.ON_TARGET
    if deviation < alert_threshold:
        return TargetClassification.ALERT
    return TargetClassification.BELOW_TARGET


def growth_score(deviation: float) -> float:
    """Bounded 0-10 growth score (10 = at or above target)."""
    return round(max(0.0, min(deviation * MAX_GROWTH_SCORE, MAX_GROWTH_SCORE)), 1)
