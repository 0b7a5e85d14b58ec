"""Growth module - target curve, weighing series and milestones."""

from goatherd.growth.milestones import (
    GrowthStatus,
    Milestones,
    MilestoneStatus,
    band_milestone,
    evaluate_service_timing,
    growth_status,
)
from goatherd.growth.series import (
    GdpResult,
    Trend,
    WeighingTrend,
    WeightPoint,
    build_series,
    calculate_gdp,
    days_to_target_weight,
    precocity_index,
    weaning_index,
    weighing_trend,
    weight_at_age,
)
from goatherd.growth.targets import (
    TargetClassification,
    classify_target_deviation,
    growth_score,
    target_curve,
    target_deviation,
    target_weight_at_age,
)

__all__ = [
    # Target curve
    "TargetClassification",
    "target_curve",
    "target_weight_at_age",
    "target_deviation",
    "classify_target_deviation",
    "growth_score",
    # Weighing series
    "WeightPoint",
    "GdpResult",
    "Trend",
    "WeighingTrend",
    "build_series",
    "weight_at_age",
    "calculate_gdp",
    "weaning_index",
    "precocity_index",
    "weighing_trend",
    "days_to_target_weight",
    # Milestones
    "MilestoneStatus",
    "Milestones",
    "GrowthStatus",
    "band_milestone",
    "evaluate_service_timing",
    "growth_status",
]
