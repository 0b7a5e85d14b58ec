"""Analysis module - population statistics, cohort curves and growth reports."""

from goatherd.analysis.cohorts import (
    CohortPoint,
    ComparisonRequest,
    ComparisonResult,
    ComparisonType,
    average_lactation_curve,
    average_rest_interval,
    compare,
    growth_cohort_curve,
)
from goatherd.analysis.growth_report import (
    GdpAnalysis,
    GrowthAnalytics,
    HerdClassification,
    analyze_gdp,
    analyze_growth,
)
from goatherd.analysis.stats import (
    PerformanceClass,
    PopulationStats,
    classify_population,
    classify_value,
    distribution_counts,
    histogram,
    percentile_rank,
    population_stats,
)

__all__ = [
    # Statistics
    "PerformanceClass",
    "PopulationStats",
    "population_stats",
    "classify_value",
    "classify_population",
    "percentile_rank",
    "distribution_counts",
    "histogram",
    # Cohort curves
    "ComparisonType",
    "ComparisonRequest",
    "ComparisonResult",
    "CohortPoint",
    "average_lactation_curve",
    "average_rest_interval",
    "compare",
    "growth_cohort_curve",
    # Growth reports
    "HerdClassification",
    "GdpAnalysis",
    "GrowthAnalytics",
    "analyze_gdp",
    "analyze_growth",
]
