"""Herd-level growth views: GDP distribution and target/herd deviation.

Both views cover the animals still growing: active, non-reference animals
classified as Kid-Female, Kid-Male, Doeling or Buckling on the reference
date.

- analyze_gdp ranks average daily gain (GDP, g/day) against the group
  with the Poor/Average/Outstanding banding.
- analyze_growth compares each animal's current weight with the target
  curve (target deviation) and with its age cohort (herd deviation), and
  derives the alert and weaning-candidate lists plus milestone KPIs.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from goatherd.analysis.stats import (
    HistogramBin,
    PerformanceClass,
    PopulationStats,
    classify_value,
    distribution_counts,
    histogram,
    percentile_rank,
    population_stats,
)
from goatherd.core.dates import AGE_UNKNOWN, age_in_days, today_utc
from goatherd.core.units import kg_per_day_to_g_per_day
from goatherd.data.herd_config import AppConfig
from goatherd.data.records import Animal, EventType, Sex
from goatherd.data.snapshot import HerdIndex, HerdSnapshot
from goatherd.growth.series import (
    build_series,
    calculate_gdp,
    days_to_target_weight,
    interpolate,
    latest_weighing,
)
from goatherd.growth.targets import (
    TargetClassification,
    classify_target_deviation,
    growth_score,
    target_deviation,
    target_weight_at_age,
)
from goatherd.lifecycle.classifier import GROWTH_CATEGORIES, Category, ProgenyIndex, classify

logger = logging.getLogger(__name__)

# Herd deviation bands (current weight / cohort mean weight)
HERD_SUPERIOR_DEVIATION = 1.1
HERD_INFERIOR_DEVIATION = 0.9

# Weaning candidates may be this much under the weaning weight (kg)
WEANING_WEIGHT_SLACK_KG = 0.2

# Plausible ages for the weaning / service KPIs (days); outside is a data error
WEANING_KPI_AGE_RANGE = (30, 120)
SERVICE_KPI_AGE_RANGE = (150, 900)

# A female this close to the service weight is "approaching service" (days)
APPROACHING_SERVICE_DAYS = 30

# Upper bounds of the age cohorts (days)
AGE_COHORTS = [
    (60, "0-60d"),
    (90, "61-90d"),
    (180, "91-180d"),
    (270, "181-270d"),
]


class HerdClassification(Enum):
    SUPERIOR = "Superior"
    AVERAGE = "Average"
    INFERIOR = "Inferior"
    NO_DATA = "N/A"


def age_cohort(age_days: int) -> str:
    """Age cohort label for an age in days."""
    if age_days < 0:
        return "unknown"
    for upper, label in AGE_COHORTS:
        if age_days <= upper:
            return label
    return "270d+"


def growing_animals(
    snapshot: HerdSnapshot,
    reference_date: date,
    config: AppConfig | None = None,
) -> list[tuple[Animal, Category]]:
    """Active, non-reference animals in a growth category on reference_date."""
    if config is None:
        config = snapshot.config
    index = HerdIndex.for_snapshot(snapshot)
    progeny = ProgenyIndex.from_herd_index(index)

    result = []
    for animal in snapshot.animals:
        if not animal.is_active or animal.is_reference:
            continue
        category = classify(
            animal,
            index.parturitions_for(animal.id),
            config,
            herd=progeny,
            events=index.events_for(animal.id),
            reference_date=reference_date,
        )
        if category in GROWTH_CATEGORIES:
            result.append((animal, category))
    return result


# =============================================================================
# GDP analysis
# =============================================================================


@dataclass
class GdpAnimal:
    animal_id: str
    name: str
    category: Category
    gdp_g_day: float
    classification: PerformanceClass


@dataclass
class GdpAnalysis:
    animals: list[GdpAnimal]  # best first
    stats: PopulationStats  # g/day
    distribution: dict[PerformanceClass, int]
    histogram: list[HistogramBin]


def analyze_gdp(
    snapshot: HerdSnapshot,
    reference_date: date | None = None,
    config: AppConfig | None = None,
) -> GdpAnalysis:
    """Classify the growing animals by average daily gain.

    Animals without a positive GDP are left out. config defaults to the
    snapshot's.
    """
    if reference_date is None:
        reference_date = today_utc()
    if config is None:
        config = snapshot.config

    index = HerdIndex.for_snapshot(snapshot)
    rows = []
    for animal, category in growing_animals(snapshot, reference_date, config):
        gdp = calculate_gdp(animal.birth_date, animal.birth_weight, index.body_weighings_for(animal.id))
        if gdp.overall is None or gdp.overall <= 0:
            continue
        rows.append((animal, category, kg_per_day_to_g_per_day(gdp.overall)))

    values = [r[2] for r in rows]
    stats = population_stats(values)
    animals = [
        GdpAnimal(
            animal_id=animal.id,
            name=animal.name,
            category=category,
            gdp_g_day=value,
            classification=classify_value(value, stats),
        )
        for animal, category, value in rows
    ]
    animals.sort(key=lambda a: a.gdp_g_day, reverse=True)

    logger.debug("GDP analysis: %d animals, mean %.1f g/day", stats.count, stats.mean)
    return GdpAnalysis(
        animals=animals,
        stats=stats,
        distribution=distribution_counts([a.classification for a in animals]),
        histogram=histogram(values),
    )


# =============================================================================
# Growth analysis
# =============================================================================


@dataclass
class GrowthAnalyzedAnimal:
    animal_id: str
    name: str
    sex: Sex
    category: Category
    age_days: int
    current_weight: float
    gdp_g_day: float | None
    weaned: bool

    target_weight: float
    target_deviation: float
    target_classification: TargetClassification
    score: float

    cohort: str
    cohort_avg_weight: float = 0.0
    herd_deviation: float = 0.0
    herd_classification: HerdClassification = HerdClassification.NO_DATA
    herd_percentile: float = 0.0

    days_to_service_weight: int | None = None


@dataclass
class TargetKpis:
    total_animals: int
    superior_pct: float
    on_target_pct: float
    below_target_pct: float
    alert_pct: float


@dataclass
class HerdKpis:
    total_animals: int
    above_avg_pct: float
    below_avg_pct: float
    avg_deviation: float


@dataclass
class MilestoneKpis:
    """Averages over animals with data; 0 when none."""

    avg_days_to_weaning: float
    avg_days_to_service: float
    avg_weight_90d: float
    avg_weight_180d: float
    avg_weight_270d: float
    avg_gdp_g_day: float


@dataclass
class CategoryPerformance:
    category: Category
    animal_count: int
    avg_target_deviation: float
    avg_herd_deviation: float
    alert_count: int


@dataclass
class GrowthAnalytics:
    animals: list[GrowthAnalyzedAnimal]  # worst target deviation first
    target_kpis: TargetKpis
    herd_kpis: HerdKpis
    milestone_kpis: MilestoneKpis
    category_performance: list[CategoryPerformance]
    alert_list: list[GrowthAnalyzedAnimal] = field(default_factory=list)
    weaning_candidates: list[GrowthAnalyzedAnimal] = field(default_factory=list)
    approaching_service: list[GrowthAnalyzedAnimal] = field(default_factory=list)


def _pct(count: int, total: int) -> float:
    return count / total * 100 if total else 0.0


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _herd_classification(deviation: float) -> HerdClassification:
    if deviation <= 0:
        return HerdClassification.NO_DATA
    if deviation > HERD_SUPERIOR_DEVIATION:
        return HerdClassification.SUPERIOR
    if deviation < HERD_INFERIOR_DEVIATION:
        return HerdClassification.INFERIOR
    return HerdClassification.AVERAGE


def analyze_growth(
    snapshot: HerdSnapshot,
    reference_date: date | None = None,
    config: AppConfig | None = None,
) -> GrowthAnalytics:
    """Growth view of the animals still growing.

    Args:
        snapshot: Herd snapshot
        reference_date: Date to evaluate at (default today, UTC)
        config: Herd configuration (default: the snapshot's)
    """
    if reference_date is None:
        reference_date = today_utc()
    if config is None:
        config = snapshot.config

    index = HerdIndex.for_snapshot(snapshot)
    alert_threshold = config.alert_threshold()
    service_weight = config.first_service_weight()

    analyzed: list[GrowthAnalyzedAnimal] = []
    weaning_days: list[float] = []
    service_days: list[float] = []
    milestone_weights: dict[int, list[float]] = defaultdict(list)
    gdp_values: list[float] = []

    for animal, category in growing_animals(snapshot, reference_date, config):
        weighings = index.body_weighings_for(animal.id)
        age = age_in_days(animal.birth_date, reference_date)

        last = latest_weighing(weighings)
        current_weight = last.kg if last is not None else (animal.birth_weight or 0.0)

        gdp = calculate_gdp(animal.birth_date, animal.birth_weight, weighings).overall
        gdp_g_day = kg_per_day_to_g_per_day(gdp) if gdp is not None and gdp > 0 else None

        target = target_weight_at_age(max(age, 0), animal.sex, config)
        deviation = target_deviation(current_weight, target)
        if age == AGE_UNKNOWN or last is None:
            classification = TargetClassification.NO_DATA
        else:
            classification = classify_target_deviation(deviation, alert_threshold)

        days_to_service = None
        if animal.sex is Sex.FEMALE and gdp_g_day is not None and current_weight < service_weight:
            days_needed = days_to_target_weight(current_weight, service_weight, gdp)
            if days_needed is not None and days_needed <= APPROACHING_SERVICE_DAYS:
                days_to_service = days_needed

        analyzed.append(
            GrowthAnalyzedAnimal(
                animal_id=animal.id,
                name=animal.name,
                sex=animal.sex,
                category=category,
                age_days=age,
                current_weight=current_weight,
                gdp_g_day=gdp_g_day,
                weaned=animal.weaning_date is not None,
                target_weight=target,
                target_deviation=deviation,
                target_classification=classification,
                score=growth_score(deviation),
                cohort=age_cohort(age),
                days_to_service_weight=days_to_service,
            )
        )

        # Milestone KPIs
        if animal.weaning_date is not None:
            days = age_in_days(animal.birth_date, animal.weaning_date)
            if WEANING_KPI_AGE_RANGE[0] <= days <= WEANING_KPI_AGE_RANGE[1]:
                weaning_days.append(days)

        service_events = [
            e for e in index.events_for(animal.id) if e.type == EventType.SERVICE_WEIGHT and e.date
        ]
        if service_events:
            days = age_in_days(animal.birth_date, service_events[0].date)
            if SERVICE_KPI_AGE_RANGE[0] <= days <= SERVICE_KPI_AGE_RANGE[1]:
                service_days.append(days)

        points = build_series(weighings, animal.birth_date, animal.birth_weight)
        for day in (90, 180, 270):
            weight = interpolate(points, day)
            if weight is not None and weight > 0:
                milestone_weights[day].append(weight)

        if gdp_g_day is not None:
            gdp_values.append(gdp_g_day)

    _apply_herd_deviation(analyzed)
    analyzed.sort(key=lambda a: a.target_deviation)

    total = len(analyzed)
    target_counts = defaultdict(int)
    for a in analyzed:
        target_counts[a.target_classification] += 1
    herd_counts = defaultdict(int)
    for a in analyzed:
        herd_counts[a.herd_classification] += 1

    weaning_age = config.weaning_age()
    latest_weaning_age = weaning_age + config.weaning_tolerance()
    min_weaning_weight = config.weaning_weight() - WEANING_WEIGHT_SLACK_KG
    weaning_candidates = sorted(
        (
            a
            for a in analyzed
            if not a.weaned
            and weaning_age <= a.age_days <= latest_weaning_age
            and a.current_weight >= min_weaning_weight
        ),
        key=lambda a: a.age_days,
        reverse=True,
    )

    return GrowthAnalytics(
        animals=analyzed,
        target_kpis=TargetKpis(
            total_animals=total,
            superior_pct=_pct(target_counts[TargetClassification.SUPERIOR], total),
            on_target_pct=_pct(target_counts[TargetClassification.ON_TARGET], total),
            below_target_pct=_pct(target_counts[TargetClassification.BELOW_TARGET], total),
            alert_pct=_pct(target_counts[TargetClassification.ALERT], total),
        ),
        herd_kpis=HerdKpis(
            total_animals=total,
            above_avg_pct=_pct(herd_counts[HerdClassification.SUPERIOR], total),
            below_avg_pct=_pct(herd_counts[HerdClassification.INFERIOR], total),
            avg_deviation=_mean([a.herd_deviation for a in analyzed]),
        ),
        milestone_kpis=MilestoneKpis(
            avg_days_to_weaning=_mean(weaning_days),
            avg_days_to_service=_mean(service_days),
            avg_weight_90d=_mean(milestone_weights[90]),
            avg_weight_180d=_mean(milestone_weights[180]),
            avg_weight_270d=_mean(milestone_weights[270]),
            avg_gdp_g_day=_mean(gdp_values),
        ),
        category_performance=_category_performance(analyzed),
        alert_list=[a for a in analyzed if a.target_classification is TargetClassification.ALERT],
        weaning_candidates=weaning_candidates,
        approaching_service=[a for a in analyzed if a.days_to_service_weight is not None],
    )


def _apply_herd_deviation(analyzed: list[GrowthAnalyzedAnimal]) -> None:
    """Fill cohort mean weight, herd deviation and percentile in place."""
    cohort_weights: dict[str, list[float]] = defaultdict(list)
    for a in analyzed:
        cohort_weights[a.cohort].append(a.current_weight)
    cohort_means = {cohort: _mean(weights) for cohort, weights in cohort_weights.items()}

    deviations = [a.target_deviation for a in analyzed]
    for a in analyzed:
        a.cohort_avg_weight = cohort_means[a.cohort]
        a.herd_deviation = target_deviation(a.current_weight, a.cohort_avg_weight)
        a.herd_classification = _herd_classification(a.herd_deviation)
        a.herd_percentile = percentile_rank(a.target_deviation, deviations)


def _category_performance(analyzed: list[GrowthAnalyzedAnimal]) -> list[CategoryPerformance]:
    grouped: dict[Category, list[GrowthAnalyzedAnimal]] = defaultdict(list)
    for a in analyzed:
        grouped[a.category].append(a)

    performance = [
        CategoryPerformance(
            category=category,
            animal_count=len(members),
            avg_target_deviation=_mean([m.target_deviation for m in members]),
            avg_herd_deviation=_mean([m.herd_deviation for m in members]),
            alert_count=sum(1 for m in members if m.target_classification is TargetClassification.ALERT),
        )
        for category, members in grouped.items()
    ]
    performance.sort(key=lambda p: p.avg_target_deviation)
    return performance
