"""Lactation cycles rebuilt from parturitions and milk weighings.

Each parturition opens a cycle that runs until the next parturition:

    cycle i = [parturition i, parturition i+1)

The last cycle is open. It runs through reference_date when one is given,
and has no upper bound otherwise. Milk weighings dated before the first
parturition belong to no cycle.

Within a cycle every weighing gets its DEL (days elapsed in lactation)
and the cycle summary is derived from the resulting curve.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import NamedTuple

from goatherd.core.dates import days_between, days_in_milk, today_utc
from goatherd.data.herd_config import AppConfig
from goatherd.data.records import (
    Animal,
    LactationStatus,
    Parturition,
    ReproductiveStatus,
    Sex,
    Weighing,
)

logger = logging.getLogger(__name__)

# Drying window opens this many days before the lactation target
DRYING_WINDOW_DAYS = 30

# Consecutive strictly declining milk weighings that flag a pregnant doe
DECLINING_WEIGHINGS = 4


class CurvePoint(NamedTuple):
    del_: int
    kg: float


class ParturitionInterval(NamedTuple):
    period: str  # "2022 - 2023"
    days: int


@dataclass
class LactationCycle:
    parturition_date: date
    status: LactationStatus
    weighings: list[Weighing] = field(default_factory=list)
    curve: list[CurvePoint] = field(default_factory=list)
    average_production: float = 0.0
    peak_production: CurvePoint = CurvePoint(0, 0.0)
    total_days: int = 0
    drying_start_date: date | None = None

    @property
    def total_production(self) -> float:
        return sum(w.kg for w in self.weighings)


def _dated_births(births: Iterable[Parturition]) -> list[Parturition]:
    return sorted((p for p in births if p.parturition_date is not None), key=lambda p: p.parturition_date)


def _summarize(parturition: Parturition, weighings: list[Weighing]) -> LactationCycle:
    start = parturition.parturition_date
    curve = sorted(
        (CurvePoint(days_between(w.date, start), w.kg) for w in weighings),
        key=lambda p: p.del_,
    )

    average = sum(w.kg for w in weighings) / len(weighings) if weighings else 0.0

    peak = CurvePoint(0, 0.0)
    for point in curve:
        if point.kg > peak.kg:
            peak = point

    return LactationCycle(
        parturition_date=start,
        status=parturition.status,
        weighings=weighings,
        curve=curve,
        average_production=average,
        peak_production=peak,
        total_days=curve[-1].del_ if curve else 0,
        drying_start_date=parturition.drying_start_date,
    )


def build_lactation_cycles(
    births: Iterable[Parturition],
    weighings: Iterable[Weighing],
    reference_date: date | None = None,
) -> list[LactationCycle]:
    """Partition one doe's milk weighings into lactation cycles.

    Args:
        births: The doe's parturitions (any order; undated ones are ignored)
        weighings: The doe's milk weighings
        reference_date: Closing date of the open cycle (inclusive).
            None leaves the open cycle unbounded.

    Returns:
        One LactationCycle per dated parturition, oldest first
    """
    ordered = _dated_births(births)
    if not ordered:
        return []

    dated = sorted((w for w in weighings if w.date is not None), key=lambda w: w.date)

    cycles = []
    for i, parturition in enumerate(ordered):
        start = parturition.parturition_date
        if i + 1 < len(ordered):
            end = ordered[i + 1].parturition_date
        elif reference_date is not None:
            end = reference_date + timedelta(days=1)
        else:
            end = None

        in_window = [w for w in dated if w.date >= start and (end is None or w.date < end)]
        cycles.append(_summarize(parturition, in_window))

    unassigned = sum(1 for w in dated if w.date < ordered[0].parturition_date)
    if unassigned:
        logger.debug("%d milk weighings predate the first parturition", unassigned)

    return cycles


def parturition_intervals(births: Iterable[Parturition]) -> list[ParturitionInterval]:
    """Days between consecutive parturitions (one fewer than births)."""
    ordered = _dated_births(births)
    intervals = []
    for previous, current in zip(ordered, ordered[1:]):
        intervals.append(
            ParturitionInterval(
                period=f"{previous.parturition_date.year} - {current.parturition_date.year}",
                days=days_between(previous.parturition_date, current.parturition_date),
            )
        )
    return intervals


def active_lactation_for(on_date: date, parturitions: Iterable[Parturition]) -> Parturition | None:
    """Latest non-finalized parturition on or before on_date."""
    candidates = [
        p
        for p in _dated_births(parturitions)
        if p.parturition_date <= on_date and p.status is not LactationStatus.FINALIZED
    ]
    return candidates[-1] if candidates else None


def current_days_in_milk(
    cycle: LactationCycle,
    reference_date: date | None = None,
    last_weighing_date: date | None = None,
) -> int | None:
    """DEL to display for a cycle.

    Active cycles count to reference_date. A cycle being dried off stops
    at its last weighing. Dry and finalized cycles have none.
    """
    if cycle.status in (LactationStatus.DRY, LactationStatus.FINALIZED):
        return None
    if cycle.status is LactationStatus.ACTIVE or last_weighing_date is None:
        return days_in_milk(cycle.parturition_date, reference_date or today_utc())
    return days_in_milk(cycle.parturition_date, last_weighing_date)


def rest_interval_days(births: Sequence[Parturition]) -> list[int]:
    """Dry period lengths: dryingStartDate of one cycle to the next parturition."""
    ordered = _dated_births(births)
    rests = []
    for previous, current in zip(ordered, ordered[1:]):
        if previous.drying_start_date is None:
            continue
        days = (current.parturition_date - previous.drying_start_date).days
        if days >= 0:
            rests.append(days)
    return rests


# =============================================================================
# Reproductive indicators
# =============================================================================


@dataclass
class AnimalIndicators:
    """Reproductive record of one doe. Day values are None when not computable."""

    parturition_count: int | None = None
    age_at_first_kidding_days: int | None = None
    mean_parturition_interval_days: float | None = None
    mean_lactation_length_days: float | None = None
    mean_dry_period_days: float | None = None


def _mean(values: Sequence[float]) -> float | None:
    return sum(values) / len(values) if values else None


def animal_indicators(animal: Animal, parturitions: Iterable[Parturition]) -> AnimalIndicators:
    """Parturition count, age at first kidding and mean cycle lengths.

    Only females have indicators. The mean lactation length covers the
    finalized cycles with a drying start date. The mean dry period runs
    from a drying start date to the next parturition.
    """
    if animal.sex is not Sex.FEMALE:
        return AnimalIndicators()

    births = _dated_births(p for p in parturitions if p.goat_id == animal.id)

    age_at_first = None
    if births and animal.birth_date is not None:
        age_at_first = days_between(animal.birth_date, births[0].parturition_date)

    lactation_lengths = [
        days_between(p.parturition_date, p.drying_start_date)
        for p in births
        if p.status is LactationStatus.FINALIZED and p.drying_start_date is not None
    ]

    return AnimalIndicators(
        parturition_count=len(births),
        age_at_first_kidding_days=age_at_first,
        mean_parturition_interval_days=_mean([i.days for i in parturition_intervals(births)]),
        mean_lactation_length_days=_mean(lactation_lengths),
        mean_dry_period_days=_mean(rest_interval_days(births)),
    )


@dataclass
class DoeComposition:
    in_milk: int = 0
    dry: int = 0
    pregnant: int = 0
    empty: int = 0
    in_service: int = 0

    @property
    def total(self) -> int:
        return self.in_milk + self.dry


# Post-partum does that have not been served again count as empty
EMPTY_STATUSES = {ReproductiveStatus.EMPTY, ReproductiveStatus.POST_PARTUM}


def doe_composition(
    does: Iterable[Animal],
    parturitions: Iterable[Parturition],
    reference_date: date | None = None,
) -> DoeComposition:
    """Split the does by milk status and by reproductive status.

    A doe is in milk when she has an active lactation that started on or
    before reference_date. Every other doe is dry.
    """
    if reference_date is None:
        reference_date = today_utc()

    milking = {
        p.goat_id
        for p in _dated_births(parturitions)
        if p.status is LactationStatus.ACTIVE and p.parturition_date <= reference_date
    }

    composition = DoeComposition()
    for doe in does:
        if doe.id in milking:
            composition.in_milk += 1
        else:
            composition.dry += 1

        if doe.reproductive_status is ReproductiveStatus.PREGNANT:
            composition.pregnant += 1
        elif doe.reproductive_status in EMPTY_STATUSES:
            composition.empty += 1
        elif doe.reproductive_status is ReproductiveStatus.IN_SERVICE:
            composition.in_service += 1
    return composition


# =============================================================================
# Drying candidates
# =============================================================================


class DryingReason(Enum):
    LACTATION_TARGET = "lactation-target"  # DEL inside the drying window
    DECLINING_PREGNANT = "declining-pregnant"  # pregnant with falling yield
    ALREADY_DRYING = "already-drying"


@dataclass
class DryingCandidate:
    animal_id: str
    reasons: list[DryingReason]
    days_in_milk: int | None = None


def _strictly_declining(weighings: Sequence[Weighing], count: int) -> bool:
    recent = sorted((w for w in weighings if w.date is not None), key=lambda w: w.date)[-count:]
    if len(recent) < count:
        return False
    return all(later.kg < earlier.kg for earlier, later in zip(recent, recent[1:]))


def drying_candidates(
    animals: Iterable[Animal],
    parturitions: Iterable[Parturition],
    milk_weighings: Iterable[Weighing],
    config: AppConfig,
    reference_date: date | None = None,
) -> list[DryingCandidate]:
    """Does that should start (or are in) the drying-off process.

    A doe is a candidate when any of these holds:
    - an active lactation with DEL in [target - 30, target]
    - she is pregnant and her last four milk weighings strictly decline
    - a lactation is already being dried off
    """
    if reference_date is None:
        reference_date = today_utc()

    target = config.lactation_target()
    window_start = target - DRYING_WINDOW_DAYS

    found: dict[str, DryingCandidate] = {}

    def add(animal_id: str, reason: DryingReason, dim: int | None = None) -> None:
        candidate = found.setdefault(animal_id, DryingCandidate(animal_id, []))
        if reason not in candidate.reasons:
            candidate.reasons.append(reason)
        if dim is not None:
            candidate.days_in_milk = dim

    births = _dated_births(parturitions)
    for p in births:
        if p.status is LactationStatus.ACTIVE:
            dim = days_in_milk(p.parturition_date, reference_date)
            if window_start <= dim <= target:
                add(p.goat_id, DryingReason.LACTATION_TARGET, dim)

    weighings_by_goat: dict[str, list[Weighing]] = {}
    for w in milk_weighings:
        weighings_by_goat.setdefault(w.animal_id, []).append(w)

    for animal in animals:
        if animal.is_reference or animal.sex is not Sex.FEMALE:
            continue
        if animal.reproductive_status is not ReproductiveStatus.PREGNANT:
            continue
        if _strictly_declining(weighings_by_goat.get(animal.id, []), DECLINING_WEIGHINGS):
            add(animal.id, DryingReason.DECLINING_PREGNANT)

    for p in births:
        if p.status is LactationStatus.DRYING:
            add(p.goat_id, DryingReason.ALREADY_DRYING)

    return list(found.values())
