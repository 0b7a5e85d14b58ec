"""Comparison curves for lactations and growth.

A comparison curve averages a peer group's production per DEL (lactation)
or weight per age bucket (growth), so one animal can be plotted against
its cohort: first-lactation does, multiparous does, the whole herd, does
born in the same semester, its dam, its daughters, or one of its own
earlier lactations.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum

from goatherd.core.dates import days_in_milk
from goatherd.data.herd_config import AppConfig
from goatherd.data.records import Animal, Parturition, Sex, Weighing
from goatherd.growth.series import build_series, interpolate
from goatherd.growth.targets import target_weight_at_age
from goatherd.lactation.cycles import CurvePoint, build_lactation_cycles, rest_interval_days

logger = logging.getLogger(__name__)

GROWTH_CURVE_STEP_DAYS = 30
GROWTH_CURVE_MAX_AGE_DAYS = 450


class ComparisonType(Enum):
    PRIMIPAROUS_AVG = "primiparous"
    MULTIPAROUS_AVG = "multiparous"
    HERD_AVG = "herd"
    PEERS_AVG = "peers"
    DAM = "dam"
    PROGENY_AVG = "progeny"
    SPECIFIC_LACTATION = "lactation"


@dataclass
class ComparisonRequest:
    type: ComparisonType
    animal: Animal
    specific_lactation_index: int | None = None  # zero-based
    max_del: int | None = None  # cut the curve at this DEL


@dataclass
class ComparisonResult:
    name: str
    curve: list[CurvePoint]
    average_rest_interval: float | None = None


@dataclass
class CohortPoint:
    age_days: int
    average_weight: float | None
    target_weight: float
    count: int


def _by_goat(parturitions: Iterable[Parturition]) -> dict[str, list[Parturition]]:
    grouped: dict[str, list[Parturition]] = defaultdict(list)
    for p in parturitions:
        if p.parturition_date is not None:
            grouped[p.goat_id].append(p)
    for items in grouped.values():
        items.sort(key=lambda p: p.parturition_date)
    return grouped


def average_lactation_curve(
    weighings: Iterable[Weighing],
    parturitions: Iterable[Parturition],
    max_del: int | None = None,
) -> list[CurvePoint]:
    """Mean milk kg per DEL across a group of does.

    Each weighing is placed on the lactation of the latest parturition of
    the same doe on or before the weighing date; weighings with no such
    parturition are left out.
    """
    births = _by_goat(parturitions)
    totals: dict[int, list[float]] = defaultdict(lambda: [0.0, 0])

    for w in weighings:
        if w.date is None:
            continue
        earlier = [p for p in births.get(w.animal_id, []) if p.parturition_date <= w.date]
        if not earlier:
            continue
        dim = days_in_milk(earlier[-1].parturition_date, w.date)
        if max_del is not None and dim > max_del:
            continue
        totals[dim][0] += w.kg
        totals[dim][1] += 1

    return [CurvePoint(dim, kg / count) for dim, (kg, count) in sorted(totals.items())]


def average_rest_interval(animal_ids: Iterable[str], parturitions: Iterable[Parturition]) -> float | None:
    """Mean days from drying start to the next parturition, None without data."""
    births = _by_goat(parturitions)
    rests = []
    for animal_id in set(animal_ids):
        rests.extend(rest_interval_days(births.get(animal_id, [])))
    if not rests:
        return None
    return sum(rests) / len(rests)


def _group_curve(
    name: str,
    goat_ids: set[str],
    parturitions: Sequence[Parturition],
    milk_weighings: Sequence[Weighing],
    max_del: int | None,
) -> ComparisonResult:
    group_births = [p for p in parturitions if p.goat_id in goat_ids]
    group_weighings = [w for w in milk_weighings if w.animal_id in goat_ids]
    return ComparisonResult(
        name=name,
        curve=average_lactation_curve(group_weighings, group_births, max_del),
        average_rest_interval=average_rest_interval(goat_ids, parturitions),
    )


def _semester(d: date) -> int:
    return (d.month - 1) // 6


def compare(
    request: ComparisonRequest,
    animals: Sequence[Animal],
    parturitions: Sequence[Parturition],
    milk_weighings: Sequence[Weighing],
) -> ComparisonResult:
    """Build the comparison curve for a request.

    Args:
        request: What to compare the animal against
        animals: Herd animals (for peers, dam and daughters)
        parturitions: All parturitions in the herd
        milk_weighings: All milk weighings in the herd

    Returns:
        A ComparisonResult; its curve is empty when the cohort has no data
    """
    animal = request.animal
    kind = request.type
    max_del = request.max_del

    if kind in (ComparisonType.PRIMIPAROUS_AVG, ComparisonType.MULTIPAROUS_AVG, ComparisonType.HERD_AVG):
        counts: dict[str, int] = defaultdict(int)
        for p in parturitions:
            counts[p.goat_id] += 1
        if kind is ComparisonType.PRIMIPAROUS_AVG:
            goat_ids = {g for g, n in counts.items() if n == 1}
            name = "Primiparous avg"
        elif kind is ComparisonType.MULTIPAROUS_AVG:
            goat_ids = {g for g, n in counts.items() if n > 1}
            name = "Multiparous avg"
        else:
            goat_ids = set(counts)
            name = "Herd avg"
        return _group_curve(name, goat_ids, parturitions, milk_weighings, max_del)

    if kind is ComparisonType.PEERS_AVG:
        born = animal.birth_date
        if born is None:
            return ComparisonResult(name="Peers (unknown birth date)", curve=[])
        peers = {
            a.id
            for a in animals
            if a.id != animal.id
            and a.birth_date is not None
            and a.birth_date.year == born.year
            and _semester(a.birth_date) == _semester(born)
        }
        peers &= {p.goat_id for p in parturitions}
        name = f"Peers avg ({born.year}-S{_semester(born) + 1})"
        return _group_curve(name, peers, parturitions, milk_weighings, max_del)

    if kind is ComparisonType.DAM:
        if not animal.mother_id:
            return ComparisonResult(name="Dam (unknown)", curve=[])
        return _group_curve(f"Dam avg ({animal.mother_id})", {animal.mother_id}, parturitions, milk_weighings, max_del)

    if kind is ComparisonType.PROGENY_AVG:
        daughters = {a.id for a in animals if a.mother_id == animal.id and a.sex is Sex.FEMALE}
        return _group_curve("Daughters avg", daughters, parturitions, milk_weighings, max_del)

    return _specific_lactation(request, parturitions, milk_weighings)


def _specific_lactation(
    request: ComparisonRequest,
    parturitions: Sequence[Parturition],
    milk_weighings: Sequence[Weighing],
) -> ComparisonResult:
    animal = request.animal
    index = request.specific_lactation_index
    own_births = [p for p in parturitions if p.goat_id == animal.id]
    own_weighings = [w for w in milk_weighings if w.animal_id == animal.id]
    cycles = build_lactation_cycles(own_births, own_weighings)

    if index is None or not 0 <= index < len(cycles):
        return ComparisonResult(name="Lactation (not found)", curve=[])

    cycle = cycles[index]
    curve = [p for p in cycle.curve if request.max_del is None or p.del_ <= request.max_del]

    rest = None
    if index > 0:
        previous = cycles[index - 1]
        if previous.drying_start_date is not None:
            rest = float((cycle.parturition_date - previous.drying_start_date).days)

    return ComparisonResult(name=f"Lactation {index + 1}", curve=curve, average_rest_interval=rest)


def growth_cohort_curve(
    animals: Iterable[Animal],
    body_weighings: Iterable[Weighing],
    config: AppConfig,
    sex: Sex = Sex.FEMALE,
    step: int = GROWTH_CURVE_STEP_DAYS,
    max_age: int = GROWTH_CURVE_MAX_AGE_DAYS,
) -> list[CohortPoint]:
    """Mean interpolated weight of a group per age bucket, with the target."""
    by_animal: dict[str, list[Weighing]] = defaultdict(list)
    for w in body_weighings:
        by_animal[w.animal_id].append(w)

    series = []
    for animal in animals:
        points = build_series(by_animal.get(animal.id, []), animal.birth_date, animal.birth_weight)
        if points:
            series.append(points)

    curve = []
    for age in range(0, max_age + 1, step):
        weights = [w for w in (interpolate(points, age) for points in series) if w is not None]
        curve.append(
            CohortPoint(
                age_days=age,
                average_weight=round(sum(weights) / len(weights), 2) if weights else None,
                target_weight=round(target_weight_at_age(age, sex, config), 2),
                count=len(weights),
            )
        )
    return curve
