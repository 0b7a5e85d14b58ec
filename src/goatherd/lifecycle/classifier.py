"""Zootechnic category classifier.

Infers an animal's life stage from evidence of varying strength. The
evidence is checked in a fixed order and the first match wins:

Females:
    1. Productive evidence (milking, drying off, dry, or kept in a
       milking area)                                          -> Doe
    2. Maternity (a parturition on record, or a herd member whose
       mother is this animal)                                 -> Doe
    3. Operator-edited adult label ("Cabra", not "Cabrit")    -> Doe
    4. Age >= 20 months                                       -> Doe
    5. Age >= 8 months                                        -> Doeling
    6. Weaned, or previously labelled Doeling                 -> Doeling
    7. Otherwise                                              -> Kid-Female

Males:
    1. Offspring (a herd member whose father is this animal)  -> Buck
    2. Age > 12 months                                        -> Buck
    3. Previously labelled Buck                               -> Buck
    4. Weaned, previously labelled Buckling, or age >= 8 months -> Buckling
    5. Otherwise                                              -> Kid-Male

Production and parentage outrank age, so a doe that kidded young stays a
Doe. An unknown birth date gives age -1, which matches no age rule.

The age cut-offs are fixed here rather than read from AppConfig.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum

from goatherd.core.dates import age_in_months, today_utc
from goatherd.data.herd_config import AppConfig
from goatherd.data.records import (
    Animal,
    Event,
    EventType,
    LactationStatus,
    LifecycleLabel,
    Parturition,
    ReproductiveStatus,
    Sex,
)
from goatherd.data.snapshot import HerdIndex, HerdSnapshot, group_children

logger = logging.getLogger(__name__)

# Age cut-offs (months)
DOE_MIN_AGE_MONTHS = 20
DOELING_MIN_AGE_MONTHS = 8
BUCK_MIN_AGE_MONTHS = 12  # strictly greater than
BUCKLING_MIN_AGE_MONTHS = 8

# Reproductive states that only an adult in production can be in
PRODUCTIVE_STATUSES = {
    ReproductiveStatus.MILKING,
    ReproductiveStatus.DRYING_OFF,
    ReproductiveStatus.DRY,
}

# Location names that mark the milking herd (matched case-insensitively)
MILKING_AREA_MARKERS = ("ordeño", "ordeno", "milking", "parlor")


class Category(Enum):
    DOE = "Doe"
    DOELING = "Doeling"
    KID_FEMALE = "Kid-Female"
    KID_MALE = "Kid-Male"
    BUCKLING = "Buckling"
    BUCK = "Buck"


# Categories tracked against the growth targets
GROWTH_CATEGORIES = frozenset(
    {Category.KID_FEMALE, Category.DOELING, Category.KID_MALE, Category.BUCKLING}
)


@dataclass(frozen=True)
class ProgenyIndex:
    """Parent id -> child ids, built once per herd snapshot."""

    by_mother: dict[str, list[str]]
    by_father: dict[str, list[str]]

    @classmethod
    def from_animals(cls, animals: Iterable[Animal]) -> ProgenyIndex:
        by_mother, by_father = group_children(animals)
        return cls(by_mother=by_mother, by_father=by_father)

    @classmethod
    def from_herd_index(cls, index: HerdIndex) -> ProgenyIndex:
        return cls(by_mother=index.children_by_mother, by_father=index.children_by_father)

    def has_children_as_mother(self, animal_id: str) -> bool:
        return bool(self.by_mother.get(animal_id))

    def has_children_as_father(self, animal_id: str) -> bool:
        return bool(self.by_father.get(animal_id))


EMPTY_PROGENY = ProgenyIndex(by_mother={}, by_father={})


def _as_progeny(herd: Sequence[Animal] | ProgenyIndex | None) -> ProgenyIndex:
    if herd is None:
        return EMPTY_PROGENY
    if isinstance(herd, ProgenyIndex):
        return herd
    return ProgenyIndex.from_animals(herd)


# =============================================================================
# Evidence
# =============================================================================


def has_productive_evidence(animal: Animal, parturitions: Iterable[Parturition] = ()) -> bool:
    """True when the animal is (or was just) in milk."""
    if animal.reproductive_status in PRODUCTIVE_STATUSES:
        return True

    for p in parturitions:
        if p.goat_id == animal.id and p.status is not LactationStatus.FINALIZED:
            return True

    location = animal.location.lower()
    return any(marker in location for marker in MILKING_AREA_MARKERS)


def has_maternity_evidence(
    animal: Animal, parturitions: Iterable[Parturition], progeny: ProgenyIndex
) -> bool:
    """True when the doe has kidded (any outcome) or has recorded offspring."""
    if any(p.goat_id == animal.id for p in parturitions):
        return True
    return progeny.has_children_as_mother(animal.id)


def has_weaning_evidence(animal: Animal, events: Iterable[Event] = ()) -> bool:
    if animal.weaning_date is not None:
        return True
    return any(e.animal_id == animal.id and e.type == EventType.WEANING for e in events)


# =============================================================================
# Classification
# =============================================================================


def classify(
    animal: Animal,
    parturitions: Sequence[Parturition],
    config: AppConfig,
    herd: Sequence[Animal] | ProgenyIndex | None = (),
    events: Sequence[Event] = (),
    reference_date: date | None = None,
) -> Category:
    """Classify one animal.

    Args:
        animal: The animal to classify
        parturitions: Parturitions on record (other animals' are ignored)
        config: Herd configuration (the cut-offs do not read it)
        herd: Herd members, or a prebuilt ProgenyIndex, for parentage evidence
        events: Event log entries, for weaning evidence
        reference_date: Date to compute age at (default today, UTC)

    Returns:
        The animal's Category. Every animal gets one.
    """
    if reference_date is None:
        reference_date = today_utc()

    progeny = _as_progeny(herd)
    age = age_in_months(animal.birth_date, reference_date)
    label = animal.lifecycle_label

    if animal.sex is Sex.FEMALE:
        return _classify_female(animal, parturitions, progeny, events, age, label)
    return _classify_male(animal, progeny, events, age, label)


def _classify_female(
    animal: Animal,
    parturitions: Sequence[Parturition],
    progeny: ProgenyIndex,
    events: Sequence[Event],
    age: int,
    label: LifecycleLabel,
) -> Category:
    if has_productive_evidence(animal, parturitions):
        return Category.DOE
    if has_maternity_evidence(animal, parturitions, progeny):
        return Category.DOE
    if label is LifecycleLabel.DOE:
        return Category.DOE
    if age >= DOE_MIN_AGE_MONTHS:
        return Category.DOE
    if age >= DOELING_MIN_AGE_MONTHS:
        return Category.DOELING
    if has_weaning_evidence(animal, events) or label is LifecycleLabel.DOELING:
        return Category.DOELING
    return Category.KID_FEMALE


def _classify_male(
    animal: Animal,
    progeny: ProgenyIndex,
    events: Sequence[Event],
    age: int,
    label: LifecycleLabel,
) -> Category:
    if progeny.has_children_as_father(animal.id):
        return Category.BUCK
    if age > BUCK_MIN_AGE_MONTHS:
        return Category.BUCK
    if label is LifecycleLabel.BUCK:
        return Category.BUCK
    if (
        has_weaning_evidence(animal, events)
        or label is LifecycleLabel.BUCKLING
        or age >= BUCKLING_MIN_AGE_MONTHS
    ):
        return Category.BUCKLING
    return Category.KID_MALE


def classify_herd(
    snapshot: HerdSnapshot,
    reference_date: date | None = None,
    include_reference: bool = False,
) -> dict[str, Category]:
    """Classify every animal in a snapshot, sharing one index.

    Pedigree stubs (is_reference) are skipped unless include_reference is set.
    """
    if reference_date is None:
        reference_date = today_utc()

    index = HerdIndex.for_snapshot(snapshot)
    progeny = ProgenyIndex.from_herd_index(index)

    result = {}
    for animal in snapshot.animals:
        if animal.is_reference and not include_reference:
            continue
        result[animal.id] = classify(
            animal,
            index.parturitions_for(animal.id),
            snapshot.config,
            herd=progeny,
            events=index.events_for(animal.id),
            reference_date=reference_date,
        )

    logger.debug("Classified %d animals", len(result))
    return result


def category_counts(categories: dict[str, Category]) -> dict[Category, int]:
    """Number of animals per category, every category present."""
    counts = {c: 0 for c in Category}
    for category in categories.values():
        counts[category] += 1
    return counts
