"""Growth milestones and readiness flags.

Each growing animal is checked against five milestones:

- weaning, 90 d, 180 d, 270 d: the weight read from the series at the
  target age, banded against the target weight
- first service: timing-based. The age at the "Service-Weight" event (or
  at the first weighing that reached the service weight) is compared to
  the target service age.

Readiness flags drive the management alerts (wean now, move to service).
They stay off for animals whose digitised history starts mid-life.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum

from goatherd.core.dates import AGE_UNKNOWN, age_in_days, today_utc
from goatherd.data.herd_config import AppConfig
from goatherd.data.records import (
    Animal,
    Event,
    EventType,
    ReproductiveStatus,
    Sex,
    Weighing,
)
from goatherd.growth.series import build_series, interpolate, latest_weighing

logger = logging.getLogger(__name__)

# A first weighing heavier than this is a backfilled adult record (kg)
BACKFILL_FIRST_WEIGHT_KG = 14.0

# Minimum weight to flag an animal as ready for weaning (kg)
WEANING_MIN_WEIGHT_KG = 9.5

# Minimum age to flag a female as ready for service (days)
SERVICE_READY_MIN_AGE_DAYS = 300

# A milestone without data stays pending this long past its target age (days)
MILESTONE_PENDING_GRACE_DAYS = 30

# Service timing: up to this many days late is "close"
SERVICE_CLOSE_DAYS = 30

# A service milestone without data stays pending this long (days)
SERVICE_PENDING_GRACE_DAYS = 60

# Reproductive states in which a female can still be moved to service
SERVICE_NEUTRAL_STATUSES = {
    ReproductiveStatus.UNKNOWN,
    ReproductiveStatus.EMPTY,
    ReproductiveStatus.NOT_APPLICABLE,
}

SERVICE_EVENT_TYPES = {EventType.SERVICE_WEIGHT, EventType.SERVICE}


class MilestoneStatus(Enum):
    MET = "met"
    CLOSE = "close"
    MISSED = "missed"
    PENDING = "pending"


@dataclass
class Milestones:
    weaning: MilestoneStatus
    d90: MilestoneStatus
    d180: MilestoneStatus
    d270: MilestoneStatus
    service: MilestoneStatus


@dataclass
class GrowthStatus:
    is_ready_for_weaning: bool
    is_ready_for_service: bool
    current_weight: float | None
    current_weight_date: date | None
    milestone_status: Milestones


def band_milestone(
    weight: float | None,
    target_weight: float,
    target_day: int,
    age_in_days: int,
    config: AppConfig,
) -> MilestoneStatus:
    """Band a weight read at a milestone age against its target.

    Args:
        weight: Weight at the milestone age, None when not covered
        target_weight: Target weight for the milestone (kg)
        target_day: Milestone age (days)
        age_in_days: Animal's current age (days, -1 if unknown)
        config: Herd configuration (tolerance bands)
    """
    if weight is None:
        if age_in_days > target_day + MILESTONE_PENDING_GRACE_DAYS:
            return MilestoneStatus.MISSED
        return MilestoneStatus.PENDING

    if weight >= target_weight * (1 - config.milestone_met_tolerance):
        return MilestoneStatus.MET
    if weight >= target_weight * (1 - config.milestone_close_tolerance):
        return MilestoneStatus.CLOSE
    return MilestoneStatus.MISSED


def evaluate_service_timing(age_at_event: int, target_age: int) -> MilestoneStatus:
    """On or before the target age is met, up to 30 days late is close."""
    days_late = age_at_event - target_age
    if days_late <= 0:
        return MilestoneStatus.MET
    if days_late <= SERVICE_CLOSE_DAYS:
        return MilestoneStatus.CLOSE
    return MilestoneStatus.MISSED


def _first_event(events: Sequence[Event], animal_id: str, types: set[str]) -> Event | None:
    matching = [e for e in events if e.animal_id == animal_id and e.type in types and e.date]
    if not matching:
        return None
    return min(matching, key=lambda e: e.date)


def _service_milestone(
    animal: Animal,
    weighings: Sequence[Weighing],
    config: AppConfig,
    events: Sequence[Event],
    age: int,
) -> MilestoneStatus:
    target_age = config.first_service_age_days()

    event = _first_event(events, animal.id, {EventType.SERVICE_WEIGHT})
    if event is not None:
        age_at_event = age_in_days(animal.birth_date, event.date)
        if age_at_event != AGE_UNKNOWN:
            return evaluate_service_timing(age_at_event, target_age)

    target_weight = config.first_service_weight()
    for w in sorted((w for w in weighings if w.date is not None), key=lambda w: w.date):
        if w.kg >= target_weight:
            age_at_weighing = age_in_days(animal.birth_date, w.date)
            if age_at_weighing != AGE_UNKNOWN:
                return evaluate_service_timing(age_at_weighing, target_age)
            break

    if age > target_age + SERVICE_PENDING_GRACE_DAYS:
        return MilestoneStatus.MISSED
    return MilestoneStatus.PENDING


def _series_weighings(animal: Animal, weighings: Sequence[Weighing]) -> list[Weighing]:
    """Body weighings plus the weaning record when it has no weighing of its own."""
    series = list(weighings)
    if animal.weaning_date and animal.weaning_weight:
        if not any(w.date == animal.weaning_date for w in series):
            series.append(Weighing(animal.id, animal.weaning_date, animal.weaning_weight))
    return series


def growth_status(
    animal: Animal,
    weighings: Sequence[Weighing],
    config: AppConfig,
    events: Sequence[Event] = (),
    reference_date: date | None = None,
) -> GrowthStatus:
    """Milestones and readiness flags for one animal.

    Args:
        animal: The animal
        weighings: Its body weighings (other animals' are ignored)
        config: Herd configuration
        events: Event log entries (Weaning, Service-Weight)
        reference_date: Date to evaluate at (default today, UTC)
    """
    if reference_date is None:
        reference_date = today_utc()

    own = [w for w in weighings if w.animal_id == animal.id]
    age = age_in_days(animal.birth_date, reference_date)

    last = latest_weighing(own)
    if last is not None:
        current_weight, current_weight_date = last.kg, last.date
    else:
        current_weight, current_weight_date = animal.birth_weight, animal.birth_date

    points = build_series(_series_weighings(animal, own), animal.birth_date, animal.birth_weight)

    def milestone(day: int, target_weight: float) -> MilestoneStatus:
        return band_milestone(interpolate(points, day), target_weight, day, age, config)

    weaning_age = config.weaning_age()
    milestones = Milestones(
        weaning=milestone(weaning_age, config.weaning_weight(animal.sex)),
        d90=milestone(90, config.milestone_weight(90, animal.sex)),
        d180=milestone(180, config.milestone_weight(180, animal.sex)),
        d270=milestone(270, config.milestone_weight(270, animal.sex)),
        service=_service_milestone(animal, own, config, events, age),
    )

    dated = sorted((w for w in own if w.date is not None), key=lambda w: w.date)
    looks_backfilled = bool(dated) and dated[0].kg > BACKFILL_FIRST_WEIGHT_KG
    is_ready_for_weaning = (
        animal.weaning_date is None
        and animal.is_active
        and not looks_backfilled
        and age >= weaning_age
        and (current_weight or 0) >= WEANING_MIN_WEIGHT_KG
    )

    has_service_event = _first_event(events, animal.id, SERVICE_EVENT_TYPES) is not None
    is_ready_for_service = (
        animal.sex is Sex.FEMALE
        and not has_service_event
        and animal.reproductive_status in SERVICE_NEUTRAL_STATUSES
        and age >= SERVICE_READY_MIN_AGE_DAYS
        and (current_weight or 0) >= config.first_service_weight()
    )

    return GrowthStatus(
        is_ready_for_weaning=is_ready_for_weaning,
        is_ready_for_service=is_ready_for_service,
        current_weight=current_weight,
        current_weight_date=current_weight_date,
        milestone_status=milestones,
    )
