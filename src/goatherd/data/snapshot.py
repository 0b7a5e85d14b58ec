"""Herd snapshot loading and per-snapshot lookup tables.

A snapshot is the set of collections exported by the sync layer at one
point in time. The analytics never mutate it; they build derived views
from it on every call.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from weakref import WeakKeyDictionary

from goatherd.core.config import get_snapshot_path
from goatherd.data.herd_config import AppConfig
from goatherd.data.records import Animal, Event, Parturition, Weighing

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================


class SnapshotError(Exception):
    """Raised when a herd snapshot file cannot be read."""

    pass


# =============================================================================
# Snapshot
# =============================================================================


@dataclass(frozen=True, eq=False)
class HerdSnapshot:
    """Immutable view of the herd collections.

    Compared by identity: two loads of the same file are two snapshots.
    """

    animals: tuple[Animal, ...] = ()
    parturitions: tuple[Parturition, ...] = ()
    body_weighings: tuple[Weighing, ...] = ()
    milk_weighings: tuple[Weighing, ...] = ()
    events: tuple[Event, ...] = ()
    config: AppConfig = field(default_factory=AppConfig)

    @classmethod
    def from_dict(cls, data: dict) -> HerdSnapshot:
        """Build from the exported JSON structure (legacy collection names)."""
        return cls(
            animals=_parse_records(data.get("animals"), Animal, "animal"),
            parturitions=_parse_records(data.get("parturitions"), Parturition, "parturition"),
            body_weighings=_parse_records(data.get("bodyWeighings"), Weighing, "body weighing"),
            milk_weighings=_parse_records(data.get("weighings"), Weighing, "milk weighing"),
            events=_parse_records(data.get("events"), Event, "event"),
            config=AppConfig.from_dict(data.get("appConfig")),
        )


def _parse_records(raw: list | None, record_type, label: str) -> tuple:
    """Parse a collection, skipping records that lack required fields."""
    records = []
    skipped = 0
    for item in raw or []:
        try:
            records.append(record_type.from_dict(item))
        except (KeyError, TypeError, ValueError) as e:
            skipped += 1
            logger.debug("Skipping %s record %r: %s", label, item, e)
    if skipped:
        logger.debug("Skipped %d of %d %s records", skipped, len(raw), label)
    return tuple(records)


def load_snapshot(path: Path | None = None) -> HerdSnapshot:
    """Load a herd snapshot JSON file.

    Args:
        path: Snapshot file (default: configured snapshot path)

    Raises:
        SnapshotError: If the file is missing, is not JSON, or has no
            animals collection
    """
    if path is None:
        path = get_snapshot_path()

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise SnapshotError(f"Snapshot file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Snapshot file is not valid JSON: {path} ({e})") from e

    if not isinstance(data, dict) or not isinstance(data.get("animals"), list):
        raise SnapshotError(f"Snapshot file has no 'animals' collection: {path}")

    snapshot = HerdSnapshot.from_dict(data)
    logger.debug(
        "Loaded snapshot %s: %d animals, %d parturitions, %d body / %d milk weighings",
        path,
        len(snapshot.animals),
        len(snapshot.parturitions),
        len(snapshot.body_weighings),
        len(snapshot.milk_weighings),
    )
    return snapshot


# =============================================================================
# Lookup tables
# =============================================================================


def group_children(animals) -> tuple[dict[str, list[str]], dict[str, list[str]]]:
    """Group child ids by mother id and by father id."""
    by_mother: dict[str, list[str]] = defaultdict(list)
    by_father: dict[str, list[str]] = defaultdict(list)
    for animal in animals:
        if animal.mother_id:
            by_mother[animal.mother_id].append(animal.id)
        if animal.father_id:
            by_father[animal.father_id].append(animal.id)
    return dict(by_mother), dict(by_father)


def _group_by(records, key, sort_key=None) -> dict[str, list]:
    grouped: dict[str, list] = defaultdict(list)
    for record in records:
        grouped[key(record)].append(record)
    if sort_key is not None:
        for items in grouped.values():
            items.sort(key=sort_key)
    return dict(grouped)


def _dated(record) -> tuple:
    # Undated records sort first; consumers skip them
    when = getattr(record, "date", None) or getattr(record, "parturition_date", None)
    return (when is not None, when or 0)


_INDEX_CACHE: WeakKeyDictionary[HerdSnapshot, HerdIndex] = WeakKeyDictionary()


@dataclass(frozen=True)
class HerdIndex:
    """Lookup tables derived from one snapshot.

    Lists are sorted ascending by date. Treat them as read-only; use
    for_snapshot to share one index across calls on the same snapshot.
    """

    animals_by_id: dict[str, Animal]
    children_by_mother: dict[str, list[str]]
    children_by_father: dict[str, list[str]]
    parturitions_by_dam: dict[str, list[Parturition]]
    body_weighings_by_animal: dict[str, list[Weighing]]
    milk_weighings_by_animal: dict[str, list[Weighing]]
    events_by_animal: dict[str, list[Event]]

    @classmethod
    def build(cls, snapshot: HerdSnapshot) -> HerdIndex:
        by_mother, by_father = group_children(snapshot.animals)
        return cls(
            animals_by_id={a.id: a for a in snapshot.animals},
            children_by_mother=by_mother,
            children_by_father=by_father,
            parturitions_by_dam=_group_by(snapshot.parturitions, lambda p: p.goat_id, _dated),
            body_weighings_by_animal=_group_by(snapshot.body_weighings, lambda w: w.animal_id, _dated),
            milk_weighings_by_animal=_group_by(snapshot.milk_weighings, lambda w: w.animal_id, _dated),
            events_by_animal=_group_by(snapshot.events, lambda e: e.animal_id, _dated),
        )

    @classmethod
    def for_snapshot(cls, snapshot: HerdSnapshot) -> HerdIndex:
        """Return the cached index for this snapshot object, building it once."""
        index = _INDEX_CACHE.get(snapshot)
        if index is None:
            index = cls.build(snapshot)
            _INDEX_CACHE[snapshot] = index
        return index

    def parturitions_for(self, animal_id: str) -> list[Parturition]:
        return self.parturitions_by_dam.get(animal_id, [])

    def body_weighings_for(self, animal_id: str) -> list[Weighing]:
        return self.body_weighings_by_animal.get(animal_id, [])

    def milk_weighings_for(self, animal_id: str) -> list[Weighing]:
        return self.milk_weighings_by_animal.get(animal_id, [])

    def events_for(self, animal_id: str) -> list[Event]:
        return self.events_by_animal.get(animal_id, [])
