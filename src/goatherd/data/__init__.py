"""Data module - herd records, herd configuration and snapshot loading."""

from goatherd.data.herd_config import AppConfig
from goatherd.data.records import (
    Animal,
    AnimalStatus,
    Event,
    EventType,
    LactationStatus,
    LifecycleLabel,
    Parturition,
    ParturitionOutcome,
    ReproductiveStatus,
    Sex,
    Weighing,
    parse_lifecycle_label,
)
from goatherd.data.snapshot import HerdIndex, HerdSnapshot, SnapshotError, load_snapshot

__all__ = [
    # Records
    "Animal",
    "Parturition",
    "Weighing",
    "Event",
    "EventType",
    "Sex",
    "AnimalStatus",
    "ParturitionOutcome",
    "LactationStatus",
    "ReproductiveStatus",
    "LifecycleLabel",
    "parse_lifecycle_label",
    # Configuration
    "AppConfig",
    # Snapshot
    "HerdSnapshot",
    "HerdIndex",
    "SnapshotError",
    "load_snapshot",
]
