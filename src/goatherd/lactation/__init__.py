"""Lactation module - cycle reconstruction, doe indicators and drying-off candidates."""

from goatherd.lactation.cycles import (
    AnimalIndicators,
    CurvePoint,
    DryingCandidate,
    DoeComposition,
    DryingReason,
    LactationCycle,
    ParturitionInterval,
    active_lactation_for,
    animal_indicators,
    build_lactation_cycles,
    current_days_in_milk,
    doe_composition,
    drying_candidates,
    parturition_intervals,
    rest_interval_days,
)

__all__ = [
    "AnimalIndicators",
    "CurvePoint",
    "LactationCycle",
    "ParturitionInterval",
    "DryingReason",
    "DryingCandidate",
    "DoeComposition",
    "build_lactation_cycles",
    "parturition_intervals",
    "active_lactation_for",
    "current_days_in_milk",
    "rest_interval_days",
    "drying_candidates",
    "animal_indicators",
    "doe_composition",
]
