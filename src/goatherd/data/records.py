"""Herd records as read from the sync layer.

The store keeps loosely-typed records: camelCase keys, Spanish enum
values ("Hembra", "Activo", "en-secado", "Preñada") and free-text labels
such as lifecycleStage. This module is the ingestion boundary: every
record is mapped once into frozen dataclasses with closed enums, and the
analytics modules never look at raw strings again.

The one exception is lifecycle_stage, which is kept verbatim because the
classifier honors operator-edited labels. parse_lifecycle_label turns it
into a LifecycleLabel using the store's substring rules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from goatherd.core.dates import parse_date

logger = logging.getLogger(__name__)


# =============================================================================
# Enums
# =============================================================================


class Sex(Enum):
    FEMALE = "Female"
    MALE = "Male"


class AnimalStatus(Enum):
    ACTIVE = "Active"
    SOLD = "Sold"
    DEAD = "Dead"
    CULLED = "Culled"


class ParturitionOutcome(Enum):
    NORMAL = "Normal"
    WITH_STILLBIRTHS = "WithStillbirths"
    ABORTION = "Abortion"


class LactationStatus(Enum):
    """Lactation cycle status, advanced by the operator: active -> drying -> dry -> finalized."""

    ACTIVE = "active"
    DRYING = "drying"
    DRY = "dry"
    FINALIZED = "finalized"


class ReproductiveStatus(Enum):
    EMPTY = "Empty"
    IN_SERVICE = "In-Service"
    PREGNANT = "Pregnant"
    POST_PARTUM = "Post-Partum"
    NOT_APPLICABLE = "Not-Applicable"
    MILKING = "Milking"
    DRYING_OFF = "Drying-off"
    DRY = "Dried-off"
    UNKNOWN = "Unknown"


class LifecycleLabel(Enum):
    """Closed form of the free-text lifecycleStage label."""

    DOE = "Doe"
    DOELING = "Doeling"
    KID_FEMALE = "Kid-Female"
    KID_MALE = "Kid-Male"
    BUCKLING = "Buckling"
    BUCK = "Buck"
    UNDEFINED = "Undefined"


class EventType:
    """Event tags the analytics read. Other tags pass through untouched."""

    WEANING = "Weaning"
    SERVICE_WEIGHT = "Service-Weight"
    SERVICE = "Service"
    PARTURITION = "Parturition"
    ABORTION = "Abortion"


# =============================================================================
# Legacy value mapping
# =============================================================================

# Keys are lower-cased and stripped before lookup
SEX_VALUES = {
    "hembra": Sex.FEMALE,
    "female": Sex.FEMALE,
    "h": Sex.FEMALE,
    "f": Sex.FEMALE,
    "macho": Sex.MALE,
    "male": Sex.MALE,
    "m": Sex.MALE,
}

ANIMAL_STATUS_VALUES = {
    "activo": AnimalStatus.ACTIVE,
    "active": AnimalStatus.ACTIVE,
    "venta": AnimalStatus.SOLD,
    "sold": AnimalStatus.SOLD,
    "muerte": AnimalStatus.DEAD,
    "dead": AnimalStatus.DEAD,
    "descarte": AnimalStatus.CULLED,
    "culled": AnimalStatus.CULLED,
}

OUTCOME_VALUES = {
    "normal": ParturitionOutcome.NORMAL,
    "con mortinatos": ParturitionOutcome.WITH_STILLBIRTHS,
    "withstillbirths": ParturitionOutcome.WITH_STILLBIRTHS,
    "with-stillbirths": ParturitionOutcome.WITH_STILLBIRTHS,
    "aborto": ParturitionOutcome.ABORTION,
    "abortion": ParturitionOutcome.ABORTION,
}

LACTATION_STATUS_VALUES = {
    "activa": LactationStatus.ACTIVE,
    "active": LactationStatus.ACTIVE,
    "en-secado": LactationStatus.DRYING,
    "drying": LactationStatus.DRYING,
    "seca": LactationStatus.DRY,
    "dry": LactationStatus.DRY,
    "finalizada": LactationStatus.FINALIZED,
    "finalized": LactationStatus.FINALIZED,
}

REPRODUCTIVE_STATUS_VALUES = {
    "": ReproductiveStatus.UNKNOWN,
    "vacía": ReproductiveStatus.EMPTY,
    "vacia": ReproductiveStatus.EMPTY,
    "empty": ReproductiveStatus.EMPTY,
    "en servicio": ReproductiveStatus.IN_SERVICE,
    "in-service": ReproductiveStatus.IN_SERVICE,
    "preñada": ReproductiveStatus.PREGNANT,
    "prenada": ReproductiveStatus.PREGNANT,
    "pregnant": ReproductiveStatus.PREGNANT,
    "post-parto": ReproductiveStatus.POST_PARTUM,
    "post-partum": ReproductiveStatus.POST_PARTUM,
    "no aplica": ReproductiveStatus.NOT_APPLICABLE,
    "not-applicable": ReproductiveStatus.NOT_APPLICABLE,
    "en ordeño": ReproductiveStatus.MILKING,
    "en ordeno": ReproductiveStatus.MILKING,
    "lactando": ReproductiveStatus.MILKING,
    "milking": ReproductiveStatus.MILKING,
    "lactating": ReproductiveStatus.MILKING,
    "secando": ReproductiveStatus.DRYING_OFF,
    "en-secado": ReproductiveStatus.DRYING_OFF,
    "drying-off": ReproductiveStatus.DRYING_OFF,
    "seca": ReproductiveStatus.DRY,
    "dried-off": ReproductiveStatus.DRY,
    "dry": ReproductiveStatus.DRY,
}

EVENT_TYPE_VALUES = {
    "peso de monta": EventType.SERVICE_WEIGHT,
    "service-weight": EventType.SERVICE_WEIGHT,
    "destete": EventType.WEANING,
    "weaning": EventType.WEANING,
    "servicio": EventType.SERVICE,
    "service": EventType.SERVICE,
    "parto": EventType.PARTURITION,
    "parturition": EventType.PARTURITION,
    "aborto": EventType.ABORTION,
    "abortion": EventType.ABORTION,
}


def _lookup(values: dict, raw: object, default, field_name: str):
    """Map a raw store value through a legacy mapping table."""
    if raw is None:
        return default
    key = str(raw).strip().lower()
    if key in values:
        return values[key]
    logger.debug("Unknown %s value %r, using %s", field_name, raw, default)
    return default


def parse_sex(raw: object) -> Sex:
    return _lookup(SEX_VALUES, raw, Sex.FEMALE, "sex")


def parse_animal_status(raw: object) -> AnimalStatus:
    return _lookup(ANIMAL_STATUS_VALUES, raw, AnimalStatus.ACTIVE, "status")


def parse_outcome(raw: object) -> ParturitionOutcome | None:
    return _lookup(OUTCOME_VALUES, raw, None, "parturitionOutcome")


def parse_lactation_status(raw: object) -> LactationStatus:
    return _lookup(LACTATION_STATUS_VALUES, raw, LactationStatus.ACTIVE, "lactation status")


def parse_reproductive_status(raw: object) -> ReproductiveStatus:
    return _lookup(REPRODUCTIVE_STATUS_VALUES, raw, ReproductiveStatus.UNKNOWN, "reproductiveStatus")


def normalize_event_type(raw: object) -> str:
    """Map legacy event tags to EventType constants; unknown tags pass through."""
    if raw is None:
        return ""
    text = str(raw).strip()
    return EVENT_TYPE_VALUES.get(text.lower(), text)


def parse_lifecycle_label(label: str | None) -> LifecycleLabel:
    """Map a free-text lifecycleStage to a LifecycleLabel.

    Matching is case-sensitive substring matching, as the store does it.
    "Cabra" only means an adult doe when the label does not also contain
    "Cabrit" (Cabrita, Cabrito, Cabritona are juveniles); the same goes for
    "Doe" and "Doeling".
    """
    text = label or ""

    if "Cabrit" in text:
        if "Cabritona" in text:
            return LifecycleLabel.DOELING
        if "Cabrita" in text:
            return LifecycleLabel.KID_FEMALE
        return LifecycleLabel.KID_MALE
    if "Cabra" in text:
        return LifecycleLabel.DOE

    if "Doeling" in text:
        return LifecycleLabel.DOELING
    if "Doe" in text:
        return LifecycleLabel.DOE

    if "Macho de Levante" in text or "Buckling" in text:
        return LifecycleLabel.BUCKLING
    if "Macho Cabr" in text or "Reproductor" in text or "Buck" in text:
        return LifecycleLabel.BUCK

    if "Kid" in text:
        if "Female" in text:
            return LifecycleLabel.KID_FEMALE
        if "Male" in text:
            return LifecycleLabel.KID_MALE

    return LifecycleLabel.UNDEFINED


def _optional_float(raw: object) -> float | None:
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.debug("Unparseable number: %r", raw)
        return None


def _flag(raw: object) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        return raw.strip().lower() in ("true", "1")
    return False


def _optional_str(raw: object) -> str | None:
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class Animal:
    """An animal in the herd (or a pedigree stub when is_reference is set)."""

    id: str
    sex: Sex
    birth_date: date | None = None
    birth_weight: float | None = None
    lifecycle_stage: str = ""
    reproductive_status: ReproductiveStatus = ReproductiveStatus.UNKNOWN
    location: str = ""
    mother_id: str | None = None
    father_id: str | None = None
    weaning_date: date | None = None
    weaning_weight: float | None = None
    is_reference: bool = False
    status: AnimalStatus = AnimalStatus.ACTIVE
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Animal:
        """Create from a store record (camelCase keys, legacy values)."""
        return cls(
            id=str(data["id"]),
            sex=parse_sex(data.get("sex")),
            birth_date=parse_date(data.get("birthDate")),
            birth_weight=_optional_float(data.get("birthWeight")),
            lifecycle_stage=data.get("lifecycleStage") or "",
            reproductive_status=parse_reproductive_status(data.get("reproductiveStatus")),
            location=data.get("location") or "",
            mother_id=_optional_str(data.get("motherId")),
            father_id=_optional_str(data.get("fatherId")),
            weaning_date=parse_date(data.get("weaningDate")),
            weaning_weight=_optional_float(data.get("weaningWeight")),
            is_reference=_flag(data.get("isReference")),
            status=parse_animal_status(data.get("status")),
            name=data.get("name") or "",
        )

    @property
    def is_active(self) -> bool:
        return self.status is AnimalStatus.ACTIVE

    @property
    def lifecycle_label(self) -> LifecycleLabel:
        return parse_lifecycle_label(self.lifecycle_stage)


@dataclass(frozen=True)
class Parturition:
    """A kidding (or abortion) that opens a lactation cycle."""

    goat_id: str
    parturition_date: date | None
    outcome: ParturitionOutcome | None = ParturitionOutcome.NORMAL
    status: LactationStatus = LactationStatus.ACTIVE
    drying_start_date: date | None = None
    id: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Parturition:
        # Records created before the outcome field existed were all live births
        outcome = parse_outcome(data.get("parturitionOutcome"))
        if data.get("parturitionOutcome") is None:
            outcome = ParturitionOutcome.NORMAL
        return cls(
            goat_id=str(data["goatId"]),
            parturition_date=parse_date(data.get("parturitionDate")),
            outcome=outcome,
            status=parse_lactation_status(data.get("status")),
            drying_start_date=parse_date(data.get("dryingStartDate")),
            id=str(data.get("id") or ""),
        )


@dataclass(frozen=True)
class Weighing:
    """A body or milk weighing. Which one depends on the collection it came from."""

    animal_id: str
    date: date | None
    kg: float
    id: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Weighing:
        # Milk weighings use goatId, body weighings use animalId
        animal_id = data.get("animalId") or data.get("goatId")
        if animal_id is None:
            raise KeyError("animalId")
        kg = data.get("kg")
        if kg is None or kg == "":
            raise KeyError("kg")
        return cls(
            animal_id=str(animal_id),
            date=parse_date(data.get("date")),
            kg=float(kg),
            id=str(data.get("id") or ""),
        )


@dataclass(frozen=True)
class Event:
    """An entry in the animal's event log."""

    animal_id: str
    date: date | None
    type: str
    value: float | None = None
    id: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Event:
        return cls(
            animal_id=str(data["animalId"]),
            date=parse_date(data.get("date")),
            type=normalize_event_type(data.get("type")),
            value=_optional_float(data.get("value", data.get("kg"))),
            id=str(data.get("id") or ""),
        )
