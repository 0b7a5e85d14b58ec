"""Tests for herd records and legacy value mapping."""

from datetime import date

import pytest

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
    normalize_event_type,
    parse_lifecycle_label,
)


class TestParseLifecycleLabel:
    """Tests for lifecycleStage substring rules."""

    def test_adult_doe(self):
        assert parse_lifecycle_label("Cabra") == LifecycleLabel.DOE
        assert parse_lifecycle_label("Cabra Lechera") == LifecycleLabel.DOE
        assert parse_lifecycle_label("Doe") == LifecycleLabel.DOE

    def test_cabrit_is_never_adult(self):
        """Anything containing "Cabrit" is a juvenile even though it contains "Cabr"."""
        assert parse_lifecycle_label("Cabritona") == LifecycleLabel.DOELING
        assert parse_lifecycle_label("Cabrita") == LifecycleLabel.KID_FEMALE
        assert parse_lifecycle_label("Cabrito") == LifecycleLabel.KID_MALE

    def test_doeling_is_not_doe(self):
        assert parse_lifecycle_label("Doeling") == LifecycleLabel.DOELING

    def test_males(self):
        assert parse_lifecycle_label("Macho Cabrío") == LifecycleLabel.BUCK
        assert parse_lifecycle_label("Reproductor") == LifecycleLabel.BUCK
        assert parse_lifecycle_label("Buck") == LifecycleLabel.BUCK
        assert parse_lifecycle_label("Macho de Levante") == LifecycleLabel.BUCKLING
        assert parse_lifecycle_label("Buckling") == LifecycleLabel.BUCKLING

    def test_english_kid_labels(self):
        assert parse_lifecycle_label("Kid-Female") == LifecycleLabel.KID_FEMALE
        assert parse_lifecycle_label("Kid-Male") == LifecycleLabel.KID_MALE

    def test_case_sensitive(self):
        assert parse_lifecycle_label("cabra") == LifecycleLabel.UNDEFINED

    def test_empty(self):
        assert parse_lifecycle_label(None) == LifecycleLabel.UNDEFINED
        assert parse_lifecycle_label("") == LifecycleLabel.UNDEFINED


class TestAnimalFromDict:
    """Tests for Animal ingestion."""

    def test_legacy_values(self):
        animal = Animal.from_dict(
            {
                "id": "A-01",
                "sex": "Hembra",
                "birthDate": "2023-05-04",
                "birthWeight": "3.2",
                "lifecycleStage": "Cabritona",
                "reproductiveStatus": "Preñada",
                "location": "Lote 3",
                "motherId": "M-9",
                "fatherId": "",
                "status": "Descarte",
            }
        )
        assert animal.sex is Sex.FEMALE
        assert animal.birth_date == date(2023, 5, 4)
        assert animal.birth_weight == 3.2
        assert animal.reproductive_status is ReproductiveStatus.PREGNANT
        assert animal.mother_id == "M-9"
        assert animal.father_id is None
        assert animal.status is AnimalStatus.CULLED
        assert animal.lifecycle_label is LifecycleLabel.DOELING
        assert not animal.is_active

    def test_unknown_birth_date_and_defaults(self):
        animal = Animal.from_dict({"id": "R1", "sex": "Macho", "birthDate": "N/A", "isReference": True})
        assert animal.sex is Sex.MALE
        assert animal.birth_date is None
        assert animal.is_reference
        assert animal.status is AnimalStatus.ACTIVE
        assert animal.reproductive_status is ReproductiveStatus.UNKNOWN

    @pytest.mark.parametrize(
        "raw,expected",
        [(True, True), ("true", True), ("TRUE", True), ("1", True), ("false", False), ("0", False), (False, False), (None, False)],
    )
    def test_reference_flag(self, raw, expected):
        animal = Animal.from_dict({"id": "R1", "isReference": raw})
        assert animal.is_reference is expected

    def test_english_values(self):
        animal = Animal.from_dict({"id": "X", "sex": "Female", "reproductiveStatus": "Dried-off", "status": "Sold"})
        assert animal.reproductive_status is ReproductiveStatus.DRY
        assert animal.status is AnimalStatus.SOLD

    def test_missing_id_raises(self):
        with pytest.raises(KeyError):
            Animal.from_dict({"sex": "Hembra"})


class TestParturitionFromDict:
    """Tests for Parturition ingestion."""

    def test_legacy_values(self):
        p = Parturition.from_dict(
            {
                "goatId": "D1",
                "parturitionDate": "2023-01-01",
                "parturitionOutcome": "Con Mortinatos",
                "status": "en-secado",
                "dryingStartDate": "2023-09-01",
            }
        )
        assert p.outcome is ParturitionOutcome.WITH_STILLBIRTHS
        assert p.status is LactationStatus.DRYING
        assert p.drying_start_date == date(2023, 9, 1)

    def test_missing_outcome_is_normal(self):
        p = Parturition.from_dict({"goatId": "D1", "parturitionDate": "2023-01-01", "status": "activa"})
        assert p.outcome is ParturitionOutcome.NORMAL

    def test_abortion(self):
        p = Parturition.from_dict({"goatId": "D1", "parturitionDate": "2023-01-01", "parturitionOutcome": "Aborto"})
        assert p.outcome is ParturitionOutcome.ABORTION

    def test_all_lactation_states(self):
        expected = {
            "activa": LactationStatus.ACTIVE,
            "en-secado": LactationStatus.DRYING,
            "seca": LactationStatus.DRY,
            "finalizada": LactationStatus.FINALIZED,
        }
        for raw, status in expected.items():
            p = Parturition.from_dict({"goatId": "D1", "parturitionDate": "2023-01-01", "status": raw})
            assert p.status is status


class TestWeighingAndEvent:
    """Tests for Weighing and Event ingestion."""

    def test_body_weighing(self):
        w = Weighing.from_dict({"animalId": "K1", "date": "2024-04-30", "kg": 12})
        assert w == Weighing("K1", date(2024, 4, 30), 12.0)

    def test_milk_weighing_uses_goat_id(self):
        w = Weighing.from_dict({"id": "mw1", "goatId": "D1", "date": "2023-03-01", "kg": 3.0})
        assert w.animal_id == "D1"

    def test_weighing_without_animal_raises(self):
        with pytest.raises(KeyError):
            Weighing.from_dict({"date": "2023-03-01", "kg": 3.0})

    @pytest.mark.parametrize("kg", [None, ""])
    def test_weighing_without_weight_raises(self, kg):
        with pytest.raises(KeyError):
            Weighing.from_dict({"animalId": "K1", "date": "2024-03-05", "kg": kg})

    def test_zero_weight_is_kept(self):
        w = Weighing.from_dict({"animalId": "K1", "date": "2024-03-05", "kg": 0})
        assert w.kg == 0.0

    def test_service_weight_event(self):
        e = Event.from_dict({"animalId": "Y1", "date": "2024-05-01", "type": "Peso de Monta", "value": 30})
        assert e.type == EventType.SERVICE_WEIGHT
        assert e.value == 30.0

    def test_event_types(self):
        assert normalize_event_type("Destete") == EventType.WEANING
        assert normalize_event_type("Weaning") == EventType.WEANING
        assert normalize_event_type("Vacunación") == "Vacunación"
        assert normalize_event_type(None) == ""
