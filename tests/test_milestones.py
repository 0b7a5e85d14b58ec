"""Tests for growth milestones and readiness flags."""

from datetime import date, timedelta

import pytest

from goatherd.data.herd_config import AppConfig
from goatherd.data.records import (
    Animal,
    AnimalStatus,
    Event,
    EventType,
    ReproductiveStatus,
    Sex,
    Weighing,
)
from goatherd.data.snapshot import HerdSnapshot
from goatherd.growth.milestones import (
    MilestoneStatus,
    band_milestone,
    evaluate_service_timing,
    growth_status,
)

BIRTH = date(2023, 1, 1)

# First service at 300 days and 30 kg
SERVICE_CONFIG = AppConfig(first_service_age_months=300 / 30.44, first_service_weight_kg=30.0)


def on_day(age_days: int) -> date:
    return BIRTH + timedelta(days=age_days)


def doeling(**kwargs) -> Animal:
    defaults = {"id": "F1", "sex": Sex.FEMALE, "birth_date": BIRTH, "birth_weight": 3.5}
    defaults.update(kwargs)
    return Animal(**defaults)


class TestBandMilestone:
    """Tests for band_milestone."""

    def test_met(self):
        assert band_milestone(19.5, 20.0, 90, 120, AppConfig()) == MilestoneStatus.MET

    def test_close(self):
        assert band_milestone(17.5, 20.0, 90, 120, AppConfig()) == MilestoneStatus.CLOSE

    def test_missed(self):
        assert band_milestone(16.0, 20.0, 90, 120, AppConfig()) == MilestoneStatus.MISSED

    def test_no_weight_pending_within_grace(self):
        assert band_milestone(None, 20.0, 90, 100, AppConfig()) == MilestoneStatus.PENDING
        assert band_milestone(None, 20.0, 90, 120, AppConfig()) == MilestoneStatus.PENDING

    def test_no_weight_missed_after_grace(self):
        assert band_milestone(None, 20.0, 90, 121, AppConfig()) == MilestoneStatus.MISSED


class TestServiceMilestone:
    """Tests for the timing-based first-service milestone."""

    @pytest.mark.parametrize(
        "age_at_event,expected",
        [
            (280, MilestoneStatus.MET),
            (300, MilestoneStatus.MET),
            (325, MilestoneStatus.CLOSE),
            (340, MilestoneStatus.MISSED),
        ],
    )
    def test_service_weight_event(self, age_at_event, expected):
        assert SERVICE_CONFIG.first_service_age_days() == 300
        events = [Event(animal_id="F1", date=on_day(age_at_event), type=EventType.SERVICE_WEIGHT)]
        status = growth_status(doeling(), [], SERVICE_CONFIG, events=events, reference_date=on_day(400))
        assert status.milestone_status.service == expected

    @pytest.mark.parametrize(
        "age_at_weighing,expected",
        [
            (280, MilestoneStatus.MET),
            (325, MilestoneStatus.CLOSE),
            (340, MilestoneStatus.MISSED),
        ],
    )
    def test_first_weighing_at_service_weight(self, age_at_weighing, expected):
        weighings = [
            Weighing("F1", on_day(200), 25.0),
            Weighing("F1", on_day(age_at_weighing), 30.5),
        ]
        status = growth_status(doeling(), weighings, SERVICE_CONFIG, reference_date=on_day(400))
        assert status.milestone_status.service == expected

    def test_pending_then_missed(self):
        pending = growth_status(doeling(), [], SERVICE_CONFIG, reference_date=on_day(350))
        assert pending.milestone_status.service == MilestoneStatus.PENDING
        missed = growth_status(doeling(), [], SERVICE_CONFIG, reference_date=on_day(400))
        assert missed.milestone_status.service == MilestoneStatus.MISSED

    def test_timing_bands(self):
        assert evaluate_service_timing(290, 300) == MilestoneStatus.MET
        assert evaluate_service_timing(330, 300) == MilestoneStatus.CLOSE
        assert evaluate_service_timing(331, 300) == MilestoneStatus.MISSED


class TestReadiness:
    """Tests for the weaning and service readiness flags."""

    def test_ready_for_weaning(self):
        weighings = [Weighing("F1", on_day(30), 8.0), Weighing("F1", on_day(58), 12.0)]
        status = growth_status(doeling(), weighings, AppConfig(), reference_date=on_day(65))
        assert status.is_ready_for_weaning
        assert status.current_weight == 12.0

    def test_weighing_without_weight_ignored(self):
        """A stored weighing with no kg must not hide the last real weight."""
        data = {
            "animals": [{"id": "K9", "sex": "Hembra", "birthDate": "2024-01-01", "birthWeight": 3.4}],
            "bodyWeighings": [
                {"id": "bw1", "animalId": "K9", "date": "2024-02-20", "kg": 12.0},
                {"id": "bw2", "animalId": "K9", "date": "2024-03-05"},
            ],
        }
        snapshot = HerdSnapshot.from_dict(data)
        kid = snapshot.animals[0]
        status = growth_status(kid, snapshot.body_weighings, AppConfig(), reference_date=date(2024, 3, 6))
        assert status.current_weight == 12.0
        assert status.current_weight_date == date(2024, 2, 20)
        assert status.is_ready_for_weaning

    def test_not_ready_when_too_young_or_light(self):
        weighings = [Weighing("F1", on_day(30), 8.0)]
        assert not growth_status(doeling(), weighings, AppConfig(), reference_date=on_day(50)).is_ready_for_weaning
        assert not growth_status(doeling(), weighings, AppConfig(), reference_date=on_day(70)).is_ready_for_weaning

    def test_backfilled_history_not_flagged(self):
        """A first weighing above 14 kg looks like an adult record entered late."""
        weighings = [Weighing("F1", on_day(70), 22.0)]
        status = growth_status(doeling(), weighings, AppConfig(), reference_date=on_day(75))
        assert not status.is_ready_for_weaning

    def test_weaned_or_inactive_not_flagged(self):
        weighings = [Weighing("F1", on_day(58), 12.0)]
        weaned = doeling(weaning_date=on_day(60), weaning_weight=12.0)
        sold = doeling(status=AnimalStatus.SOLD)
        assert not growth_status(weaned, weighings, AppConfig(), reference_date=on_day(65)).is_ready_for_weaning
        assert not growth_status(sold, weighings, AppConfig(), reference_date=on_day(65)).is_ready_for_weaning

    def test_ready_for_service(self):
        weighings = [Weighing("F1", on_day(300), 31.0)]
        empty = doeling(reproductive_status=ReproductiveStatus.EMPTY)
        status = growth_status(empty, weighings, SERVICE_CONFIG, reference_date=on_day(310))
        assert status.is_ready_for_service

    def test_not_ready_for_service(self):
        weighings = [Weighing("F1", on_day(300), 31.0)]
        pregnant = doeling(reproductive_status=ReproductiveStatus.PREGNANT)
        male = doeling(sex=Sex.MALE)
        serviced = [Event(animal_id="F1", date=on_day(305), type=EventType.SERVICE)]
        ref = on_day(310)

        assert not growth_status(pregnant, weighings, SERVICE_CONFIG, reference_date=ref).is_ready_for_service
        assert not growth_status(male, weighings, SERVICE_CONFIG, reference_date=ref).is_ready_for_service
        assert not growth_status(
            doeling(), weighings, SERVICE_CONFIG, events=serviced, reference_date=ref
        ).is_ready_for_service
        assert not growth_status(doeling(), weighings, SERVICE_CONFIG, reference_date=on_day(290)).is_ready_for_service

    def test_no_weighings_uses_birth_record(self):
        status = growth_status(doeling(), [], AppConfig(), reference_date=on_day(10))
        assert status.current_weight == 3.5
        assert status.current_weight_date == BIRTH


class TestSampleHerd:
    """Milestones for the sample doeling Y1."""

    def test_y1(self, snapshot, reference_date):
        y1 = next(a for a in snapshot.animals if a.id == "Y1")
        status = growth_status(
            y1, snapshot.body_weighings, snapshot.config, events=snapshot.events, reference_date=reference_date
        )
        milestones = status.milestone_status
        assert milestones.weaning == MilestoneStatus.MET
        assert milestones.d90 == MilestoneStatus.CLOSE
        assert milestones.d180 == MilestoneStatus.CLOSE
        assert milestones.d270 == MilestoneStatus.CLOSE
        assert milestones.service == MilestoneStatus.MET
        assert not status.is_ready_for_weaning
        assert not status.is_ready_for_service
        assert status.current_weight == 30.0
        assert status.current_weight_date == date(2024, 4, 27)
