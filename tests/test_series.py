"""Tests for body-weight series analysis."""

from datetime import date, timedelta

import pytest

from goatherd.data.records import Weighing
from goatherd.growth.series import (
    Trend,
    WeightPoint,
    build_series,
    calculate_gdp,
    days_to_target_weight,
    interpolate,
    latest_weighing,
    precocity_index,
    weaning_index,
    weight_at_age,
    weighing_trend,
)

BIRTH = date(2024, 1, 1)


def weighed(age_days: int, kg: float, animal_id: str = "K1") -> Weighing:
    return Weighing(animal_id, BIRTH + timedelta(days=age_days), kg)


class TestBuildSeries:
    """Tests for build_series."""

    def test_adds_birth_point_and_sorts(self):
        points = build_series([weighed(60, 14.0), weighed(30, 9.0)], BIRTH, birth_weight=3.5)
        assert points == [WeightPoint(0, 3.5), WeightPoint(30, 9.0), WeightPoint(60, 14.0)]

    def test_drops_weighings_before_birth(self):
        points = build_series([weighed(-3, 2.0), weighed(10, 5.0)], BIRTH)
        assert points == [WeightPoint(10, 5.0)]

    def test_unknown_birth_date(self):
        assert build_series([weighed(10, 5.0)], "N/A") == []


class TestWeightAtAge:
    """Tests for weight_at_age."""

    def test_interpolates_between_weighings(self):
        weighings = [weighed(60, 10.0), weighed(120, 16.0)]
        assert weight_at_age(weighings, BIRTH, 90) == 13.0

    def test_tolerance_match(self):
        weighings = [weighed(60, 10.0), weighed(94, 14.2), weighed(120, 16.0)]
        assert weight_at_age(weighings, BIRTH, 90) == 14.2

    def test_nearest_match_within_window(self):
        weighings = [weighed(86, 13.0), weighed(92, 14.0)]
        assert weight_at_age(weighings, BIRTH, 90) == 14.0

    def test_never_extrapolates(self):
        weighings = [weighed(30, 8.0), weighed(60, 12.0)]
        assert weight_at_age(weighings, BIRTH, 90) is None

    def test_birth_weight_enables_early_ages(self):
        weighings = [weighed(60, 15.5)]
        assert weight_at_age(weighings, BIRTH, 30, birth_weight=3.5) == 9.5
        assert weight_at_age(weighings, BIRTH, 30) is None

    def test_empty(self):
        assert interpolate([], 90) is None
        assert weight_at_age([], BIRTH, 90) is None

    def test_rounded(self):
        weighings = [weighed(0, 3.0), weighed(30, 4.0)]
        assert weight_at_age(weighings, BIRTH, 10) == 3.33


class TestGdp:
    """Tests for calculate_gdp."""

    def test_from_birth_weight(self):
        result = calculate_gdp(BIRTH, 3.5, [weighed(30, 9.0), weighed(60, 15.5)])
        assert result.overall == pytest.approx(0.2)
        assert result.recent == pytest.approx(6.5 / 30)

    def test_without_birth_weight(self):
        result = calculate_gdp(BIRTH, None, [weighed(30, 9.0), weighed(60, 15.0)])
        assert result.overall == pytest.approx(0.2)

    def test_single_weighing_without_birth_weight(self):
        result = calculate_gdp(BIRTH, None, [weighed(30, 9.0)])
        assert result.overall is None
        assert result.recent is None

    def test_no_weighings(self):
        result = calculate_gdp(BIRTH, 3.5, [])
        assert result.overall is None
        assert result.recent is None


class TestIndices:
    """Tests for weaning and precocity indices."""

    def test_weaning_index(self):
        # (15 - 3.5) / 50 = 0.23 kg/day, standardised to 60 days
        assert weaning_index(15.0, BIRTH + timedelta(days=50), BIRTH, 3.5) == 17.3

    def test_weaning_index_missing(self):
        assert weaning_index(None, BIRTH + timedelta(days=50), BIRTH) is None
        assert weaning_index(15.0, None, BIRTH) is None

    def test_precocity_index(self):
        weighings = [weighed(180, 28.0), weighed(240, 34.0)]
        assert precocity_index(weighings, BIRTH) == 31.3

    def test_precocity_index_not_covered(self):
        assert precocity_index([weighed(180, 28.0)], BIRTH) is None


class TestWeighingTrend:
    """Tests for weighing_trend."""

    def test_single(self):
        assert weighing_trend([weighed(10, 5.0)]).trend == Trend.SINGLE

    def test_up_long_trend(self):
        result = weighing_trend([weighed(10, 5.0), weighed(20, 6.0), weighed(30, 7.0)])
        assert result.trend == Trend.UP
        assert result.difference == 1.0
        assert result.is_long_trend

    def test_down_after_gain(self):
        result = weighing_trend([weighed(10, 5.0), weighed(20, 6.0), weighed(30, 5.5)])
        assert result.trend == Trend.DOWN
        assert not result.is_long_trend

    def test_stable_margin(self):
        assert weighing_trend([weighed(10, 5.0), weighed(20, 5.1)]).trend == Trend.STABLE


class TestDaysToTarget:
    """Tests for days_to_target_weight and latest_weighing."""

    def test_rounds_up(self):
        assert days_to_target_weight(25.0, 30.0, 0.15) == 34

    def test_already_there(self):
        assert days_to_target_weight(31.0, 30.0, 0.1) == 0

    def test_not_gaining(self):
        assert days_to_target_weight(25.0, 30.0, 0.0) is None
        assert days_to_target_weight(25.0, 30.0, None) is None

    def test_latest_weighing(self):
        assert latest_weighing([weighed(40, 12.0), weighed(10, 5.0)]).kg == 12.0
        assert latest_weighing([]) is None
