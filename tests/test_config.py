"""Tests for engine settings, cache location and herd configuration."""

from pathlib import Path

import pytest

from goatherd.core import config as core_config
from goatherd.core.config import Settings, get_cache_dir, get_snapshot_path
from goatherd.data.herd_config import AppConfig
from goatherd.data.records import Sex


class TestGetCacheDir:
    """Tests for the get_cache_dir function."""

    def test_returns_path_object(self):
        assert isinstance(get_cache_dir(), Path)

    def test_returns_cache_dir_in_project_root(self):
        """Cache dir sits next to pyproject.toml (or .git)."""
        result = get_cache_dir()
        assert result.name == ".cache"
        parent = result.parent
        assert (parent / "pyproject.toml").exists() or (parent / ".git").exists()

    def test_cache_dir_exists_after_call(self):
        result = get_cache_dir()
        assert result.exists()
        assert result.is_dir()

    def test_returns_same_path_on_multiple_calls(self):
        assert get_cache_dir() == get_cache_dir()


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("GOATHERD_DISPLAY_UNITS", raising=False)
        monkeypatch.delenv("GOATHERD_SNAPSHOT_PATH", raising=False)
        s = Settings(_env_file=None)
        assert s.display_units == "metric"
        assert s.snapshot_path is None
        assert s.log_level == "WARNING"

    def test_reads_prefixed_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GOATHERD_DISPLAY_UNITS", "imperial")
        monkeypatch.setenv("GOATHERD_SNAPSHOT_PATH", str(tmp_path / "herd.json"))
        s = Settings(_env_file=None)
        assert s.display_units == "imperial"
        assert s.snapshot_path == tmp_path / "herd.json"

    def test_snapshot_path_prefers_setting(self, monkeypatch, tmp_path):
        monkeypatch.setattr(core_config.settings, "snapshot_path", tmp_path / "x.json")
        assert get_snapshot_path() == tmp_path / "x.json"

    def test_snapshot_path_falls_back_to_cache(self, monkeypatch):
        monkeypatch.setattr(core_config.settings, "snapshot_path", None)
        assert get_snapshot_path() == get_cache_dir() / "herd.json"


class TestAppConfig:
    """Tests for herd configuration parsing and fallbacks."""

    def test_defaults(self):
        config = AppConfig()
        assert config.birth_weight() == 3.5
        assert config.weaning_age() == 60
        assert config.weaning_weight() == 15.0
        assert config.milestone_weight(90) == 20.0
        assert config.milestone_weight(180) == 28.0
        assert config.milestone_weight(270) == 34.0
        assert config.first_service_age_days() == 304
        assert config.alert_threshold() == 0.85

    def test_unset_service_weight_fallbacks(self):
        """Milestones fall back to 30 kg, the target curve passes 38 kg."""
        config = AppConfig()
        assert config.first_service_weight() == 30.0
        assert config.first_service_weight(38.0) == 38.0

    def test_from_legacy_keys(self):
        config = AppConfig.from_dict(
            {
                "pesoPrimerServicioKg": 32,
                "edadPrimerServicioMeses": 9,
                "diasMetaDesteteFinal": 75,
                "pesoMinimoDesteteFinal": 14,
                "growthGoal90dWeight": 21,
                "growthGoal90dWeightMale": 24,
                "growthAlertThreshold": 0.8,
                "someUnrelatedKey": "ignored",
            }
        )
        assert config.first_service_weight() == 32
        assert config.first_service_age_days() == 274
        assert config.weaning_age() == 75
        assert config.weaning_weight() == 14
        assert config.milestone_weight(90, Sex.FEMALE) == 21
        assert config.milestone_weight(90, Sex.MALE) == 24
        assert config.alert_threshold() == 0.8

    def test_snake_case_keys(self):
        config = AppConfig.from_dict({"weaning_age_days": 70, "farm_name": "La Esperanza"})
        assert config.weaning_age() == 70
        assert config.farm_name == "La Esperanza"

    def test_zero_values_fall_back(self):
        config = AppConfig.from_dict({"diasMetaDesteteFinal": 0, "growthGoal180dWeight": 0})
        assert config.weaning_age() == 60
        assert config.milestone_weight(180) == 28.0

    def test_male_targets_fall_back_to_general(self):
        config = AppConfig(weight_180d_kg=27.0)
        assert config.milestone_weight(180, Sex.MALE) == 27.0
        assert config.weaning_weight(Sex.MALE) == 15.0

    def test_empty_record(self):
        assert AppConfig.from_dict(None) == AppConfig()
        assert AppConfig.from_dict({}) == AppConfig()

    def test_unknown_milestone_day(self):
        with pytest.raises(ValueError):
            AppConfig().milestone_weight(120)

    def test_is_immutable(self):
        config = AppConfig()
        with pytest.raises(AttributeError):
            config.weaning_age_days = 90
