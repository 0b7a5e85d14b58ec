"""Herd-wide thresholds (AppConfig).

The external configuration store keeps one flat record of tunable targets.
Analytics functions receive it as an explicit AppConfig argument; nothing
reads configuration implicitly.

Zero or unset values fall back to the defaults below at the point of use,
mirroring how the store treats an empty form field.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields

from goatherd.core.dates import months_to_days
from goatherd.data.records import Sex

logger = logging.getLogger(__name__)

# Fallback targets
DEFAULT_BIRTH_WEIGHT_KG = 3.5
DEFAULT_WEANING_AGE_DAYS = 60
DEFAULT_WEANING_WEIGHT_KG = 15.0
DEFAULT_WEANING_TOLERANCE_DAYS = 10
DEFAULT_WEIGHT_90D_KG = 20.0
DEFAULT_WEIGHT_180D_KG = 28.0
DEFAULT_WEIGHT_270D_KG = 34.0
DEFAULT_FIRST_SERVICE_AGE_MONTHS = 10.0
DEFAULT_GROWTH_ALERT_THRESHOLD = 0.85
DEFAULT_LACTATION_TARGET_DAYS = 300

# The target curve and the service milestone use different fallbacks for
# an unset first-service weight
CURVE_FIRST_SERVICE_WEIGHT_KG = 38.0
MILESTONE_FIRST_SERVICE_WEIGHT_KG = 30.0

# Legacy store keys -> AppConfig field names
LEGACY_KEYS = {
    "farmName": "farm_name",
    "nombreFinca": "farm_name",
    "growthGoalBirthWeight": "birth_weight_kg",
    "diasMetaDesteteFinal": "weaning_age_days",
    "pesoMinimoDesteteFinal": "weaning_weight_kg",
    "growthGoalWeaningWeight": "weaning_weight_kg",
    "growthGoalWeaningWeightMale": "weaning_weight_male_kg",
    "diasToleranciaDestete": "weaning_tolerance_days",
    "growthGoal90dWeight": "weight_90d_kg",
    "growthGoal90dWeightMale": "weight_90d_male_kg",
    "growthGoal180dWeight": "weight_180d_kg",
    "growthGoal180dWeightMale": "weight_180d_male_kg",
    "growthGoal270dWeight": "weight_270d_kg",
    "growthGoal270dWeightMale": "weight_270d_male_kg",
    "edadPrimerServicioMeses": "first_service_age_months",
    "pesoPrimerServicioKg": "first_service_weight_kg",
    "growthAlertThreshold": "growth_alert_threshold",
    "diasMetaLactancia": "lactation_target_days",
    "diasAlertaSecado": "drying_alert_days",
}


@dataclass(frozen=True)
class AppConfig:
    """Immutable snapshot of herd-wide targets for one computation."""

    farm_name: str = "Mi Finca"

    birth_weight_kg: float = DEFAULT_BIRTH_WEIGHT_KG

    weaning_age_days: int = DEFAULT_WEANING_AGE_DAYS
    weaning_weight_kg: float = DEFAULT_WEANING_WEIGHT_KG
    weaning_weight_male_kg: float | None = None
    weaning_tolerance_days: int = DEFAULT_WEANING_TOLERANCE_DAYS

    weight_90d_kg: float = DEFAULT_WEIGHT_90D_KG
    weight_90d_male_kg: float | None = None
    weight_180d_kg: float = DEFAULT_WEIGHT_180D_KG
    weight_180d_male_kg: float | None = None
    weight_270d_kg: float = DEFAULT_WEIGHT_270D_KG
    weight_270d_male_kg: float | None = None

    first_service_age_months: float = DEFAULT_FIRST_SERVICE_AGE_MONTHS
    first_service_weight_kg: float | None = None

    growth_alert_threshold: float = DEFAULT_GROWTH_ALERT_THRESHOLD

    # Fractions of the milestone target weight
    milestone_met_tolerance: float = 0.05
    milestone_close_tolerance: float = 0.15

    lactation_target_days: int = DEFAULT_LACTATION_TARGET_DAYS
    drying_alert_days: int = 75

    @classmethod
    def from_dict(cls, data: dict | None) -> AppConfig:
        """Build from a store record, accepting legacy camelCase or snake_case keys."""
        if not data:
            return cls()

        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = LEGACY_KEYS.get(key, key)
            if name not in known:
                logger.debug("Ignoring unknown config key %r", key)
                continue
            if value is None:
                continue
            values[name] = value
        return cls(**values)

    # -------------------------------------------------------------------------
    # Resolved targets (zero/unset -> default)
    # -------------------------------------------------------------------------

    def birth_weight(self) -> float:
        return self.birth_weight_kg or DEFAULT_BIRTH_WEIGHT_KG

    def weaning_age(self) -> int:
        return int(self.weaning_age_days or DEFAULT_WEANING_AGE_DAYS)

    def weaning_tolerance(self) -> int:
        return int(self.weaning_tolerance_days or DEFAULT_WEANING_TOLERANCE_DAYS)

    def weaning_weight(self, sex: Sex = Sex.FEMALE) -> float:
        if sex is Sex.MALE and self.weaning_weight_male_kg:
            return self.weaning_weight_male_kg
        return self.weaning_weight_kg or DEFAULT_WEANING_WEIGHT_KG

    def milestone_weight(self, day: int, sex: Sex = Sex.FEMALE) -> float:
        """Target weight for the 90, 180 or 270 day checkpoint."""
        if day == 90:
            male, general, default = self.weight_90d_male_kg, self.weight_90d_kg, DEFAULT_WEIGHT_90D_KG
        elif day == 180:
            male, general, default = self.weight_180d_male_kg, self.weight_180d_kg, DEFAULT_WEIGHT_180D_KG
        elif day == 270:
            male, general, default = self.weight_270d_male_kg, self.weight_270d_kg, DEFAULT_WEIGHT_270D_KG
        else:
            raise ValueError(f"No weight target for day {day}")
        if sex is Sex.MALE and male:
            return male
        return general or default

    def first_service_age_days(self) -> int:
        return months_to_days(self.first_service_age_months or DEFAULT_FIRST_SERVICE_AGE_MONTHS)

    def first_service_weight(self, fallback: float = MILESTONE_FIRST_SERVICE_WEIGHT_KG) -> float:
        return self.first_service_weight_kg or fallback

    def alert_threshold(self) -> float:
        return self.growth_alert_threshold or DEFAULT_GROWTH_ALERT_THRESHOLD

    def lactation_target(self) -> int:
        return int(self.lactation_target_days or DEFAULT_LACTATION_TARGET_DAYS)
