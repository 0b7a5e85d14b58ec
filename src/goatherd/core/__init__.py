"""Core module - configuration, units and calendar helpers."""

from goatherd.core import dates, units
from goatherd.core.config import get_cache_dir, get_snapshot_path, settings
from goatherd.core.dates import (
    AGE_UNKNOWN,
    age_in_days,
    age_in_months,
    days_between,
    days_in_milk,
    format_age,
    months_to_days,
    parse_date,
    today_utc,
)
from goatherd.core.units import (
    format_gdp,
    format_weight,
    gdp_to_display,
    get_weight_unit,
    is_imperial,
    kg_per_day_to_g_per_day,
    weight_kg_to_display,
)

__all__ = [
    "dates",
    "units",
    "settings",
    "get_cache_dir",
    "get_snapshot_path",
    # Calendar helpers
    "AGE_UNKNOWN",
    "parse_date",
    "today_utc",
    "age_in_days",
    "age_in_months",
    "format_age",
    "days_between",
    "days_in_milk",
    "months_to_days",
    # Unit conversion helpers
    "kg_per_day_to_g_per_day",
    "gdp_to_display",
    "format_gdp",
    "weight_kg_to_display",
    "format_weight",
    "get_weight_unit",
    "is_imperial",
]
