"""Unit conversion utilities using pint.

All internal data is stored in metric (SI) units:
- Body and milk weights: kilograms (kg)
- Growth rate (GDP): kilograms per day (kg/day)

Reports show GDP in grams per day, the unit herd managers read.

Display units are controlled by settings.display_units:
- "metric": Display as stored (kg, g/day)
- "imperial": Convert to lb, oz/day
"""

import pint

from goatherd.core.config import settings

# Create a unit registry (lazily initialized)
_ureg: pint.UnitRegistry | None = None


def get_ureg() -> pint.UnitRegistry:
    """Get the pint unit registry (lazily initialized)."""
    global _ureg
    if _ureg is None:
        _ureg = pint.UnitRegistry()
    return _ureg


# =============================================================================
# Growth Rate Conversions
# =============================================================================


def kg_per_day_to_g_per_day(rate_kg_day: float) -> float:
    """Convert a daily gain from kg/day to g/day."""
    ureg = get_ureg()
    return (rate_kg_day * ureg.kilogram / ureg.day).to(ureg.gram / ureg.day).magnitude


def g_per_day_to_kg_per_day(rate_g_day: float) -> float:
    """Convert a daily gain from g/day to kg/day."""
    ureg = get_ureg()
    return (rate_g_day * ureg.gram / ureg.day).to(ureg.kilogram / ureg.day).magnitude


def gdp_to_display(rate_kg_day: float) -> tuple[float, str]:
    """Convert a daily gain (kg/day) to display units.

    Returns:
        Tuple of (value, unit_symbol) in display units
    """
    ureg = get_ureg()
    quantity = rate_kg_day * ureg.kilogram / ureg.day

    if settings.display_units == "imperial":
        return (quantity.to(ureg.ounce / ureg.day).magnitude, "oz/day")
    return (quantity.to(ureg.gram / ureg.day).magnitude, "g/day")


def format_gdp(rate_kg_day: float | None) -> str:
    """Format a daily gain for display.

    Args:
        rate_kg_day: Daily gain in kg/day, or None when unknown

    Returns:
        Formatted string like "145 g/day" or "5.1 oz/day"
    """
    if rate_kg_day is None:
        return "—"
    value, unit = gdp_to_display(rate_kg_day)
    if settings.display_units == "imperial":
        return f"{value:.1f} {unit}"
    return f"{value:.0f} {unit}"


# =============================================================================
# Weight Conversions
# =============================================================================


def weight_kg_to_display(kg: float) -> tuple[float, str]:
    """Convert kilograms to display units.

    Args:
        kg: Weight in kilograms

    Returns:
        Tuple of (value, unit_symbol) in display units
    """
    ureg = get_ureg()

    if settings.display_units == "imperial":
        pounds = (kg * ureg.kilogram).to(ureg.pound).magnitude
        return (pounds, "lb")
    return (kg, "kg")


def format_weight(kg: float | None, decimals: int = 1) -> str:
    """Format a weight for display.

    Returns:
        Formatted string like "12.5 kg" or "27.6 lb"
    """
    if kg is None:
        return "—"
    value, unit = weight_kg_to_display(kg)
    return f"{value:.{decimals}f} {unit}"


# =============================================================================
# Display Unit Info
# =============================================================================


def get_weight_unit() -> str:
    """Get the weight unit symbol for current display settings."""
    return "lb" if settings.display_units == "imperial" else "kg"


def is_imperial() -> bool:
    """Check if display units are imperial."""
    return settings.display_units == "imperial"
