"""Calendar arithmetic for herd records.

All arithmetic is done on UTC calendar dates at day granularity. Record
dates arrive from the sync layer in several shapes (ISO strings with or
without a time part, epoch milliseconds, date objects, or a sentinel such
as "N/A" for animals bought without papers), so everything goes through
parse_date first.

Missing or unparseable dates never raise:
- age functions return AGE_UNKNOWN (-1)
- day differences return 0
"""

import logging
import math
from datetime import UTC, date, datetime

logger = logging.getLogger(__name__)

# Sentinel age for animals with no usable birth date
AGE_UNKNOWN = -1

# Average month length used for age in months (365.25 / 12)
DAYS_PER_MONTH = 30.4375

# Month length used by herd targets expressed in months (first service age)
TARGET_DAYS_PER_MONTH = 30.44

# Free-text values the store uses for "no date"
UNKNOWN_DATE_MARKERS = {"", "n/a", "na", "unknown", "desconocida", "desconocido", "none", "null"}


def today_utc() -> date:
    """Current calendar date in UTC."""
    return datetime.now(UTC).date()


def parse_date(value: object) -> date | None:
    """Parse a record date into a calendar date.

    Accepts date/datetime objects, epoch milliseconds, and ISO strings
    ("2024-03-01", "2024-03-01T10:00:00Z"). Aware datetimes are converted
    to UTC first; naive ones are taken as UTC.

    Returns:
        The calendar date, or None when the value is missing or unparseable
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, UTC).date()
        except (OverflowError, OSError, ValueError):
            logger.debug("Unparseable epoch date: %r", value)
            return None

    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.lower() in UNKNOWN_DATE_MARKERS:
        return None

    try:
        return parse_date(datetime.fromisoformat(text))
    except ValueError:
        pass

    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        logger.debug("Unparseable date string: %r", value)
        return None


def age_in_days(birth_date: object, as_of: object = None) -> int:
    """Whole days between birth and as_of (default: today, UTC).

    Args:
        birth_date: Birth date in any form parse_date accepts
        as_of: Reference date (default today)

    Returns:
        Age in days, clamped to >= 0, or AGE_UNKNOWN (-1) if either
        date is missing/unparseable
    """
    birth = parse_date(birth_date)
    if birth is None:
        return AGE_UNKNOWN

    reference = today_utc() if as_of is None else parse_date(as_of)
    if reference is None:
        return AGE_UNKNOWN

    return max(0, (reference - birth).days)


def age_in_months(birth_date: object, as_of: object = None) -> int:
    """Completed months of age, or AGE_UNKNOWN (-1)."""
    days = age_in_days(birth_date, as_of)
    if days < 0:
        return AGE_UNKNOWN
    return math.floor(days / DAYS_PER_MONTH)


def format_age(birth_date: object, as_of: object = None) -> str:
    """Human-readable age ("18 days", "5 months", "2 years 3 months")."""
    days = age_in_days(birth_date, as_of)
    if days < 0:
        return "N/A"
    if days < 31:
        return f"{days} day" if days == 1 else f"{days} days"

    months = math.floor(days / DAYS_PER_MONTH)
    if months < 12:
        return f"{months} month" if months == 1 else f"{months} months"

    years, rest = divmod(months, 12)
    year_part = f"{years} year" if years == 1 else f"{years} years"
    if rest == 0:
        return year_part
    month_part = f"{rest} month" if rest == 1 else f"{rest} months"
    return f"{year_part} {month_part}"


def days_between(date_a: object, date_b: object) -> int:
    """Absolute number of days between two dates (0 if either is unparseable)."""
    a = parse_date(date_a)
    b = parse_date(date_b)
    if a is None or b is None:
        return 0
    return math.ceil(abs((b - a).days))


def days_in_milk(parturition_date: object, on_date: object) -> int:
    """Days elapsed in lactation (DEL) on a given date.

    Weighings dated before the parturition count as DEL 0.
    """
    start = parse_date(parturition_date)
    end = parse_date(on_date)
    if start is None or end is None:
        return 0
    return max(0, (end - start).days)


def months_to_days(months: float) -> int:
    """Convert a target expressed in months to days."""
    return round(months * TARGET_DAYS_PER_MONTH)
