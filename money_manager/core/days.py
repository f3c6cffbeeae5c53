"""
Day keys for price history and valuation entries.

Days are stored and compared as ``datetime.date``. The ``DD/MM/YYYY`` string
form only exists at the HTTP boundary.
"""

from datetime import date, datetime

from money_manager.core.exceptions import ValidationError

DAY_KEY_FORMAT = "%d/%m/%Y"


def today() -> date:
    """Server local calendar date."""
    return date.today()


def format_day_key(day: date) -> str:
    return day.strftime(DAY_KEY_FORMAT)


def parse_day_key(value: str) -> date:
    """Parse ``DD/MM/YYYY``. Raises ValidationError for anything else, including impossible dates."""
    try:
        return datetime.strptime(value, DAY_KEY_FORMAT).date()
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid day key {value!r}, expected DD/MM/YYYY") from exc


def format_day_map(values: dict[date, int]) -> dict[str, int]:
    """Render a day-keyed mapping oldest first with string keys."""
    return {format_day_key(day): values[day] for day in sorted(values)}
