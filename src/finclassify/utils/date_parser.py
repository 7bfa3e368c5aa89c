"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def _start_of(period: str, today: date) -> date:
    if period == "month":
        return today.replace(day=1)
    if period == "year":
        return today.replace(month=1, day=1)
    if period == "week":
        return today - timedelta(days=today.weekday())
    raise ValueError(f"Unknown period '{period}'")


def _shift(period: str, start: date, steps: int) -> date:
    if period == "month":
        return start + relativedelta(months=steps)
    if period == "year":
        return start + relativedelta(years=steps)
    return start + timedelta(weeks=steps)


def parse_date(date_str: str, dayfirst: bool = True) -> date:
    """Parse a date string into a date object.

    Bank statement exports are usually day-first ("12/05/2024" is 12 May), so
    ambiguous numeric dates are read day-first unless told otherwise.

    Supported relative forms: "today", "yesterday", "tomorrow",
    "last/this/next month|year|week" (start of that period) and
    "last <weekday>".

    Args:
        date_str: Date string in various formats
        dayfirst: Read ambiguous numeric dates as day/month

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    fixed = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in fixed:
        return fixed[text]

    words = text.split()
    if len(words) == 2 and words[0] in ("last", "this", "next"):
        which, period = words
        if which == "last" and period in WEEKDAYS:
            days_ago = (today.weekday() - WEEKDAYS.index(period)) % 7 or 7
            return today - timedelta(days=days_ago)
        if period in ("month", "year", "week"):
            steps = {"last": -1, "this": 0, "next": 1}[which]
            return _shift(period, _start_of(period, today), steps)

    # ISO dates are never ambiguous
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    try:
        return date_parser.parse(text, dayfirst=dayfirst).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a named period.

    Args:
        period: One of this-month, this-year, this-week, last-month,
            last-year, last-week

    Returns:
        Tuple of (start_date, end_date), both inclusive

    Raises:
        ValueError: If period string is not recognized
    """
    normalized = period.strip().lower()
    which, _, unit = normalized.partition("-")
    if which not in ("this", "last") or unit not in ("month", "year", "week"):
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: this-month, this-year, "
            "this-week, last-month, last-year, last-week"
        )

    today = date.today()
    current_start = _start_of(unit, today)
    if which == "this":
        return (current_start, today)
    return (_shift(unit, current_start, -1), current_start - timedelta(days=1))
