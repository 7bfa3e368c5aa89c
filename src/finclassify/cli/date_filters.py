"""CLI helpers for date range resolution."""

import functools
from datetime import date

import click

from finclassify.utils.date_parser import get_date_range, parse_date

PERIODS = ("this-month", "this-year", "this-week", "last-month", "last-year", "last-week")


def date_range_options(func):
    """Add --start-date/--end-date and the period flags to a command.

    The period flags reach the command as a ``periods`` tuple of the
    period names that were set.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        kwargs["periods"] = tuple(p for p in PERIODS if kwargs.pop(p.replace("-", "_"), False))
        return func(*args, **kwargs)

    for period in reversed(PERIODS):
        wrapper = click.option(f"--{period}", is_flag=True, help=f"Limit to {period.replace('-', ' ')}")(wrapper)
    wrapper = click.option("--end-date", help="End date (YYYY-MM-DD or relative, e.g. 'today')")(wrapper)
    wrapper = click.option("--start-date", help="Start date (YYYY-MM-DD or relative, e.g. 'last month')")(wrapper)
    return wrapper


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    periods: tuple[str, ...] = (),
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from period flags or explicit dates."""
    if len(periods) > 1:
        click.echo(
            "Error: Only one period option (" + ", ".join(f"--{p}" for p in PERIODS) + ") can be specified at a time.",
            err=True,
        )
        ctx.exit(1)

    if periods and (start_date or end_date):
        click.echo(
            "Error: Period options (--this-month, --this-year, etc.) cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if periods:
        return get_date_range(periods[0])

    start = None
    end = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    if start is not None and end is not None and start > end:
        click.echo("Error: Start date must not be after end date.", err=True)
        ctx.exit(1)

    return start, end
