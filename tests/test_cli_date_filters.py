"""Tests for CLI date filter helper."""

from datetime import date

import click
import pytest

from finclassify.cli.date_filters import resolve_cli_date_range
from finclassify.utils.date_parser import get_date_range


def _ctx() -> click.Context:
    return click.Context(click.Command("test"))


def test_resolve_cli_date_range_rejects_multiple_periods(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date=None,
            end_date=None,
            periods=("this-month", "last-month"),
        )

    assert excinfo.value.exit_code == 1
    err = capsys.readouterr().err
    assert "Only one period option" in err


def test_resolve_cli_date_range_rejects_period_with_start_end(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date="2024-01-01",
            end_date=None,
            periods=("this-month",),
        )

    assert excinfo.value.exit_code == 1
    err = capsys.readouterr().err
    assert "cannot be combined" in err


def test_resolve_cli_date_range_returns_period_range():
    expected_start, expected_end = get_date_range("last-year")
    start, end = resolve_cli_date_range(
        _ctx(),
        start_date=None,
        end_date=None,
        periods=("last-year",),
    )

    assert start == expected_start
    assert end == expected_end


def test_resolve_cli_date_range_parses_explicit_dates():
    start, end = resolve_cli_date_range(_ctx(), start_date="2024-05-01", end_date="31/05/2024")

    assert start == date(2024, 5, 1)
    assert end == date(2024, 5, 31)


def test_resolve_cli_date_range_without_filters():
    assert resolve_cli_date_range(_ctx(), start_date=None, end_date=None) == (None, None)


def test_resolve_cli_date_range_rejects_invalid_dates(capsys):
    with pytest.raises(click.exceptions.Exit):
        resolve_cli_date_range(_ctx(), start_date="not a date", end_date=None)
    assert "Invalid start date" in capsys.readouterr().err

    with pytest.raises(click.exceptions.Exit):
        resolve_cli_date_range(_ctx(), start_date="2024-06-01", end_date="2024-05-01")
    assert "must not be after" in capsys.readouterr().err
