from datetime import date, datetime

import pytest
import pytz

from devhelper.utils.datetime_utils import CalendarDate, Clock

from .conftest import FIXED_NOW


def test_calendar_date_arithmetic():
    day = CalendarDate(2025, 3, 1)
    assert day.previous() == CalendarDate(2025, 2, 28)
    assert day.add_days(31) == CalendarDate(2025, 4, 1)
    assert CalendarDate(2025, 3, 4).days_since(day) == 3
    assert CalendarDate.parse("2024-02-29").isoformat() == "2024-02-29"
    assert CalendarDate(2025, 1, 1) < CalendarDate(2025, 1, 2)
    assert CalendarDate.from_date(date(2025, 6, 15)).to_date() == date(2025, 6, 15)


def test_impossible_date_rejected():
    with pytest.raises(ValueError):
        CalendarDate(2025, 2, 30)


def test_clock_day_boundary_follows_zone():
    late_utc = pytz.utc.localize(datetime(2025, 6, 15, 2, 0))
    sao_paulo = Clock("America/Sao_Paulo", now_func=lambda: late_utc)
    utc = Clock("UTC", now_func=lambda: late_utc)

    assert sao_paulo.today() == CalendarDate(2025, 6, 14)
    assert utc.today() == CalendarDate(2025, 6, 15)


def test_naive_datetimes_are_wall_time_in_zone():
    clock = Clock("America/Sao_Paulo", now_func=lambda: FIXED_NOW)
    localized = clock.localize(datetime(2025, 6, 15, 7, 0))
    assert localized.utcoffset().total_seconds() == -3 * 3600
    assert localized.hour == 7


def test_days_until(clock):
    assert clock.days_until(pytz.utc.localize(datetime(2025, 6, 16, 22, 0))) == pytest.approx(1.5)
    assert clock.days_until(pytz.utc.localize(datetime(2025, 6, 14, 10, 0))) == pytest.approx(-1.0)
