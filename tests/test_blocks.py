"""Tests for block occurrence expansion."""

from datetime import date, datetime, timedelta

import pytz

from courtbooking.utils.blocks import block_occurrences, blocks_overlap
from courtbooking.utils.policy import BlockInterval

UTC = pytz.utc


def _at(*args):
    return UTC.localize(datetime(*args))


def _window(day):
    start = UTC.localize(datetime.combine(day, datetime.min.time()))
    return start, start + timedelta(days=1)


class TestOneOff:
    def test_overlapping_window(self):
        block = BlockInterval(_at(2030, 1, 15, 9), _at(2030, 1, 15, 11))
        assert list(block_occurrences(block, *_window(date(2030, 1, 15)))) == [
            (_at(2030, 1, 15, 9), _at(2030, 1, 15, 11))
        ]

    def test_touching_is_not_overlap(self):
        block = BlockInterval(_at(2030, 1, 15, 9), _at(2030, 1, 15, 11))
        assert not blocks_overlap([block], _at(2030, 1, 15, 11), _at(2030, 1, 15, 12))
        assert not blocks_overlap([block], _at(2030, 1, 15, 8), _at(2030, 1, 15, 9))

    def test_multi_day_block(self):
        block = BlockInterval(_at(2030, 1, 14, 20), _at(2030, 1, 16, 8))
        assert blocks_overlap([block], _at(2030, 1, 15, 12), _at(2030, 1, 15, 13))


class TestRecurring:
    def test_daily_until_end_date(self):
        block = BlockInterval(
            _at(2030, 1, 1, 7), _at(2030, 1, 1, 9),
            is_recurring=True, recurring_pattern="daily", recurring_end_date=date(2030, 1, 10),
        )
        assert blocks_overlap([block], _at(2030, 1, 10, 8), _at(2030, 1, 10, 10))
        assert not blocks_overlap([block], _at(2030, 1, 11, 8), _at(2030, 1, 11, 10))

    def test_weekly_only_on_same_weekday(self):
        block = BlockInterval(
            _at(2030, 1, 1, 18), _at(2030, 1, 1, 20),
            is_recurring=True, recurring_pattern="weekly", recurring_end_date=date(2030, 3, 1),
        )
        assert blocks_overlap([block], _at(2030, 2, 26, 19), _at(2030, 2, 26, 20))
        assert not blocks_overlap([block], _at(2030, 2, 27, 19), _at(2030, 2, 27, 20))

    def test_monthly_skips_missing_days(self):
        block = BlockInterval(
            _at(2030, 1, 31, 10), _at(2030, 1, 31, 12),
            is_recurring=True, recurring_pattern="monthly", recurring_end_date=date(2030, 4, 30),
        )
        days = [start.date() for start, _ in block_occurrences(block, _at(2030, 1, 1), _at(2030, 5, 1))]
        assert days == [date(2030, 1, 31), date(2030, 3, 31)]

    def test_wall_clock_kept_across_dst(self):
        """A weekly 10:00 local block stays at 10:00 local after the spring change."""
        tz = pytz.timezone("Europe/Vilnius")
        start = tz.localize(datetime(2030, 3, 19, 10))  # UTC+2
        block = BlockInterval(
            start, start + timedelta(hours=1),
            is_recurring=True, recurring_pattern="weekly", recurring_end_date=date(2030, 4, 30),
        )
        after_change = tz.localize(datetime(2030, 4, 2, 10))  # UTC+3
        assert blocks_overlap([block], after_change, after_change + timedelta(minutes=30), tz)
