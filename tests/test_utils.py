"""Tests for utility functions."""

import json
from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from golfleague.utils import load_json, local_now, reminder_key, round_half_up, save_json, week_key


def test_local_now_naive_is_local():
    now = local_now('America/New_York', datetime(2026, 6, 10, 6, 0))
    assert now.hour == 6
    assert now.tzinfo == ZoneInfo('America/New_York')


def test_local_now_converts_aware():
    now = local_now('America/Los_Angeles', datetime(2026, 1, 5, 12, 0, tzinfo=ZoneInfo('UTC')))
    assert now.hour == 4


def test_marker_keys():
    assert reminder_key(date(2026, 6, 10), 3) == '2026-06-10-week3'
    assert week_key(7) == 'week7'


@pytest.mark.parametrize(
    'value, expected',
    [(0.5, 1), (1.5, 2), (2.5, 3), (2.4, 2), (4.0, 4)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_save_json_writes_dates(tmp_path):
    path = tmp_path / 'nested' / 'out.json'
    save_json(path, {'when': date(2026, 6, 10)})
    assert json.loads(path.read_text()) == {'when': '2026-06-10'}
    assert load_json(path) == {'when': '2026-06-10'}


def test_load_json_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_json(tmp_path / 'missing.json')
