"""Tests for the process_leagues command line entry point."""

import json

import pytest

from golfleague.config import clear_config_cache
from process_leagues import main

from conftest import make_league, make_member, make_score


@pytest.fixture
def store_file(tmp_path):
    path = tmp_path / 'store.json'
    path.write_text(json.dumps({
        'leagues': {'L1': make_league()},
        'members': {'L1': {'a': make_member('A'), 'b': make_member('B')}},
        'scores': {'L1': {'s1': make_score('a', 1, 70), 's2': make_score('b', 1, 74)}},
    }))
    clear_config_cache()
    return path


def test_run_saves_store(store_file, capsys):
    assert main(['--store', str(store_file), '--now', '2026-06-10T06:00', '--quiet']) == 0

    data = json.loads(store_file.read_text())
    assert data['leagues']['L1']['currentWeek'] == 2
    assert data['leagues']['L1']['_lastProcessedWeek'] == 1
    assert len(data['week_results']['L1']) == 1
    assert 'week_completion: 1 processed' in capsys.readouterr().out


def test_dry_run_leaves_store(store_file):
    before = store_file.read_text()
    assert main(['--store', str(store_file), '--now', '2026-06-10T06:00', '--dry-run', '-q']) == 0
    assert store_file.read_text() == before


def test_missing_store(tmp_path, capsys):
    assert main(['--store', str(tmp_path / 'none.json'), '-q']) == 1
    assert 'Store file not found' in capsys.readouterr().out


def test_invalid_now(store_file):
    with pytest.raises(SystemExit):
        main(['--store', str(store_file), '--now', 'yesterday'])
