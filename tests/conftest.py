"""Shared fixtures and document builders for league tests."""

from datetime import datetime

import pytest

from golfleague.constants import SCORE_REJECTED
from golfleague.store import InMemoryStore

# Wednesday 2026-06-10, local to the processor time zone
WEDNESDAY_6AM = datetime(2026, 6, 10, 6, 0)


def make_league(**overrides):
    league = {
        'name': 'Tuesday Night Golf',
        'format': 'stroke',
        'holes': 18,
        'totalWeeks': 3,
        'playDay': 'tuesday',
        'teeTime': '08:00',
        'startDate': '2026-05-26',
        'status': 'active',
        'currentWeek': 1,
    }
    league.update(overrides)
    return league


def make_member(name, **overrides):
    member = {'displayName': name, 'status': 'active', 'totalPoints': 0}
    member.update(overrides)
    return member


def make_score(user_id, week, net, gross=None, status='approved', **overrides):
    score = {
        'userId': user_id,
        'week': week,
        'displayName': user_id.title(),
        'netScore': net,
        'grossScore': gross if gross is not None else net + 12,
        'status': status,
    }
    score.update(overrides)
    return score


@pytest.fixture
def stroke_store():
    """Active stroke play league, week 1 played yesterday (Tuesday)."""
    return InMemoryStore(
        {
            'leagues': {'L1': make_league()},
            'members': {
                'L1': {
                    'alice': make_member('Alice'),
                    'bob': make_member('Bob'),
                    'carol': make_member('Carol'),
                    'dave': make_member('Dave', status='inactive'),
                }
            },
            'scores': {
                'L1': {
                    's1': make_score('alice', 1, 70, 85),
                    's2': make_score('bob', 1, 72, 80),
                    's3': make_score('carol', 1, 68, 90),
                    's4': make_score('bob', 1, 60, 70, status=SCORE_REJECTED),
                }
            },
        }
    )


@pytest.fixture
def team_store():
    """Active team match league with two matchups in week 1."""
    league = make_league(
        name='Two Man Scramble',
        format='2v2',
        weeklyMatchups={
            '1': [
                {'team1Id': 'x', 'team2Id': 'y'},
                {'team1Id': 'z', 'team2Id': 'w'},
            ],
            '2': [
                {'team1Id': 'x', 'team2Id': 'z'},
                {'team1Id': 'y', 'team2Id': 'w'},
            ],
        },
        pointsPerWin=3,
        pointsPerTie=1,
    )
    members = {
        name: make_member(name.title())
        for name in ('ann', 'art', 'ben', 'bo', 'cal', 'cy', 'dan', 'di')
    }
    teams = {
        'x': {'name': 'Team X', 'memberIds': ['ann', 'art']},
        'y': {'name': 'Team Y', 'memberIds': ['ben', 'bo']},
        'z': {'name': 'Team Z', 'memberIds': ['cal', 'cy']},
        'w': {'name': 'Team W', 'memberIds': ['dan', 'di']},
    }
    scores = {
        # X: 72 + 72 = 144, Y: 70 + 74 = 144 -> tie
        's1': make_score('ann', 1, 72),
        's2': make_score('art', 1, 72),
        's3': make_score('ben', 1, 70),
        's4': make_score('bo', 1, 74),
        # Z: 68 + 70 = 138, W: 75 + 74 = 149 -> Z wins
        's5': make_score('cal', 1, 68),
        's6': make_score('cy', 1, 70),
        's7': make_score('dan', 1, 75),
        's8': make_score('di', 1, 74),
    }
    return InMemoryStore(
        {
            'leagues': {'T1': league},
            'members': {'T1': members},
            'teams': {'T1': teams},
            'scores': {'T1': scores},
        }
    )
