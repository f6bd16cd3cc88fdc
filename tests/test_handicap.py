"""Unit tests for handicap stroke allocation and round aggregates."""

import pytest

from golfleague.course_data import generate_default_holes
from golfleague.exceptions import MissingConfigurationError
from golfleague.handicap import (
    adjusted_score,
    adjusted_scores,
    allocate_strokes,
    build_scorecard,
    calculate_course_handicap,
    round_totals,
    strokes_for_hole,
)
from golfleague.models import HoleInfo


class TestStrokeAllocation:
    """Tests for per-hole handicap strokes."""

    @pytest.mark.parametrize('holes_count', [9, 18])
    def test_total_strokes_equal_handicap(self, holes_count):
        """Strokes over all holes add up to the course handicap."""
        holes = generate_default_holes(holes_count)
        for handicap in range(0, 3 * holes_count + 1):
            strokes = allocate_strokes(holes, handicap, holes_count)
            assert sum(strokes) == handicap, f'H={handicap}, N={holes_count}'

    @pytest.mark.parametrize('holes_count', [9, 18])
    def test_harder_holes_never_get_fewer_strokes(self, holes_count):
        """Lower stroke index receives at least as many strokes as higher."""
        for handicap in range(0, 3 * holes_count + 1):
            by_index = [
                strokes_for_hole(si, handicap, holes_count) for si in range(1, holes_count + 1)
            ]
            assert by_index == sorted(by_index, reverse=True), f'H={handicap}'

    def test_twenty_handicap_on_eighteen_holes(self):
        """H=20: stroke index 1 and 2 get two strokes, the rest one."""
        assert strokes_for_hole(1, 20, 18) == 2
        assert strokes_for_hole(2, 20, 18) == 2
        assert strokes_for_hole(3, 20, 18) == 1
        assert strokes_for_hole(18, 20, 18) == 1

    def test_nine_hole_round_uses_nine_indexes(self):
        """On a 9-hole round, H=11 gives index 1-2 two strokes."""
        assert strokes_for_hole(1, 11, 9) == 2
        assert strokes_for_hole(2, 11, 9) == 2
        assert strokes_for_hole(3, 11, 9) == 1

    def test_zero_and_negative_handicap(self):
        """No strokes for scratch or plus handicaps."""
        assert strokes_for_hole(1, 0, 18) == 0
        assert strokes_for_hole(1, -3, 18) == 0

    def test_missing_stroke_index(self):
        """A hole without a stroke index gets no strokes."""
        assert strokes_for_hole(None, 20, 18) == 0
        assert strokes_for_hole(0, 20, 18) == 0


class TestAdjustedScores:
    """Tests for net per-hole scores and aggregates."""

    def test_adjusted_score_subtracts_strokes(self):
        assert adjusted_score(6, 1, 20, 18) == 4
        assert adjusted_score(5, 18, 20, 18) == 4

    def test_unscored_hole_stays_unscored(self):
        """None is propagated, never treated as zero."""
        assert adjusted_score(None, 1, 20, 18) is None

    def test_adjusted_scores_series(self):
        holes = generate_default_holes(9)
        adjusted = adjusted_scores([5, None, 4, 4, 4, 4, 4, 4, 4], holes, 9, 9)
        assert adjusted[0] == 4
        assert adjusted[1] is None
        assert adjusted[2] == 3

    def test_round_totals_complete(self):
        totals = round_totals([4] * 18, 18)
        assert (totals.front, totals.back, totals.total) == (36, 36, 72)

    def test_round_totals_missing_front_hole(self):
        """A missing front-nine hole voids the front and total, not the back."""
        values = [4] * 18
        values[2] = None
        totals = round_totals(values, 18)
        assert totals.front is None
        assert totals.back == 36
        assert totals.total is None

    def test_round_totals_short_series(self):
        """Holes not yet entered count as missing."""
        totals = round_totals([4] * 9, 18)
        assert totals.front == 36
        assert totals.back is None
        assert totals.total is None

    def test_nine_hole_round_has_no_back(self):
        totals = round_totals([4] * 9, 9)
        assert totals.front == 36
        assert totals.back is None
        assert totals.total == 36


class TestScorecard:
    """Tests for building a full scorecard."""

    def test_twenty_handicap_round_of_ninety(self):
        """Gross 90 with H=20 on 18 holes nets 70."""
        holes = generate_default_holes(18)
        card = build_scorecard([5] * 18, holes, 20, 18)
        assert sum(card.strokes) == 20
        assert card.strokes[0] == 2 and card.strokes[1] == 2
        assert all(s == 1 for s in card.strokes[2:])
        assert card.gross_totals.total == 90
        assert card.adjusted_totals.total == 70
        assert card.is_complete

    def test_incomplete_round(self):
        holes = generate_default_holes(18)
        gross = [5] * 17 + [None]
        card = build_scorecard(gross, holes, 20, 18)
        assert card.adjusted[17] is None
        assert card.adjusted_totals.front == 34
        assert card.adjusted_totals.back is None
        assert card.adjusted_totals.total is None
        assert not card.is_complete

    def test_course_totals(self):
        card = build_scorecard([4] * 18, generate_default_holes(18), 0, 18)
        assert card.par.total == 72
        assert card.yardage.front == 3600
        assert card.yardage.total == 7200

    def test_missing_stroke_index_raises(self):
        holes = generate_default_holes(18)
        holes[4] = HoleInfo(number=5, par=4, yardage=380, stroke_index=None)
        with pytest.raises(MissingConfigurationError, match='5'):
            build_scorecard([4] * 18, holes, 10, 18)

    def test_too_few_holes_raises(self):
        with pytest.raises(MissingConfigurationError):
            build_scorecard([4] * 18, generate_default_holes(9), 10, 18)


class TestCourseHandicap:
    """Tests for the USGA course handicap formula."""

    def test_neutral_slope(self):
        assert calculate_course_handicap(10.0, 113) == 10

    def test_steeper_slope(self):
        # 18.4 * 130 / 113 = 21.17
        assert calculate_course_handicap(18.4, 130) == 21

    def test_nine_holes_halved(self):
        # 10 * 125 / 113 / 2 = 5.53
        assert calculate_course_handicap(10.0, 125, holes_count=9) == 6

    def test_half_rounds_up(self):
        assert calculate_course_handicap(4.5, 113) == 5
