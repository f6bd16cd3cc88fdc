"""Handicap stroke allocation and round aggregation."""

from typing import List, Optional, Sequence

from .constants import STANDARD_SLOPE
from .exceptions import MissingConfigurationError
from .models import HoleInfo, RoundTotals, Scorecard
from .utils import round_half_up


def calculate_course_handicap(
    handicap_index: float, slope_rating: float, holes_count: int = 18
) -> int:
    """
    Convert a handicap index into a course handicap.

    Formula (USGA):
        Course Handicap = Handicap Index x (Slope Rating / 113)
        Halved for 9-hole rounds, then rounded to the nearest stroke.
    """
    course_handicap = handicap_index * (slope_rating / STANDARD_SLOPE)
    if holes_count <= 9:
        course_handicap = course_handicap / 2
    return round_half_up(course_handicap)


def strokes_for_hole(
    stroke_index: Optional[int], course_handicap: int, holes_count: int
) -> int:
    """
    Number of handicap strokes a player receives on one hole.

    Every hole gets floor(H / N) strokes; holes whose stroke index is at or
    below H mod N get one more. For an 18-hole round with H = 20, every hole
    gets 1 stroke and stroke indexes 1 and 2 get a second.

    A missing index or a handicap of zero or less gives no strokes.
    """
    if not stroke_index or stroke_index <= 0:
        return 0
    if course_handicap <= 0:
        return 0

    max_index = 9 if holes_count == 9 else 18
    full_passes, remainder = divmod(course_handicap, max_index)

    strokes = full_passes
    if stroke_index <= remainder:
        strokes += 1
    return strokes


def allocate_strokes(
    holes: Sequence[HoleInfo], course_handicap: int, holes_count: int
) -> List[int]:
    """Strokes received on each of the first holes_count holes."""
    return [
        strokes_for_hole(hole.stroke_index, course_handicap, holes_count)
        for hole in holes[:holes_count]
    ]


def adjusted_score(
    gross: Optional[int], stroke_index: Optional[int], course_handicap: int, holes_count: int
) -> Optional[int]:
    """Net score for one hole; an unscored hole stays unscored."""
    if gross is None:
        return None
    return gross - strokes_for_hole(stroke_index, course_handicap, holes_count)


def adjusted_scores(
    gross: Sequence[Optional[int]],
    holes: Sequence[HoleInfo],
    course_handicap: int,
    holes_count: int,
) -> List[Optional[int]]:
    adjusted = []
    for idx, score in enumerate(gross):
        stroke_index = holes[idx].stroke_index if idx < len(holes) else None
        adjusted.append(adjusted_score(score, stroke_index, course_handicap, holes_count))
    return adjusted


def sum_if_complete(values: Sequence[Optional[int]]) -> Optional[int]:
    """Sum of values, or None if any value is missing."""
    if any(v is None for v in values):
        return None
    return sum(values)  # type: ignore[arg-type]


def round_totals(values: Sequence[Optional[int]], holes_count: int) -> RoundTotals:
    """
    Front-half, back-half and total for a per-hole series.

    The back half only exists for 18-hole rounds. Any part containing an
    unscored hole is None, never zero.
    """
    values = list(values[:holes_count])
    if len(values) < holes_count:
        values.extend([None] * (holes_count - len(values)))

    front = sum_if_complete(values[:9])
    back = sum_if_complete(values[9:18]) if holes_count == 18 else None
    return RoundTotals(front=front, back=back, total=sum_if_complete(values))


def build_scorecard(
    gross: Sequence[Optional[int]],
    holes: Sequence[HoleInfo],
    course_handicap: int,
    holes_count: int,
) -> Scorecard:
    """
    Apply a course handicap to a round.

    Raises:
        MissingConfigurationError: If holes are missing or any hole has no
            stroke index
    """
    if holes_count not in (9, 18):
        raise ValueError(f'Holes per round must be 9 or 18, got {holes_count}')
    if len(holes) < holes_count:
        raise MissingConfigurationError(
            f'Course data has {len(holes)} holes, round needs {holes_count}'
        )
    missing = [h.number for h in holes[:holes_count] if not h.stroke_index]
    if missing:
        raise MissingConfigurationError(
            f'No stroke index for holes: {", ".join(str(n) for n in missing)}'
        )

    gross = list(gross[:holes_count])
    gross.extend([None] * (holes_count - len(gross)))
    adjusted = adjusted_scores(gross, holes, course_handicap, holes_count)

    return Scorecard(
        course_handicap=course_handicap,
        holes_count=holes_count,
        gross=gross,
        strokes=allocate_strokes(holes, course_handicap, holes_count),
        adjusted=adjusted,
        yardage=round_totals([h.yardage for h in holes], holes_count),
        par=round_totals([h.par for h in holes], holes_count),
        gross_totals=round_totals(gross, holes_count),
        adjusted_totals=round_totals(adjusted, holes_count),
    )
