"""Cumulative member standings.

A week's ranked results are applied to each member's running totals, then the
league-wide positions are recomputed from the updated totals.

Points:
    - Rank i (0-based) of T scored members earns max(T - i, 1) base points
    - Base points are scaled by the week's multiplier and rounded
    - Rank 0 is the week's winner

Positions:
    - Ordered by cumulative points, highest first
    - Equal totals share a position, and the next distinct total takes its
      index in the ordering: points [50, 50, 40] give positions [1, 1, 3]
"""

import logging
from typing import Optional, Sequence

from .constants import MEMBER_ACTIVE
from .models import Placement, RankedScore
from .schemas import Member
from .store import DocumentStore, Increment
from .utils import round_half_up, week_key

logger = logging.getLogger('golfleague.standings')


def compute_placements(ranked: Sequence[RankedScore], multiplier: float = 1) -> list[Placement]:
    """
    Turn a week's ranking (best net score first) into placements with points.

    Args:
        ranked: Scores sorted ascending by net score
        multiplier: Point multiplier for the week (elevated weeks > 1)

    Returns:
        Placements in ranking order
    """
    total = len(ranked)
    placements = []
    for i, score in enumerate(ranked):
        base_points = max(total - i, 1)
        placements.append(
            Placement(
                user_id=score.user_id,
                display_name=score.display_name,
                placement=i + 1,
                points=round_half_up(base_points * multiplier),
                net_score=score.net_score,
                gross_score=score.gross_score,
            )
        )
    return placements


def assign_positions(totals: Sequence[tuple[str, float]]) -> dict[str, int]:
    """
    Shared-rank positions for (member_id, total_points) pairs.

    Returns:
        Dict mapping member id to position (1 = leader)
    """
    ordered = sorted(totals, key=lambda t: t[1], reverse=True)
    positions: dict[str, int] = {}
    last_points: Optional[float] = None
    last_position = 0
    for index, (member_id, points) in enumerate(ordered):
        if last_points is None or points != last_points:
            last_position = index + 1
            last_points = points
        positions[member_id] = last_position
    return positions


class StandingsUpdater:
    """Applies week placements to member documents in the store."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def apply_week(self, league_id: str, placements: Sequence[Placement], week: int) -> int:
        """
        Increment each placed member's totals and record the week snapshot.

        The snapshot is written in the same update as the increments, so a
        member that already holds this week's snapshot is skipped. A retried
        week never counts a member twice.

        Returns:
            Number of members updated
        """
        key = week_key(week)
        members = self.store.list_members(league_id)
        applied = 0
        for placement in placements:
            if key in (members.get(placement.user_id, {}).get('weeklyResults') or {}):
                logger.info(f'{placement.user_id} already has {key} in {league_id}')
                continue
            self.store.update_member(
                league_id,
                placement.user_id,
                {
                    'totalPoints': Increment(placement.points),
                    'roundsPlayed': Increment(1),
                    'totalNetScore': Increment(placement.net_score),
                    'totalGrossScore': Increment(placement.gross_score),
                    'wins': Increment(1 if placement.placement == 1 else 0),
                    'lastWeekPlacement': placement.placement,
                    f'weeklyResults.{key}': {
                        'placement': placement.placement,
                        'points': placement.points,
                        'netScore': placement.net_score,
                        'grossScore': placement.gross_score,
                    },
                },
            )
            applied += 1
        return applied

    def update_positions(self, league_id: str, week: int) -> dict[str, int]:
        """
        Recompute current positions of all active members from stored totals.

        Each member's previous position is the current position it held
        before this week's update. Re-ranking the same week again keeps
        that previous position.
        """
        members = [
            Member.model_validate({**doc, 'id': member_id})
            for member_id, doc in self.store.list_members(league_id, status=MEMBER_ACTIVE).items()
        ]
        positions = assign_positions([(m.id, m.total_points) for m in members])

        for member in members:
            position = positions[member.id]
            if member.position_week == week:
                previous = member.previous_position or position
            else:
                previous = member.current_position or position
            self.store.update_member(
                league_id,
                member.id,
                {'currentPosition': position, 'previousPosition': previous, 'positionWeek': week},
            )
        return positions

    def update(
        self, league_id: str, placements: Sequence[Placement], week: int, multiplier: float = 1
    ) -> dict[str, int]:
        """Apply a week, then re-rank the league."""
        self.apply_week(league_id, placements, week)
        positions = self.update_positions(league_id, week)
        logger.info(
            f'Updated standings for {len(positions)} members ({multiplier}x points, week {week})'
        )
        return positions
