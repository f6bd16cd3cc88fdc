"""Week result strategies for each league format.

Each format turns a week's approved scores into a WeekResult (a pure
computation over data read up front) and, separately, records that result in
the store. The season state machine claims the week between the two steps, so
nothing is written for a week that cannot be scored.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence

from pydantic import ValidationError

from .constants import FORMAT_STROKE, FORMAT_TEAM_MATCH, MEMBER_ACTIVE, SCORE_APPROVED
from .exceptions import MissingConfigurationError, NoScoresError
from .models import Champion, MatchupResult, RankedScore, WeekResult
from .schemas import League, Matchup, Member, Score, Team
from .standings import StandingsUpdater, compute_placements
from .store import DocumentStore, Increment
from .utils import week_key

logger = logging.getLogger('golfleague.formats')


def rank_scores(scores: Sequence[Score]) -> list[RankedScore]:
    """Approved scores ordered best (lowest net) first."""
    ranked = [
        RankedScore(
            user_id=s.user_id,
            display_name=s.display_name,
            net_score=s.net_score,
            gross_score=s.gross_score,
            avatar=s.avatar,
            course_name=s.course_name,
        )
        for s in scores
    ]
    ranked.sort(key=lambda r: r.net_score)
    return ranked


def resolve_matchup(
    matchup: Matchup, team1: Team, team2: Team, net_by_user: dict[str, float]
) -> MatchupResult:
    """
    Total each side's net scores and decide the matchup.

    Only members who posted a score count toward a side. Lower total wins;
    equal totals with both sides scored is a tie; if either side has no
    scored member there is no winner.
    """
    result = MatchupResult(
        team1_id=matchup.team1_id,
        team2_id=matchup.team2_id,
        team1_name=team1.name,
        team2_name=team2.name,
    )
    for member_id in team1.member_ids:
        if member_id in net_by_user:
            result.team1_score += net_by_user[member_id]
            result.team1_count += 1
    for member_id in team2.member_ids:
        if member_id in net_by_user:
            result.team2_score += net_by_user[member_id]
            result.team2_count += 1

    if result.contested:
        if result.team1_score < result.team2_score:
            result.winner_id, result.winner_name = team1.id, team1.name
        elif result.team2_score < result.team1_score:
            result.winner_id, result.winner_name = team2.id, team2.name
    return result


def pick_week_winner(results: Sequence[MatchupResult]) -> Optional[MatchupResult]:
    """The decided matchup whose winner posted the lowest total."""
    best = None
    for result in results:
        if not result.decided:
            continue
        if best is None or result.winner_score < best.winner_score:
            best = result
    return best


class WeekFormat(ABC):
    """Base class for league format strategies."""

    name = ''

    def __init__(self, store: DocumentStore):
        self.store = store

    def load_scores(self, league_id: str, week: int) -> list[Score]:
        """Approved scores for the week; malformed documents are skipped."""
        scores = []
        for doc in self.store.query_scores(league_id, week, [SCORE_APPROVED]):
            try:
                scores.append(Score.model_validate(doc))
            except ValidationError as e:
                logger.warning(f'Skipping malformed score {doc.get("id")} in {league_id}: {e}')
        return scores

    def load_teams(self, league_id: str) -> dict[str, Team]:
        return {
            team_id: Team.model_validate({**doc, 'id': team_id})
            for team_id, doc in self.store.list_teams(league_id).items()
        }

    def load_members(self, league_id: str, status: Optional[str] = None) -> dict[str, Member]:
        return {
            member_id: Member.model_validate({**doc, 'id': member_id})
            for member_id, doc in self.store.list_members(league_id, status=status).items()
        }

    def score_week(self, league: League, week: int, prize: float = 0) -> WeekResult:
        """
        Compute the week's result without writing anything.

        Raises:
            NoScoresError: If no approved scores exist for the week
            MissingConfigurationError: If the format lacks required setup
        """
        scores = self.load_scores(league.id, week)
        if not scores:
            raise NoScoresError(f'No approved scores for Week {week} in {league.name}')
        return self.compute(league, week, scores, prize)

    @abstractmethod
    def compute(self, league: League, week: int, scores: list[Score], prize: float) -> WeekResult:
        """Build the WeekResult from the week's approved scores."""

    @abstractmethod
    def record(self, league: League, result: WeekResult, now: datetime) -> None:
        """Persist the week result and its effect on standings."""

    @abstractmethod
    def find_champion(self, league: League) -> Optional[Champion]:
        """Top of the final standings."""


class StrokePlayFormat(WeekFormat):
    """Individual ranking by net score."""

    name = FORMAT_STROKE

    def compute(self, league, week, scores, prize):
        members = self.load_members(league.id)
        known = []
        for score in scores:
            if score.user_id in members:
                known.append(score)
            else:
                logger.warning(
                    f'Ignoring Week {week} score from {score.user_id}: not a member of {league.name}'
                )
        if not known:
            raise NoScoresError(f'No member scores for Week {week} in {league.name}')

        ranked = rank_scores(known)
        multiplier = league.multiplier_for(week)
        placements = compute_placements(ranked, multiplier)
        winner = ranked[0]

        return WeekResult(
            week=week,
            format=self.name,
            is_elevated=league.is_elevated(week),
            points_multiplier=multiplier,
            prize_awarded=prize,
            winner_id=winner.user_id,
            winner_name=winner.display_name,
            winner_avatar=winner.avatar,
            winner_score=winner.net_score,
            course_name=winner.course_name,
            standings=placements,
        )

    def record(self, league, result, now):
        self.store.set_week_result(league.id, result.week, result.to_document(now))
        StandingsUpdater(self.store).update(
            league.id, result.standings, result.week, result.points_multiplier
        )

    def find_champion(self, league):
        """
        Active member with the most points.

        Ties on points go to more weekly wins, then the lower average net
        score, then the lower member id.
        """
        members = self.load_members(league.id, status=MEMBER_ACTIVE).values()
        if not members:
            return None

        def rank(member):
            if not member.rounds_played:
                return (-member.total_points, -member.wins, float('inf'), member.id)
            average = member.total_net_score / member.rounds_played
            return (-member.total_points, -member.wins, average, member.id)

        top = min(members, key=rank)
        return Champion(id=top.id, name=top.display_name)


class TeamMatchFormat(WeekFormat):
    """Pairwise team matchups decided by combined net score."""

    name = FORMAT_TEAM_MATCH

    def compute(self, league, week, scores, prize):
        matchups = league.matchups_for(week)
        if not matchups:
            raise MissingConfigurationError(f'No matchups found for Week {week} in {league.name}')

        teams = self.load_teams(league.id)
        net_by_user = {s.user_id: s.net_score for s in scores}

        results = []
        for matchup in matchups:
            team1 = teams.get(matchup.team1_id)
            team2 = teams.get(matchup.team2_id)
            if team1 is None or team2 is None:
                logger.warning(
                    f'Skipping Week {week} matchup {matchup.team1_id} vs {matchup.team2_id}: '
                    f'unknown team'
                )
                continue
            results.append(resolve_matchup(matchup, team1, team2, net_by_user))

        if not results:
            raise MissingConfigurationError(
                f'No playable matchups for Week {week} in {league.name}'
            )

        winner = pick_week_winner(results)
        return WeekResult(
            week=week,
            format=self.name,
            is_elevated=league.is_elevated(week),
            points_multiplier=league.multiplier_for(week),
            prize_awarded=prize,
            winner_id=winner.winner_id if winner else None,
            winner_name=winner.winner_name if winner else None,
            winner_score=winner.winner_score if winner else None,
            matchups=results,
        )

    def record(self, league, result, now):
        self.store.set_week_result(league.id, result.week, result.to_document(now))

        key = week_key(result.week)
        teams = self.load_teams(league.id)
        win_points = league.points_per_win * result.points_multiplier
        tie_points = league.points_per_tie * result.points_multiplier

        def apply(team_id, outcome, points, score, fields):
            # The snapshot rides in the same update, so a retried week skips the team
            team = teams.get(team_id)
            if team is not None and key in team.weekly_results:
                logger.info(f'Team {team_id} already has {key} in {league.id}')
                return
            fields[f'weeklyResults.{key}'] = {'result': outcome, 'points': points, 'score': score}
            self.store.update_team(league.id, team_id, fields)

        for matchup in result.matchups:
            if matchup.decided:
                loser_score = (
                    matchup.team2_score if matchup.winner_id == matchup.team1_id else matchup.team1_score
                )
                apply(
                    matchup.winner_id, 'win', win_points, matchup.winner_score,
                    {'wins': Increment(1), 'points': Increment(win_points)},
                )
                apply(matchup.loser_id, 'loss', 0, loser_score, {'losses': Increment(1)})
            elif matchup.is_tie:
                for team_id in (matchup.team1_id, matchup.team2_id):
                    apply(
                        team_id, 'tie', tie_points, matchup.team1_score,
                        {'ties': Increment(1), 'points': Increment(tie_points)},
                    )
        logger.info(f'Recorded {len(result.matchups)} matchups for Week {result.week}')

    def find_champion(self, league):
        """Team with the most points; ties go to more wins, then the lower team id."""
        teams = self.load_teams(league.id).values()
        if not teams:
            return None
        top = min(teams, key=lambda t: (-t.points, -t.wins, t.id))
        return Champion(id=top.id, name=top.name)


FORMATS: dict[str, type[WeekFormat]] = {
    FORMAT_STROKE: StrokePlayFormat,
    FORMAT_TEAM_MATCH: TeamMatchFormat,
}


def get_format(league: League, store: DocumentStore) -> WeekFormat:
    """Strategy instance for the league's format."""
    return FORMATS[league.format](store)
