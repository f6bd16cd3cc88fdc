"""Validation functions for league setup and week results."""

from .constants import STATUS_UPCOMING
from .models import WeekResult
from .schemas import League


def validate_schedule(league: League) -> list[str]:
    """
    Check that a league can be scheduled at all.

    Checks:
    - A play day is set
    - Upcoming leagues have a start date

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    if not league.play_day:
        errors.append(f'{league.name} has no play day')
    if league.status == STATUS_UPCOMING and league.start_date is None:
        errors.append(f'{league.name} is upcoming but has no start date')
    return errors


def validate_reminder_config(league: League) -> list[str]:
    """
    Check that score reminders can be timed for a league.

    Returns:
        List of validation error messages (empty if valid)
    """
    if not league.tee_time:
        return [f'{league.name} has no tee time']
    hour = league.tee_hour()
    if hour is None or not (0 <= hour <= 23):
        return [f'{league.name} has an invalid tee time: {league.tee_time!r}']
    return []


def validate_reminder_hour(league: League, reminder_hour: int) -> list[str]:
    """
    Check that a league's reminder hour falls on its play day.

    A late tee time plus the round-length offset can land past 23:00, where
    the reminder window is never (or only partly) reached.

    Returns:
        List of warning messages (empty if no issues)
    """
    if reminder_hour > 23:
        return [
            f'{league.name} reminder hour {reminder_hour}:00 is past the end of the play day '
            f'(tee time {league.tee_time})'
        ]
    return []


def validate_week_config(league: League, week: int) -> list[str]:
    """
    Check that a week can be completed.

    Checks:
    - Week is within the season
    - Team-match leagues have matchups for the week, with no team playing twice

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    if week > league.total_weeks:
        errors.append(f'{league.name} Week {week} is past the final week ({league.total_weeks})')

    if league.is_team_match:
        matchups = league.matchups_for(week)
        if not matchups:
            errors.append(f'{league.name} has no matchups for Week {week}')

        seen = set()
        duplicates = set()
        for matchup in matchups:
            if matchup.team1_id == matchup.team2_id:
                errors.append(f'{league.name} Week {week} pairs {matchup.team1_id} with itself')
            for team_id in (matchup.team1_id, matchup.team2_id):
                if team_id in seen:
                    duplicates.add(team_id)
                seen.add(team_id)
        if duplicates:
            errors.append(
                f'{league.name} Week {week} schedules teams more than once: '
                f'{", ".join(sorted(duplicates))}'
            )

    return errors


def validate_week_result(result: WeekResult) -> list[str]:
    """
    Sanity-check a computed week result before it is recorded.

    Checks:
    - Winning net score in a plausible range (0 to 200)
    - Every placement earned at least one point
    - At least one team matchup was decided

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    if result.winner_score is not None and not (0 <= result.winner_score <= 200):
        warnings.append(
            f'Week {result.week} winning score {result.winner_score} is outside 0-200 '
            f'(check score entry)'
        )

    for placement in result.standings:
        if placement.points < 1:
            warnings.append(
                f'Week {result.week} placement {placement.placement} ({placement.display_name}) '
                f'earned {placement.points} points'
            )

    if result.matchups and not any(m.decided or m.is_tie for m in result.matchups):
        warnings.append(f'Week {result.week} has no decided matchups')

    return warnings
