"""League season state machine.

    upcoming --(start date tomorrow)--> upcoming   "starting tomorrow" notice
    upcoming --(start date today)-----> active     week 1 opens
    active   --(play day, after round)-> active    score reminders
    active   --(day after play day)----> active    week scored, next week opens
    active   --(final week scored)-----> completed champion crowned

Every transition is applied through a guarded league update: the store only
writes when the status and marker fields still hold the values this run read.
Notifications are sent only after the guard write succeeds, so an overlapping
or repeated run that reads the new marker does nothing. Week completion holds
an expiring in-progress claim while it records standings and writes
`_lastProcessedWeek` last, so a run that fails part way is finished by the
next one.
A cancelled league matches no guard and is never touched.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from .constants import (
    MEMBER_ACTIVE,
    NOTIFY_MATCHUP,
    NOTIFY_SCORE_REMINDER,
    NOTIFY_SEASON_COMPLETE,
    NOTIFY_SEASON_STARTED,
    NOTIFY_SEASON_STARTING,
    NOTIFY_WEEK_COMPLETE,
    NOTIFY_WEEK_START,
    SCORE_APPROVED,
    SCORE_PENDING,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STATUS_UPCOMING,
)
from .exceptions import MissingConfigurationError
from .formats import TeamMatchFormat, get_format
from .models import Champion, Purse, RunClock, WeekResult
from .notifications import NotificationEmitter, generate_league_message, generate_matchup_message
from .purse import calculate_season_prize, calculate_week_prize, format_prize, get_league_purse
from .schemas import League, ProcessorConfig
from .store import DocumentStore
from .utils import reminder_key
from .validators import (
    validate_reminder_config,
    validate_reminder_hour,
    validate_schedule,
    validate_week_config,
    validate_week_result,
)

logger = logging.getLogger('golfleague.season')


class SeasonStateMachine:
    """Drives one league at a time through its season phases."""

    def __init__(self, store: DocumentStore, clock: RunClock, config: Optional[ProcessorConfig] = None):
        self.store = store
        self.clock = clock
        self.config = config or ProcessorConfig()
        self.notifier = NotificationEmitter(store, clock.now, self.config.notification_ttl_days)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def active_member_ids(self, league_id: str) -> list[str]:
        return list(self.store.list_members(league_id, status=MEMBER_ACTIVE))

    def purse_for(self, league: League) -> Optional[Purse]:
        if not self.config.purse_enabled:
            return None
        return get_league_purse(league)

    def reminder_hour(self, league: League) -> Optional[int]:
        tee_hour = league.tee_hour()
        if tee_hour is None:
            return None
        offset = self.config.reminder_offset_9 if league.holes == 9 else self.config.reminder_offset_18
        return tee_hour + offset

    def _notify_league(self, league: League, type: str, message: str, **context) -> int:
        context.setdefault('actor_avatar', league.avatar)
        return self.notifier.emit(
            self.active_member_ids(league.id),
            type,
            message,
            league_id=league.id,
            league_name=league.name,
            **context,
        )

    # ------------------------------------------------------------------
    # Season start
    # ------------------------------------------------------------------

    def notify_starting_tomorrow(self, league: League) -> bool:
        """Announce a season that starts tomorrow, once per day."""
        today_key = self.clock.today_key
        if league.status != STATUS_UPCOMING or league.start_date != self.clock.tomorrow:
            return False
        if league.notified_starting == today_key:
            logger.info(f'Already notified for {league.name} starting tomorrow')
            return False

        claimed = self.store.update_league(
            league.id,
            {'_notifiedStarting': today_key},
            expect={'status': STATUS_UPCOMING, '_notifiedStarting': league.notified_starting},
        )
        if not claimed:
            logger.info(f'{league.name} starting notice claimed by another run')
            return False

        count = self._notify_league(
            league,
            NOTIFY_SEASON_STARTING,
            generate_league_message(NOTIFY_SEASON_STARTING, league_name=league.name),
        )
        logger.info(f'Sent "starting tomorrow" for {league.name} to {count} members')
        return True

    def activate(self, league: League) -> bool:
        """Open week 1 of a season whose start date is today."""
        if league.status != STATUS_UPCOMING or league.start_date != self.clock.today:
            return False
        for problem in validate_schedule(league):
            logger.warning(f'Activating with incomplete setup: {problem}')

        claimed = self.store.update_league(
            league.id,
            {
                'status': STATUS_ACTIVE,
                'currentWeek': 1,
                '_activatedOn': self.clock.today_key,
                '_updatedByProcessor': True,
            },
            expect={'status': STATUS_UPCOMING},
        )
        if not claimed:
            logger.info(f'{league.name} already activated')
            return False

        count = self._notify_league(
            league,
            NOTIFY_SEASON_STARTED,
            generate_league_message(NOTIFY_SEASON_STARTED, league_name=league.name),
            week_number=1,
        )
        logger.info(f'League activated: {league.name}, notified {count} members')
        return True

    # ------------------------------------------------------------------
    # Score reminders
    # ------------------------------------------------------------------

    def in_reminder_window(self, league: League) -> bool:
        reminder_hour = self.reminder_hour(league)
        if reminder_hour is None:
            return False
        return abs(self.clock.hour - reminder_hour) <= self.config.reminder_tolerance_hours

    def send_score_reminders(self, league: League) -> bool:
        """
        Remind members who have not posted this week's score.

        Raises:
            MissingConfigurationError: If the league has no usable tee time
        """
        if league.status != STATUS_ACTIVE or league.play_day != self.clock.today_name:
            return False
        problems = validate_reminder_config(league)
        if problems:
            raise MissingConfigurationError('; '.join(problems))
        for warning in validate_reminder_hour(league, self.reminder_hour(league)):
            logger.warning(warning)
        if not self.in_reminder_window(league):
            return False

        week = league.current_week
        key = reminder_key(self.clock.today, week)
        if league.last_score_reminder == key:
            logger.info(f'Already sent reminders for {league.name} Week {week} today')
            return False

        posted = {
            doc.get('userId')
            for doc in self.store.query_scores(league.id, week, [SCORE_APPROVED, SCORE_PENDING])
        }
        pending = [m for m in self.active_member_ids(league.id) if m not in posted]

        claimed = self.store.update_league(
            league.id,
            {'_lastScoreReminder': key},
            expect={
                'status': STATUS_ACTIVE,
                '_lastScoreReminder': league.last_score_reminder,
            },
        )
        if not claimed:
            logger.info(f'{league.name} Week {week} reminders claimed by another run')
            return False

        elevated = league.is_elevated(week)
        count = self.notifier.emit(
            pending,
            NOTIFY_SCORE_REMINDER,
            generate_league_message(
                NOTIFY_SCORE_REMINDER,
                league_name=league.name,
                week_number=week,
                is_elevated=elevated,
            ),
            actor_avatar=league.avatar,
            league_id=league.id,
            league_name=league.name,
            week_number=week,
        )
        logger.info(
            f'Sent {count} score reminders for {league.name}{" (elevated)" if elevated else ""}'
        )
        return True

    # ------------------------------------------------------------------
    # Week completion
    # ------------------------------------------------------------------

    def claim_is_live(self, league: League) -> bool:
        """Whether another run holds an unexpired claim on the current week."""
        if league.processing_week != league.current_week or not league.processing_since:
            return False
        try:
            since = datetime.fromisoformat(league.processing_since)
        except ValueError:
            return False
        now = self.clock.now
        if (since.tzinfo is None) != (now.tzinfo is None):
            since = since.replace(tzinfo=now.tzinfo)
        age = now - since
        return age < timedelta(minutes=self.config.processing_lease_minutes)

    def complete_week(self, league: League) -> bool:
        """
        Score the current week, then advance or finish the season.

        The week is claimed with an in-progress marker before anything is
        recorded. Recording skips members and teams that already hold the
        week, and `_lastProcessedWeek` is written last, together with the
        advance or completion. A run that fails part way releases its claim
        (or lets it expire) and the next run finishes the week.

        Raises:
            NoScoresError: If nobody has an approved score (week retried next run)
            MissingConfigurationError: If the week cannot be scored as configured
        """
        if league.status != STATUS_ACTIVE or league.play_day != self.clock.yesterday_name:
            return False
        week = league.current_week
        if league.last_processed_week == week:
            return self.finish_processed_week(league)
        if self.claim_is_live(league):
            logger.info(f'{league.name} Week {week} is being processed by another run')
            return False

        problems = validate_week_config(league, week)
        if problems:
            raise MissingConfigurationError('; '.join(problems))

        strategy = get_format(league, self.store)
        purse = self.purse_for(league)
        elevated = league.is_elevated(week)
        prize = calculate_week_prize(purse, elevated)

        logger.info(
            f'Processing Week {week} for {league.name} ({league.format})'
            f'{" ELEVATED" if elevated else ""}'
            f'{f" prize {format_prize(prize, purse.currency)}" if purse and prize else ""}'
        )

        result = strategy.score_week(league, week, prize)
        for warning in validate_week_result(result):
            logger.warning(f'{league.name}: {warning}')

        token = self.clock.now.isoformat()
        claimed = self.store.update_league(
            league.id,
            {'_processingWeek': week, '_processingSince': token},
            expect={
                'status': STATUS_ACTIVE,
                '_lastProcessedWeek': league.last_processed_week,
                '_processingWeek': league.processing_week,
                '_processingSince': league.processing_since,
            },
        )
        if not claimed:
            logger.info(f'{league.name} Week {week} claimed by another run')
            return False
        if league.processing_week == week:
            logger.warning(f'Resuming Week {week} for {league.name} after an abandoned run')

        try:
            strategy.record(league, result, self.clock.now)
            finished = week >= league.total_weeks
            if finished:
                champion = strategy.find_champion(league)
                fields = self.season_complete_fields(champion, purse)
            else:
                champion = None
                fields = {'currentWeek': week + 1}
            applied = self.store.update_league(
                league.id,
                {
                    **fields,
                    '_lastProcessedWeek': week,
                    '_processingWeek': None,
                    '_processingSince': None,
                    '_updatedByProcessor': True,
                },
                expect={'status': STATUS_ACTIVE, '_processingSince': token},
            )
        except Exception:
            self.release_claim(league, token)
            raise
        if not applied:
            logger.warning(f'{league.name} Week {week} claim was taken over before it finished')
            return False

        self._announce_week_result(league, result, purse)
        if finished:
            self.announce_season_complete(league, champion, purse)
        else:
            self.announce_week_start(league, week + 1, purse)
        return True

    def finish_processed_week(self, league: League) -> bool:
        """
        Advance or complete a league whose current week is marked processed.

        A league is left in this state when the week's standings were recorded
        but the week was never advanced. Standings are not touched again.
        """
        week = league.current_week
        stored_week = (self.store.get_league(league.id) or {}).get('currentWeek')
        if (stored_week or 1) != week:
            logger.info(f'Already processed Week {week} for {league.name}')
            return False

        purse = self.purse_for(league)
        finished = week >= league.total_weeks
        if finished:
            champion = get_format(league, self.store).find_champion(league)
            fields = self.season_complete_fields(champion, purse)
        else:
            champion = None
            fields = {'currentWeek': week + 1}

        logger.warning(f'Week {week} of {league.name} was processed but never advanced')
        applied = self.store.update_league(
            league.id,
            {**fields, '_updatedByProcessor': True},
            expect={
                'status': STATUS_ACTIVE,
                '_lastProcessedWeek': week,
                'currentWeek': stored_week,
            },
        )
        if not applied:
            logger.info(f'Already processed Week {week} for {league.name}')
            return False

        if finished:
            self.announce_season_complete(league, champion, purse)
        else:
            self.announce_week_start(league, week + 1, purse)
        return True

    def release_claim(self, league: League, token: str) -> None:
        """Drop this run's claim so the next run can retry the week."""
        try:
            self.store.update_league(
                league.id,
                {'_processingWeek': None, '_processingSince': None},
                expect={'_processingSince': token},
            )
        except Exception:
            logger.exception(
                f'Could not release Week {league.current_week} claim for {league.name}; '
                f'it expires after {self.config.processing_lease_minutes} minutes'
            )

    def _announce_week_result(self, league: League, result: WeekResult, purse: Optional[Purse]) -> None:
        currency = purse.currency if purse else self.config.default_currency
        is_team = bool(result.matchups)
        actor_name = result.winner_name or ('A team' if is_team else 'Someone')

        message = generate_league_message(
            NOTIFY_WEEK_COMPLETE,
            league_name=league.name,
            week_number=result.week,
            actor_name=actor_name,
            net_score=result.winner_score,
            is_elevated=result.is_elevated,
            prize_amount=result.prize_awarded,
            currency=currency,
        )
        if is_team:
            self._notify_league(
                league,
                NOTIFY_WEEK_COMPLETE,
                message,
                actor_name=actor_name,
                week_number=result.week,
                team_name=result.winner_name,
            )
        else:
            self._notify_league(
                league,
                NOTIFY_WEEK_COMPLETE,
                message,
                actor_id=result.winner_id,
                actor_name=actor_name,
                actor_avatar=result.winner_avatar or league.avatar,
                week_number=result.week,
            )
        logger.info(
            f'Week {result.week} winner in {league.name}: {actor_name}'
            f'{f" ({result.winner_score} net)" if result.winner_score is not None else ""}'
        )

    def announce_week_start(self, league: League, next_week: int, purse: Optional[Purse]) -> None:
        """Announce the newly opened week (and its matchups)."""
        elevated = league.is_elevated(next_week)
        self._notify_league(
            league,
            NOTIFY_WEEK_START,
            generate_league_message(
                NOTIFY_WEEK_START,
                league_name=league.name,
                week_number=next_week,
                is_elevated=elevated,
                prize_amount=calculate_week_prize(purse, elevated),
                currency=purse.currency if purse else self.config.default_currency,
                multiplier=league.elevated_multiplier,
            ),
            week_number=next_week,
        )
        if league.is_team_match:
            self.announce_matchups(league, next_week)

        logger.info(f'Advanced {league.name} to Week {next_week}{" ELEVATED" if elevated else ""}')

    def announce_matchups(self, league: League, week: int) -> int:
        """Tell each team's members who they play this week."""
        matchups = league.matchups_for(week)
        if not matchups:
            logger.warning(f'No matchups scheduled for {league.name} Week {week}')
            return 0

        teams = TeamMatchFormat(self.store).load_teams(league.id)
        elevated = league.is_elevated(week)
        count = 0
        for matchup in matchups:
            team1 = teams.get(matchup.team1_id)
            team2 = teams.get(matchup.team2_id)
            if team1 is None or team2 is None:
                continue
            message = generate_matchup_message(team1.name, team2.name, week, elevated)
            for team in (team1, team2):
                count += self.notifier.emit(
                    team.member_ids,
                    NOTIFY_MATCHUP,
                    message,
                    actor_avatar=league.avatar,
                    league_id=league.id,
                    league_name=league.name,
                    week_number=week,
                    team_name=team.name,
                )
        return count

    def season_complete_fields(self, champion: Optional[Champion], purse: Optional[Purse]) -> dict:
        """League fields that close the season."""
        prize = calculate_season_prize(purse)
        return {
            'status': STATUS_COMPLETED,
            'completedAt': self.clock.now.isoformat(),
            'championId': champion.id if champion else None,
            'championName': champion.name if champion else None,
            'championshipPurse': prize if prize > 0 else None,
        }

    def announce_season_complete(
        self, league: League, champion: Optional[Champion], purse: Optional[Purse]
    ) -> None:
        """Crown the champion in every member's notifications."""
        prize = calculate_season_prize(purse)
        champion_name = champion.name if champion else 'The Champion'
        self._notify_league(
            league,
            NOTIFY_SEASON_COMPLETE,
            generate_league_message(
                NOTIFY_SEASON_COMPLETE,
                league_name=league.name,
                actor_name=champion_name,
                prize_amount=prize,
                currency=purse.currency if purse else self.config.default_currency,
            ),
            actor_id=champion.id if champion else None,
            actor_name=champion_name,
        )
        logger.info(
            f'Season complete for {league.name}! Champion: {champion_name}'
            f'{f" prize {format_prize(prize, purse.currency)}" if purse and prize else ""}'
        )
