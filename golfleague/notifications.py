"""League notification messages and record emission."""

import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from .constants import (
    NOTIFICATION_TTL_DAYS,
    NOTIFY_SCORE_REMINDER,
    NOTIFY_SEASON_COMPLETE,
    NOTIFY_SEASON_STARTED,
    NOTIFY_SEASON_STARTING,
    NOTIFY_WEEK_COMPLETE,
    NOTIFY_WEEK_START,
)
from .models import Notification
from .purse import format_prize
from .store import DocumentStore

logger = logging.getLogger('golfleague.notifications')

ELEVATED_MEDAL = '🏅'


def _number(value: Optional[float]) -> str:
    if value is None:
        return ''
    return str(int(value)) if float(value).is_integer() else str(value)


def generate_league_message(
    type: str,
    league_name: Optional[str] = None,
    week_number: Optional[int] = None,
    actor_name: Optional[str] = None,
    net_score: Optional[float] = None,
    is_elevated: bool = False,
    prize_amount: float = 0,
    currency: str = 'USD',
    multiplier: Optional[float] = None,
) -> str:
    """
    User-facing text for a league event.

    Args:
        type: Notification type (one of the NOTIFY_* constants)
        league_name: League display name
        week_number: Week the event refers to
        actor_name: Winner or champion name
        net_score: Winning net score (week complete)
        is_elevated: Whether the week is an elevated week
        prize_amount: Prize attached to the event (0 for none)
        currency: Prize currency code
        multiplier: Elevated point multiplier (week start)

    Returns:
        Message string
    """
    league = league_name or 'your league'
    week = _number(week_number)
    prize = format_prize(prize_amount, currency)
    prize_str = f' 💰 {prize} prize' if prize else ''
    elevated_prefix = f'{ELEVATED_MEDAL} ' if is_elevated else ''
    elevated_label = 'Elevated ' if is_elevated else ''

    if type == NOTIFY_SCORE_REMINDER:
        if is_elevated:
            return f"{ELEVATED_MEDAL} Don't forget your Elevated Week {week} score for {league}!"
        return f"Don't forget to post your Week {week} score for {league}!"

    if type == NOTIFY_SEASON_STARTING:
        return f'{league_name or "Your league"} kicks off tomorrow! Get ready 🏌️'

    if type == NOTIFY_SEASON_STARTED:
        return f'Week 1 is live in {league}! Post your first score'

    if type == NOTIFY_SEASON_COMPLETE:
        return (
            f'Congratulations to {actor_name or "the champion"} - Season Champion of '
            f'{league_name or "the league"}! 🏆{prize_str}'
        )

    if type == NOTIFY_WEEK_START:
        if is_elevated:
            points = f'{_number(multiplier or 2)}x points'
            preview = f' • {prize} prize' if prize else ''
            return (
                f'{ELEVATED_MEDAL} Elevated Week {week} is now open in {league}! '
                f'{points}{preview} 🏌️'
            )
        preview = f' {prize} prize up for grabs!' if prize else ''
        return f'Week {week} is now open in {league}!{preview} 🏌️'

    if type == NOTIFY_WEEK_COMPLETE:
        score = f' with {_number(net_score)} net' if net_score else ''
        return (
            f'{elevated_prefix}{actor_name or "Someone"} wins {elevated_label}Week {week}'
            f'{score}!{prize_str or " 🏆"}'
        )

    return f'League update for {league}'


def generate_matchup_message(
    team1_name: str, team2_name: str, week_number: int, is_elevated: bool = False
) -> str:
    tag = f'{ELEVATED_MEDAL} ' if is_elevated else ''
    return f'{tag}{team1_name} vs {team2_name} - Week {week_number} matchup is set! ⚔️'


class NotificationEmitter:
    """Writes one notification record per target user."""

    def __init__(
        self,
        store: DocumentStore,
        now: datetime,
        ttl_days: int = NOTIFICATION_TTL_DAYS,
    ):
        self.store = store
        self.now = now
        self.ttl = timedelta(days=ttl_days)

    def emit(
        self,
        user_ids: Iterable[str],
        type: str,
        message: str,
        actor_id: Optional[str] = None,
        actor_name: Optional[str] = None,
        actor_avatar: Optional[str] = None,
        league_id: Optional[str] = None,
        league_name: Optional[str] = None,
        week_number: Optional[int] = None,
        team_name: Optional[str] = None,
    ) -> int:
        """
        Write a notification for each user.

        Users are never notified of their own action (actor_id == user).

        Returns:
            Number of records written
        """
        count = 0
        for user_id in user_ids:
            if actor_id and user_id == actor_id:
                continue
            record = Notification(
                user_id=user_id,
                type=type,
                message=message,
                created_at=self.now,
                expires_at=self.now + self.ttl,
                actor_id=actor_id,
                actor_name=actor_name,
                actor_avatar=actor_avatar,
                league_id=league_id,
                league_name=league_name,
                week_number=week_number,
                team_name=team_name,
            )
            self.store.add_notification(record.to_document())
            count += 1

        logger.debug(f'Wrote {count} {type} notifications')
        return count
