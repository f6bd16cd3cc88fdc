"""Pydantic schemas for league documents and processor settings."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from .constants import (
    DEFAULT_CURRENCY,
    DEFAULT_ELEVATED_MULTIPLIER,
    DEFAULT_HOLES,
    DEFAULT_POINTS_PER_TIE,
    DEFAULT_POINTS_PER_WIN,
    DEFAULT_RUN_HOURS,
    DEFAULT_TIMEZONE,
    DEFAULT_TOTAL_WEEKS,
    FORMAT_ALIASES,
    FORMAT_TEAM_MATCH,
    LEAGUE_STATUSES,
    MEMBER_ACTIVE,
    NOTIFICATION_TTL_DAYS,
    PROCESSING_LEASE_MINUTES,
    REMINDER_OFFSET_HOURS,
    REMINDER_TOLERANCE_HOURS,
    STATUS_UPCOMING,
    WEEKDAY_NAMES,
)
from .models import Purse


class ProcessorConfig(BaseModel):
    """Processor settings loaded from config/processor_config.json."""

    timezone: str = DEFAULT_TIMEZONE
    run_hours: list[int] = Field(default_factory=lambda: list(DEFAULT_RUN_HOURS))
    reminder_offset_18: int = Field(REMINDER_OFFSET_HOURS[18], ge=0, le=23)
    reminder_offset_9: int = Field(REMINDER_OFFSET_HOURS[9], ge=0, le=23)
    reminder_tolerance_hours: int = Field(REMINDER_TOLERANCE_HOURS, ge=0, le=12)
    default_total_weeks: int = Field(DEFAULT_TOTAL_WEEKS, ge=1, le=52)
    default_points_per_win: float = Field(DEFAULT_POINTS_PER_WIN, ge=0)
    default_points_per_tie: float = Field(DEFAULT_POINTS_PER_TIE, ge=0)
    default_elevated_multiplier: float = Field(DEFAULT_ELEVATED_MULTIPLIER, gt=0)
    notification_ttl_days: int = Field(NOTIFICATION_TTL_DAYS, ge=1)
    processing_lease_minutes: int = Field(PROCESSING_LEASE_MINUTES, ge=1)
    default_currency: str = DEFAULT_CURRENCY
    purse_enabled: bool = True

    @field_validator('run_hours')
    @classmethod
    def validate_run_hours(cls, v):
        """Ensure run hours are valid hours of the day."""
        for hour in v:
            if not (0 <= hour <= 23):
                raise ValueError(f'Invalid run hour: {hour}')
        return sorted(set(v))

    class Config:
        extra = 'forbid'


class PurseConfig(BaseModel):
    """Prize pools configured on a league."""

    season_purse: float = Field(0, ge=0, alias='seasonPurse')
    weekly_purse: float = Field(0, ge=0, alias='weeklyPurse')
    elevated_purse: float = Field(0, ge=0, alias='elevatedPurse')
    currency: str = DEFAULT_CURRENCY

    @field_validator('season_purse', 'weekly_purse', 'elevated_purse', mode='before')
    @classmethod
    def none_is_zero(cls, v):
        return v or 0

    def to_purse(self) -> Purse:
        return Purse(
            season=self.season_purse,
            weekly=self.weekly_purse,
            elevated=self.elevated_purse,
            currency=self.currency or DEFAULT_CURRENCY,
        )

    class Config:
        extra = 'ignore'
        populate_by_name = True


class Matchup(BaseModel):
    """A pairing of two teams for one week."""

    team1_id: str = Field(..., min_length=1, alias='team1Id')
    team2_id: str = Field(..., min_length=1, alias='team2Id')

    class Config:
        extra = 'ignore'
        populate_by_name = True


def _to_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and 'T' in value:
        return datetime.fromisoformat(value).date()
    return value


class League(BaseModel):
    """
    Canonical league document.

    Older documents mix nested and flat layouts for elevated weeks and use
    alternate names for round length and season length. Everything is
    normalized here, once per read, so scoring code only sees one shape.
    """

    id: str
    name: str = ''
    avatar: str | None = None
    format: str = Field('stroke', pattern=r'^(stroke|team_match)$')
    holes: int = DEFAULT_HOLES
    total_weeks: int = Field(DEFAULT_TOTAL_WEEKS, ge=1, alias='totalWeeks')
    play_day: str | None = Field(None, alias='playDay')
    tee_time: str | None = Field(None, alias='teeTime')
    start_date: date | None = Field(None, alias='startDate')
    status: str = STATUS_UPCOMING
    current_week: int = Field(1, ge=1, alias='currentWeek')
    purse: PurseConfig | None = None
    elevated_weeks: list[int] = Field(default_factory=list, alias='elevatedWeeks')
    elevated_multiplier: float = Field(DEFAULT_ELEVATED_MULTIPLIER, gt=0, alias='elevatedMultiplier')
    points_per_win: float = Field(DEFAULT_POINTS_PER_WIN, ge=0, alias='pointsPerWin')
    points_per_tie: float = Field(DEFAULT_POINTS_PER_TIE, ge=0, alias='pointsPerTie')
    weekly_matchups: dict[int, list[Matchup]] = Field(default_factory=dict, alias='weeklyMatchups')

    # Idempotency markers
    notified_starting: str | None = Field(None, alias='_notifiedStarting')
    activated_on: str | None = Field(None, alias='_activatedOn')
    last_score_reminder: str | None = Field(None, alias='_lastScoreReminder')
    last_processed_week: int | None = Field(None, alias='_lastProcessedWeek')
    processing_week: int | None = Field(None, alias='_processingWeek')
    processing_since: str | None = Field(None, alias='_processingSince')

    champion_id: str | None = Field(None, alias='championId')
    champion_name: str | None = Field(None, alias='championName')

    @model_validator(mode='before')
    @classmethod
    def normalize_document(cls, data: Any, info: ValidationInfo) -> Any:
        """Fold legacy field names into the canonical layout."""
        if not isinstance(data, dict):
            return data
        config = (info.context or {}).get('config') or ProcessorConfig()
        doc = dict(data)

        fmt = str(doc.get('format') or 'stroke').lower()
        doc['format'] = FORMAT_ALIASES.get(fmt, fmt)

        doc['holes'] = doc.get('holes') or doc.pop('holesPerRound', None) or DEFAULT_HOLES
        doc['totalWeeks'] = (
            doc.get('totalWeeks') or doc.pop('numberOfWeeks', None) or config.default_total_weeks
        )
        doc['currentWeek'] = doc.get('currentWeek') or 1

        nested = doc.pop('elevatedEvents', None)
        if not isinstance(nested, dict):
            nested = {}
        if doc.pop('hasElevatedEvents', False) and isinstance(doc.get('elevatedWeeks'), list):
            weeks = doc['elevatedWeeks']
        elif nested.get('enabled') is True and isinstance(nested.get('weeks'), list):
            weeks = nested['weeks']
        else:
            weeks = []
        doc['elevatedWeeks'] = weeks
        doc['elevatedMultiplier'] = (
            doc.get('elevatedMultiplier')
            or nested.get('multiplier')
            or config.default_elevated_multiplier
        )

        if doc.get('pointsPerWin') is None:
            doc['pointsPerWin'] = config.default_points_per_win
        if doc.get('pointsPerTie') is None:
            doc['pointsPerTie'] = config.default_points_per_tie

        purse = doc.get('purse')
        if not isinstance(purse, dict):
            doc['purse'] = None
        elif not purse.get('currency'):
            doc['purse'] = {**purse, 'currency': config.default_currency}

        if doc.get('weeklyMatchups') is None:
            doc['weeklyMatchups'] = {}

        doc['startDate'] = _to_date(doc.get('startDate'))
        return doc

    @field_validator('play_day', mode='before')
    @classmethod
    def validate_play_day(cls, v):
        """Play day is stored as a lowercase weekday name."""
        if v is None or v == '':
            return None
        v = str(v).strip().lower()
        if v not in WEEKDAY_NAMES:
            raise ValueError(f'Invalid play day: {v}')
        return v

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v not in LEAGUE_STATUSES:
            raise ValueError(f'Invalid league status: {v}')
        return v

    @field_validator('holes')
    @classmethod
    def validate_holes(cls, v):
        if v not in (9, 18):
            raise ValueError(f'Holes per round must be 9 or 18, got {v}')
        return v

    @classmethod
    def from_document(
        cls, league_id: str, data: dict[str, Any], config: ProcessorConfig | None = None
    ) -> 'League':
        """Validate a raw store document into a League."""
        return cls.model_validate({**data, 'id': league_id}, context={'config': config})

    @property
    def is_team_match(self) -> bool:
        return self.format == FORMAT_TEAM_MATCH

    def is_elevated(self, week: int) -> bool:
        return week in self.elevated_weeks

    def multiplier_for(self, week: int) -> float:
        """Standings point multiplier for a week (1 unless elevated)."""
        return self.elevated_multiplier if self.is_elevated(week) else 1

    def matchups_for(self, week: int) -> list[Matchup]:
        return self.weekly_matchups.get(week, [])

    def tee_hour(self) -> int | None:
        """Hour component of the tee time ("HH:MM"), or None if unset/unparseable."""
        if not self.tee_time:
            return None
        try:
            return int(self.tee_time.split(':')[0])
        except ValueError:
            return None

    class Config:
        extra = 'ignore'
        populate_by_name = True


class Member(BaseModel):
    """A participant's standing within a league."""

    id: str
    display_name: str = Field('Unknown', alias='displayName')
    avatar: str | None = None
    status: str = MEMBER_ACTIVE
    total_points: float = Field(0, alias='totalPoints')
    total_net_score: float = Field(0, alias='totalNetScore')
    total_gross_score: float = Field(0, alias='totalGrossScore')
    rounds_played: int = Field(0, alias='roundsPlayed')
    wins: int = 0
    current_position: int | None = Field(None, alias='currentPosition')
    previous_position: int | None = Field(None, alias='previousPosition')
    position_week: int | None = Field(None, alias='positionWeek')
    last_week_placement: int | None = Field(None, alias='lastWeekPlacement')
    weekly_results: dict[str, dict[str, Any]] = Field(default_factory=dict, alias='weeklyResults')

    class Config:
        extra = 'ignore'
        populate_by_name = True


class Team(BaseModel):
    """A group of members competing together in a team-match league."""

    id: str
    name: str = 'Unknown Team'
    member_ids: list[str] = Field(default_factory=list, alias='memberIds')
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points: float = 0
    weekly_results: dict[str, dict[str, Any]] = Field(default_factory=dict, alias='weeklyResults')

    class Config:
        extra = 'ignore'
        populate_by_name = True


class Score(BaseModel):
    """One player's submitted round for a league week."""

    id: str | None = None
    user_id: str = Field(..., min_length=1, alias='userId')
    week: int = Field(..., ge=1)
    display_name: str = Field('Unknown', alias='displayName')
    avatar: str | None = None
    course_name: str | None = Field(None, alias='courseName')
    hole_scores: list[int | None] = Field(default_factory=list, alias='holeScores')
    gross_score: float = Field(0, alias='grossScore')
    net_score: float = Field(..., alias='netScore')
    status: str = Field('pending', pattern=r'^(pending|approved|rejected)$')

    class Config:
        extra = 'ignore'
        populate_by_name = True
