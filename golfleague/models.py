"""Data models for the golf league processor."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from .constants import WEEKDAY_NAMES


@dataclass
class HoleInfo:
    """Static reference data for one hole of a tee."""
    number: int
    par: Optional[int] = None
    yardage: Optional[int] = None
    stroke_index: Optional[int] = None  # 1 = hardest


@dataclass
class RoundTotals:
    """Front-half, back-half and total sums; None when any hole is missing."""
    front: Optional[int] = None
    back: Optional[int] = None
    total: Optional[int] = None


@dataclass
class Scorecard:
    """A player's round with handicap strokes applied hole by hole."""
    course_handicap: int
    holes_count: int
    gross: List[Optional[int]]
    strokes: List[int]
    adjusted: List[Optional[int]]
    yardage: RoundTotals = field(default_factory=RoundTotals)
    par: RoundTotals = field(default_factory=RoundTotals)
    gross_totals: RoundTotals = field(default_factory=RoundTotals)
    adjusted_totals: RoundTotals = field(default_factory=RoundTotals)

    @property
    def is_complete(self) -> bool:
        return self.gross_totals.total is not None


@dataclass
class RankedScore:
    """One approved round entering a week's ranking."""
    user_id: str
    display_name: str
    net_score: float
    gross_score: float
    avatar: Optional[str] = None
    course_name: Optional[str] = None


@dataclass
class Placement:
    """A member's finish in one week's individual ranking."""
    user_id: str
    display_name: str
    placement: int
    points: int
    net_score: float
    gross_score: float

    def to_document(self) -> Dict[str, Any]:
        return {
            'placement': self.placement,
            'userId': self.user_id,
            'displayName': self.display_name,
            'points': self.points,
            'netScore': self.net_score,
            'grossScore': self.gross_score,
        }


@dataclass
class MatchupResult:
    """Resolved team-vs-team matchup for one week."""
    team1_id: str
    team2_id: str
    team1_name: str
    team2_name: str
    team1_score: float = 0
    team2_score: float = 0
    team1_count: int = 0  # members who posted a score
    team2_count: int = 0
    winner_id: Optional[str] = None
    winner_name: Optional[str] = None

    @property
    def decided(self) -> bool:
        return self.winner_id is not None

    @property
    def contested(self) -> bool:
        """Both sides had at least one scored member."""
        return self.team1_count > 0 and self.team2_count > 0

    @property
    def is_tie(self) -> bool:
        return self.contested and self.team1_score == self.team2_score

    @property
    def loser_id(self) -> Optional[str]:
        if self.winner_id is None:
            return None
        return self.team2_id if self.winner_id == self.team1_id else self.team1_id

    @property
    def winner_score(self) -> Optional[float]:
        if self.winner_id is None:
            return None
        return self.team1_score if self.winner_id == self.team1_id else self.team2_score

    def to_document(self) -> Dict[str, Any]:
        return {
            'team1Id': self.team1_id,
            'team2Id': self.team2_id,
            'team1Name': self.team1_name,
            'team2Name': self.team2_name,
            'team1Score': self.team1_score,
            'team2Score': self.team2_score,
            'winnerId': self.winner_id,
            'winnerName': self.winner_name,
        }


@dataclass
class WeekResult:
    """Immutable record of one week's resolved outcome."""
    week: int
    format: str
    is_elevated: bool = False
    points_multiplier: float = 1
    prize_awarded: float = 0
    winner_id: Optional[str] = None
    winner_name: Optional[str] = None
    winner_avatar: Optional[str] = None
    winner_score: Optional[float] = None
    course_name: Optional[str] = None
    standings: List[Placement] = field(default_factory=list)
    matchups: List[MatchupResult] = field(default_factory=list)

    def to_document(self, created_at: datetime) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            'week': self.week,
            'format': self.format,
            'isElevated': self.is_elevated,
            'pointsMultiplier': self.points_multiplier,
            'prizeAwarded': self.prize_awarded,
            'score': self.winner_score,
            'source': 'processor',
            'createdAt': created_at.isoformat(),
        }
        if self.matchups:
            doc['teamId'] = self.winner_id
            doc['teamName'] = self.winner_name
            doc['matchupResults'] = [m.to_document() for m in self.matchups]
        else:
            doc['userId'] = self.winner_id
            doc['displayName'] = self.winner_name
            doc['avatar'] = self.winner_avatar
            doc['courseName'] = self.course_name
            doc['standings'] = [p.to_document() for p in self.standings]
        return doc


@dataclass
class Purse:
    """A league's configured prize pools."""
    season: float = 0
    weekly: float = 0
    elevated: float = 0
    currency: str = 'USD'


@dataclass
class Champion:
    id: str
    name: str


@dataclass
class Notification:
    """A notification record written for the delivery collaborator."""
    user_id: str
    type: str
    message: str
    created_at: datetime
    expires_at: datetime
    actor_id: Optional[str] = None
    actor_name: Optional[str] = None
    actor_avatar: Optional[str] = None
    league_id: Optional[str] = None
    league_name: Optional[str] = None
    week_number: Optional[int] = None
    team_name: Optional[str] = None
    read: bool = False

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            'userId': self.user_id,
            'type': self.type,
            'message': self.message,
            'read': self.read,
            'createdAt': self.created_at.isoformat(),
            'expiresAt': self.expires_at.isoformat(),
        }
        optional = {
            'actorId': self.actor_id,
            'actorName': self.actor_name,
            'actorAvatar': self.actor_avatar,
            'leagueId': self.league_id,
            'leagueName': self.league_name,
            'weekNumber': self.week_number,
            'teamName': self.team_name,
        }
        doc.update({k: v for k, v in optional.items() if v is not None})
        return doc


@dataclass
class RunClock:
    """Calendar view of a single processor invocation in the canonical time zone."""
    now: datetime

    @property
    def today(self) -> date:
        return self.now.date()

    @property
    def tomorrow(self) -> date:
        return self.today + timedelta(days=1)

    @property
    def yesterday(self) -> date:
        return self.today - timedelta(days=1)

    @property
    def today_name(self) -> str:
        return WEEKDAY_NAMES[self.today.weekday()]

    @property
    def yesterday_name(self) -> str:
        return WEEKDAY_NAMES[self.yesterday.weekday()]

    @property
    def hour(self) -> int:
        return self.now.hour

    @property
    def today_key(self) -> str:
        return self.today.isoformat()
