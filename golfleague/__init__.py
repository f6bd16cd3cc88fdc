from .models import (
    HoleInfo,
    MatchupResult,
    Placement,
    Purse,
    RankedScore,
    RunClock,
    Scorecard,
    WeekResult,
)
from .schemas import League, Member, ProcessorConfig, Score, Team
from .handicap import (
    adjusted_score,
    allocate_strokes,
    build_scorecard,
    calculate_course_handicap,
    round_totals,
    strokes_for_hole,
)
from .purse import calculate_season_prize, calculate_week_prize, format_prize, get_league_purse
from .standings import StandingsUpdater, assign_positions, compute_placements
from .formats import StrokePlayFormat, TeamMatchFormat, get_format
from .notifications import NotificationEmitter, generate_league_message
from .season import SeasonStateMachine
from .processor import LeagueProcessor, ProcessorReport, process_leagues
from .store import DocumentStore, InMemoryStore, Increment, JsonFileStore
from .course_data import CourseDataClient, generate_default_holes

__all__ = [
    # Models
    'HoleInfo',
    'MatchupResult',
    'Placement',
    'Purse',
    'RankedScore',
    'RunClock',
    'Scorecard',
    'WeekResult',
    # Schemas
    'League',
    'Member',
    'ProcessorConfig',
    'Score',
    'Team',
    # Handicap math
    'adjusted_score',
    'allocate_strokes',
    'build_scorecard',
    'calculate_course_handicap',
    'round_totals',
    'strokes_for_hole',
    # Purse
    'calculate_season_prize',
    'calculate_week_prize',
    'format_prize',
    'get_league_purse',
    # Standings
    'StandingsUpdater',
    'assign_positions',
    'compute_placements',
    # Formats
    'StrokePlayFormat',
    'TeamMatchFormat',
    'get_format',
    # Notifications
    'NotificationEmitter',
    'generate_league_message',
    # Season and processor
    'SeasonStateMachine',
    'LeagueProcessor',
    'ProcessorReport',
    'process_leagues',
    # Store
    'DocumentStore',
    'InMemoryStore',
    'Increment',
    'JsonFileStore',
    # Course data
    'CourseDataClient',
    'generate_default_holes',
]
