"""Constants and mappings for the golf league processor."""

# Canonical time zone for day boundaries and play-day matching
DEFAULT_TIMEZONE = 'America/New_York'

# Hours (local to DEFAULT_TIMEZONE) at which the scheduler invokes the processor
DEFAULT_RUN_HOURS = [6, 12, 21]

WEEKDAY_NAMES = [
    'monday',
    'tuesday',
    'wednesday',
    'thursday',
    'friday',
    'saturday',
    'sunday',
]

# League status values
STATUS_UPCOMING = 'upcoming'
STATUS_ACTIVE = 'active'
STATUS_COMPLETED = 'completed'
STATUS_CANCELLED = 'cancelled'

LEAGUE_STATUSES = (STATUS_UPCOMING, STATUS_ACTIVE, STATUS_COMPLETED, STATUS_CANCELLED)

# League formats
FORMAT_STROKE = 'stroke'
FORMAT_TEAM_MATCH = 'team_match'

# Legacy format names found on older league documents
FORMAT_ALIASES = {
    'stroke': FORMAT_STROKE,
    'stroke_play': FORMAT_STROKE,
    '2v2': FORMAT_TEAM_MATCH,
    'team': FORMAT_TEAM_MATCH,
    'team_match': FORMAT_TEAM_MATCH,
}

# Score approval status
SCORE_APPROVED = 'approved'
SCORE_PENDING = 'pending'
SCORE_REJECTED = 'rejected'

MEMBER_ACTIVE = 'active'

# League defaults
DEFAULT_HOLES = 18
DEFAULT_TOTAL_WEEKS = 12
DEFAULT_POINTS_PER_WIN = 3
DEFAULT_POINTS_PER_TIE = 1
DEFAULT_ELEVATED_MULTIPLIER = 2.0
DEFAULT_CURRENCY = 'USD'

# Score reminder window: hours after tee time, by round length
REMINDER_OFFSET_HOURS = {9: 4, 18: 6}
REMINDER_TOLERANCE_HOURS = 1

# USGA neutral slope rating
STANDARD_SLOPE = 113

NOTIFICATION_TTL_DAYS = 30

# A week claim older than this is treated as abandoned by a crashed run
PROCESSING_LEASE_MINUTES = 60

# Notification types
NOTIFY_SEASON_STARTING = 'league_season_starting'
NOTIFY_SEASON_STARTED = 'league_season_started'
NOTIFY_SCORE_REMINDER = 'league_score_reminder'
NOTIFY_WEEK_START = 'league_week_start'
NOTIFY_WEEK_COMPLETE = 'league_week_complete'
NOTIFY_MATCHUP = 'league_matchup'
NOTIFY_SEASON_COMPLETE = 'league_season_complete'

# Store collection names
LEAGUES = 'leagues'
MEMBERS = 'members'
TEAMS = 'teams'
SCORES = 'scores'
WEEK_RESULTS = 'week_results'
NOTIFICATIONS = 'notifications'

GOLF_COURSE_API_BASE = 'https://api.golfcourseapi.com/v1'
