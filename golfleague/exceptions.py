"""Exception types raised while processing leagues."""


class LeagueProcessingError(Exception):
    """Base class for errors raised by the league processor."""


class MissingConfigurationError(LeagueProcessingError):
    """A league or course is missing data needed to run a phase."""


class NoScoresError(LeagueProcessingError):
    """No approved scores exist for the week being completed."""


class StoreError(LeagueProcessingError):
    """The document store failed to read or write."""
