"""Scheduled league processor.

Entry point run by the scheduler several times a day. Each run works out
today, tomorrow and yesterday in the canonical time zone, then runs four
phases over every league that matches the phase's status and day:

    1. Seasons starting tomorrow  -> "starting tomorrow" notices
    2. Seasons starting today     -> activation
    3. Play day, after the round  -> score reminders
    4. Day after play day         -> week completion / season completion

Leagues are processed one at a time. A failure in one league is logged and
recorded in the run report; it never stops the other leagues.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from pydantic import ValidationError

from .constants import STATUS_ACTIVE, STATUS_UPCOMING
from .exceptions import MissingConfigurationError, NoScoresError
from .models import RunClock
from .schemas import League, ProcessorConfig
from .season import SeasonStateMachine
from .store import DocumentStore
from .utils import local_now

logger = logging.getLogger('golfleague.processor')

PHASE_STARTING = 'season_starting'
PHASE_ACTIVATION = 'season_activation'
PHASE_REMINDERS = 'score_reminders'
PHASE_WEEK_COMPLETION = 'week_completion'

PHASES = (PHASE_STARTING, PHASE_ACTIVATION, PHASE_REMINDERS, PHASE_WEEK_COMPLETION)


@dataclass
class PhaseReport:
    """League ids by outcome for one phase of a run."""
    processed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


@dataclass
class ProcessorReport:
    """Outcome of one processor run."""
    started_at: datetime
    phases: dict[str, PhaseReport] = field(
        default_factory=lambda: {phase: PhaseReport() for phase in PHASES}
    )

    @property
    def failed(self) -> list[str]:
        return [league_id for p in self.phases.values() for league_id in p.failed]

    def summary(self) -> str:
        lines = [f'League processor run at {self.started_at.isoformat()}']
        for name, phase in self.phases.items():
            lines.append(
                f'  {name}: {len(phase.processed)} processed, '
                f'{len(phase.skipped)} skipped, {len(phase.failed)} failed'
            )
        return '\n'.join(lines)


class LeagueProcessor:
    """Runs every season phase across all leagues."""

    def __init__(self, store: DocumentStore, config: Optional[ProcessorConfig] = None):
        self.store = store
        self.config = config or ProcessorConfig()

    def run(self, now: Optional[datetime] = None) -> ProcessorReport:
        """
        Process all leagues once.

        Args:
            now: Override the current time (naive values are taken as local
                to the configured time zone)

        Returns:
            ProcessorReport with per-phase outcomes
        """
        clock = RunClock(local_now(self.config.timezone, now))
        report = ProcessorReport(started_at=clock.now)
        machine = SeasonStateMachine(self.store, clock, self.config)

        logger.info(f'Starting league processor ({clock.today_name} {clock.today_key} {clock.hour:02d}h)')

        self._run_phase(
            report.phases[PHASE_STARTING],
            self.store.query_leagues(status=STATUS_UPCOMING),
            lambda league: league.start_date == clock.tomorrow,
            machine.notify_starting_tomorrow,
        )
        self._run_phase(
            report.phases[PHASE_ACTIVATION],
            self.store.query_leagues(status=STATUS_UPCOMING),
            lambda league: league.start_date == clock.today,
            machine.activate,
        )
        self._run_phase(
            report.phases[PHASE_REMINDERS],
            self.store.query_leagues(status=STATUS_ACTIVE, play_day=clock.today_name),
            lambda league: True,
            machine.send_score_reminders,
        )
        self._run_phase(
            report.phases[PHASE_WEEK_COMPLETION],
            self.store.query_leagues(status=STATUS_ACTIVE, play_day=clock.yesterday_name),
            lambda league: True,
            machine.complete_week,
        )

        logger.info(report.summary())
        return report

    def _run_phase(
        self,
        phase: PhaseReport,
        documents: dict[str, dict],
        matches: Callable[[League], bool],
        transition: Callable[[League], bool],
    ) -> None:
        for league_id, doc in documents.items():
            try:
                league = League.from_document(league_id, doc, self.config)
            except ValidationError as e:
                logger.error(f'Invalid league document {league_id}: {e}')
                phase.failed.append(league_id)
                continue
            except Exception:
                logger.exception(f'Could not read league document {league_id}')
                phase.failed.append(league_id)
                continue

            if not matches(league):
                continue

            try:
                applied = transition(league)
            except (MissingConfigurationError, NoScoresError) as e:
                logger.warning(f'Skipping {league.name} ({league_id}): {e}')
                phase.skipped.append(league_id)
                continue
            except Exception:
                logger.exception(f'Error processing {league.name} ({league_id})')
                phase.failed.append(league_id)
                continue

            if applied:
                phase.processed.append(league_id)
            else:
                phase.skipped.append(league_id)


def process_leagues(
    store: DocumentStore,
    now: Optional[datetime] = None,
    config: Optional[ProcessorConfig] = None,
) -> ProcessorReport:
    """Run the league processor once against a store."""
    return LeagueProcessor(store, config).run(now)
