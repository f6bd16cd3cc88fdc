"""Document store used by the league processor.

The processor talks to its store only through DocumentStore. Two
implementations ship with the package: InMemoryStore for tests and dry runs,
and JsonFileStore, which persists a snapshot of every collection to a single
JSON file between runs.

Layout of a snapshot:

    {
      "leagues":       {league_id: {...}},
      "members":       {league_id: {user_id: {...}}},
      "teams":         {league_id: {team_id: {...}}},
      "scores":        {league_id: {score_id: {...}}},
      "week_results":  {league_id: {"week<N>": {...}}},
      "notifications": {notification_id: {...}}
    }
"""

import copy
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from .constants import LEAGUES, MEMBERS, NOTIFICATIONS, SCORES, TEAMS, WEEK_RESULTS
from .exceptions import StoreError
from .utils import load_json, save_json, week_key

logger = logging.getLogger('golfleague.store')

COLLECTIONS = (LEAGUES, MEMBERS, TEAMS, SCORES, WEEK_RESULTS, NOTIFICATIONS)


@dataclass(frozen=True)
class Increment:
    """Field value that adds to the stored number instead of replacing it."""
    amount: float = 1


def apply_fields(doc: dict[str, Any], fields: dict[str, Any]) -> None:
    """
    Apply a field update to a document in place.

    Dotted keys ('weeklyResults.week3') address nested maps, creating them as
    needed. Increment values add to the existing number (missing counts as 0).
    """
    for key, value in fields.items():
        target = doc
        *parents, leaf = key.split('.')
        for part in parents:
            target = target.setdefault(part, {})
        if isinstance(value, Increment):
            target[leaf] = (target.get(leaf) or 0) + value.amount
        else:
            target[leaf] = copy.deepcopy(value)


class DocumentStore(ABC):
    """Read/write contract the league processor depends on."""

    @abstractmethod
    def get_league(self, league_id: str) -> Optional[dict[str, Any]]:
        """Fetch one league document, or None."""

    @abstractmethod
    def query_leagues(
        self, status: Optional[str] = None, play_day: Optional[str] = None
    ) -> dict[str, dict[str, Any]]:
        """Leagues matching the given equality filters, keyed by id."""

    @abstractmethod
    def update_league(
        self,
        league_id: str,
        fields: dict[str, Any],
        expect: Optional[dict[str, Any]] = None,
    ) -> bool:
        """
        Write several fields to a league in one operation.

        When expect is given, the write only happens if every expected field
        currently holds the expected value (a missing field matches None).
        Returns whether the write was applied.
        """

    @abstractmethod
    def list_members(
        self, league_id: str, status: Optional[str] = None
    ) -> dict[str, dict[str, Any]]:
        """Members of a league keyed by user id."""

    @abstractmethod
    def update_member(self, league_id: str, member_id: str, fields: dict[str, Any]) -> None:
        """Update an existing member; raises StoreError if it does not exist."""

    @abstractmethod
    def list_teams(self, league_id: str) -> dict[str, dict[str, Any]]:
        """Teams of a league keyed by team id."""

    @abstractmethod
    def update_team(self, league_id: str, team_id: str, fields: dict[str, Any]) -> None:
        """Update an existing team; raises StoreError if it does not exist."""

    @abstractmethod
    def query_scores(
        self, league_id: str, week: int, statuses: Iterable[str]
    ) -> list[dict[str, Any]]:
        """Scores for a week whose status is in statuses."""

    @abstractmethod
    def set_week_result(self, league_id: str, week: int, record: dict[str, Any]) -> str:
        """Create or replace the result record of a week and return its id."""

    @abstractmethod
    def add_notification(self, record: dict[str, Any]) -> str:
        """Create a notification record and return its id."""


class InMemoryStore(DocumentStore):
    """Dict-backed store. Documents are copied in and out."""

    def __init__(self, data: Optional[dict[str, Any]] = None):
        self.data: dict[str, Any] = {name: {} for name in COLLECTIONS}
        for name, value in (data or {}).items():
            if name not in COLLECTIONS:
                raise StoreError(f'Unknown collection: {name}')
            self.data[name] = copy.deepcopy(value)

    def _league_collection(self, name: str, league_id: str) -> dict[str, Any]:
        return self.data[name].setdefault(league_id, {})

    def get_league(self, league_id):
        doc = self.data[LEAGUES].get(league_id)
        return copy.deepcopy(doc) if doc is not None else None

    def query_leagues(self, status=None, play_day=None):
        results = {}
        for league_id, doc in self.data[LEAGUES].items():
            if status is not None and doc.get('status') != status:
                continue
            if play_day is not None and doc.get('playDay') != play_day:
                continue
            results[league_id] = copy.deepcopy(doc)
        return results

    def update_league(self, league_id, fields, expect=None):
        doc = self.data[LEAGUES].get(league_id)
        if doc is None:
            raise StoreError(f'League not found: {league_id}')
        if expect:
            for key, value in expect.items():
                if doc.get(key) != value:
                    logger.debug(
                        f'Guard failed on league {league_id}: {key}={doc.get(key)!r}, '
                        f'expected {value!r}'
                    )
                    return False
        apply_fields(doc, fields)
        return True

    def list_members(self, league_id, status=None):
        members = self._league_collection(MEMBERS, league_id)
        return {
            member_id: copy.deepcopy(doc)
            for member_id, doc in members.items()
            if status is None or doc.get('status') == status
        }

    def update_member(self, league_id, member_id, fields):
        doc = self._league_collection(MEMBERS, league_id).get(member_id)
        if doc is None:
            raise StoreError(f'Member not found: {league_id}/{member_id}')
        apply_fields(doc, fields)

    def list_teams(self, league_id):
        return copy.deepcopy(self._league_collection(TEAMS, league_id))

    def update_team(self, league_id, team_id, fields):
        doc = self._league_collection(TEAMS, league_id).get(team_id)
        if doc is None:
            raise StoreError(f'Team not found: {league_id}/{team_id}')
        apply_fields(doc, fields)

    def query_scores(self, league_id, week, statuses):
        statuses = set(statuses)
        return [
            {'id': score_id, **copy.deepcopy(doc)}
            for score_id, doc in self._league_collection(SCORES, league_id).items()
            if doc.get('week') == week and doc.get('status') in statuses
        ]

    def set_week_result(self, league_id, week, record):
        result_id = week_key(week)
        self._league_collection(WEEK_RESULTS, league_id)[result_id] = copy.deepcopy(record)
        return result_id

    def add_notification(self, record):
        notification_id = uuid.uuid4().hex
        self.data[NOTIFICATIONS][notification_id] = copy.deepcopy(record)
        return notification_id

    def week_results(self, league_id: str) -> list[dict[str, Any]]:
        """All week results recorded for a league."""
        return list(copy.deepcopy(self._league_collection(WEEK_RESULTS, league_id)).values())

    def notifications(self) -> list[dict[str, Any]]:
        return list(copy.deepcopy(self.data[NOTIFICATIONS]).values())


class JsonFileStore(InMemoryStore):
    """In-memory store loaded from, and saved back to, a JSON snapshot."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        try:
            data = load_json(self.path)
        except ValueError as e:  # includes JSONDecodeError
            raise StoreError(f'Could not read store {self.path}: {e}') from e
        if not isinstance(data, dict):
            raise StoreError(f'Store {self.path} must contain a JSON object')
        super().__init__(data)

    def save(self) -> None:
        try:
            save_json(self.path, self.data)
        except (OSError, TypeError) as e:
            raise StoreError(f'Could not write store {self.path}: {e}') from e
        logger.info(f'Store saved to {self.path}')
