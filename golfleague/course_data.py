"""Course and tee data from the Golf Course API."""

import logging
import os
from typing import Any, Optional

import requests

from .constants import GOLF_COURSE_API_BASE
from .models import HoleInfo

logger = logging.getLogger('golfleague.course_data')


def generate_default_holes(num_holes: int) -> list[HoleInfo]:
    """Placeholder holes (par 4, 400 yards, stroke index = hole number)."""
    return [HoleInfo(number=i, par=4, yardage=400, stroke_index=i) for i in range(1, num_holes + 1)]


def extract_tees(tees: Optional[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Merge male and female tee sets into one list, longest first.

    Tee lists may arrive flat ([{tee}]) or nested ([[{tee}]]). A female tee
    with the same name as a male tee is dropped.
    """
    if not tees:
        return []

    def normalize(entries):
        result = []
        for entry in entries or []:
            if isinstance(entry, list):
                entry = entry[0] if entry else None
            if isinstance(entry, dict) and (entry.get('tee_name') or entry.get('name')):
                result.append(entry)
        return result

    all_tees = []
    for tee in normalize(tees.get('male')):
        all_tees.append({**tee, 'source': 'male'})

    names = {t.get('tee_name') for t in all_tees}
    for tee in normalize(tees.get('female')):
        if tee.get('tee_name') in names:
            continue
        all_tees.append({**tee, 'source': 'female'})

    all_tees.sort(key=lambda t: t.get('total_yards') or 0, reverse=True)
    return all_tees


def holes_for_tee(tee: dict[str, Any]) -> list[HoleInfo]:
    """HoleInfo list for a tee; the API's per-hole 'handicap' is the stroke index."""
    holes = []
    for number, hole in enumerate(tee.get('holes') or [], 1):
        holes.append(
            HoleInfo(
                number=number,
                par=hole.get('par'),
                yardage=hole.get('yardage'),
                stroke_index=hole.get('handicap'),
            )
        )
    return holes


class CourseDataClient:
    """Fetches and caches course data from the Golf Course API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = GOLF_COURSE_API_BASE,
        session: Optional[requests.Session] = None,
        timeout: float = 10,
    ):
        self.api_key = api_key or os.environ.get('GOLF_COURSE_API_KEY', '')
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        self._courses: dict[int, dict[str, Any]] = {}

    def get_course(self, course_id: int) -> Optional[dict[str, Any]]:
        """
        Course payload for an id, or None if it could not be loaded.

        Successful responses are cached for the life of the client.
        """
        if course_id in self._courses:
            return self._courses[course_id]

        url = f'{self.base_url}/courses/{course_id}'
        try:
            response = self.session.get(
                url,
                headers={'Authorization': f'Key {self.api_key}'},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.error(f'Course lookup failed for {course_id}: {e}')
            return None
        except ValueError as e:
            logger.error(f'Invalid course payload for {course_id}: {e}')
            return None

        course = payload.get('course', payload) if isinstance(payload, dict) else None
        if not course:
            logger.warning(f'Empty course payload for {course_id}')
            return None

        self._courses[course_id] = course
        return course

    def get_tees(self, course_id: int) -> list[dict[str, Any]]:
        course = self.get_course(course_id)
        return extract_tees(course.get('tees')) if course else []

    def get_tee(self, course_id: int, tee_name: str) -> Optional[dict[str, Any]]:
        wanted = tee_name.strip().lower()
        for tee in self.get_tees(course_id):
            if str(tee.get('tee_name', tee.get('name', ''))).strip().lower() == wanted:
                return tee
        return None

    def load_holes(self, course_id: int, tee_name: str, holes_count: int = 18) -> list[HoleInfo]:
        """
        Hole data for a course tee, falling back to default holes.

        The fallback is used when the course or tee cannot be found or the
        tee has fewer holes than the round.
        """
        tee = self.get_tee(course_id, tee_name)
        holes = holes_for_tee(tee) if tee else []
        if len(holes) < holes_count:
            logger.warning(
                f'No hole data for course {course_id} tee {tee_name!r}; using default holes'
            )
            return generate_default_holes(holes_count)
        return holes[:holes_count]
