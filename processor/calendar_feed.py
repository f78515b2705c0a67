"""Calendar feed generation with caching per project."""
import logging
import time
from typing import Callable, Optional

from processor.event_processor import EventProcessor
from processor.ics_builder import DEFAULT_PROD_ID, build_calendar
from sources.todoist_client import TodoistClient
from storage.calendar_cache import CalendarCache

logger = logging.getLogger(__name__)


class CalendarFeed:
    """Serves rendered project calendars, regenerating them on cache misses."""

    def __init__(
        self,
        client: TodoistClient,
        cache: CalendarCache,
        processor: Optional[EventProcessor] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the feed.

        Args:
            client: Todoist client used on cache misses
            cache: Cache owned by the caller, shared across requests
            processor: Processor mapping tasks onto events
            clock: Returns the current time in seconds since the epoch
        """
        self.client = client
        self.cache = cache
        self.processor = processor or EventProcessor()
        self.clock = clock

    def get_calendar(self, project_id: str) -> str:
        """
        Return the calendar document for a project.

        Args:
            project_id: Todoist project id

        Returns:
            Calendar text, from the cache when fresh
        """
        now = self.clock()
        cached = self.cache.get(project_id, now)
        if cached is not None:
            return cached

        content = self.generate_calendar(project_id)
        self.cache.put(project_id, content, now)
        return content

    def generate_calendar(self, project_id: str) -> str:
        """
        Fetch tasks and project metadata and render a fresh calendar.

        Args:
            project_id: Todoist project id

        Returns:
            Calendar text
        """
        logger.info(f"Generating calendar for project {project_id}")
        tasks = self.client.get_tasks(project_id)
        project = self.client.get_project(project_id)

        events = self.processor.events_from_tasks(tasks, project)
        return build_calendar(events, name=project.name, prod_id=DEFAULT_PROD_ID)

    def invalidate(self, project_id: str) -> bool:
        """Drop the cached calendar for a project, if any."""
        return self.cache.invalidate(project_id)
