"""Event processor for turning tasks and deadline rows into calendar events."""
import logging
import uuid
from typing import Dict, Iterable, List, Optional

from processor.ics_builder import format_date_to_ics
from processor.models import CalendarEvent, Project, Task

logger = logging.getLogger(__name__)

TASK_UID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, 'https://app.todoist.com/app/task/')


class MissingSectionError(ValueError):
    """Raised when a deadline row has no section to be grouped under."""


class EventProcessor:
    """Processor for mapping source records onto calendar events."""

    DEFAULT_DESCRIPTION = "No description provided"
    SECTION_TYPE = "section"

    def events_from_tasks(self, tasks: Iterable[Task], project: Project) -> List[CalendarEvent]:
        """
        Build one all-day event per task that has a due date.

        Args:
            tasks: Tasks fetched for the project, in remote order
            project: Project the tasks belong to

        Returns:
            List of CalendarEvent objects in task order
        """
        events = []
        skipped = 0

        for task in tasks:
            if not task.due or not task.due.date:
                skipped += 1
                logger.debug(f"Skipping task {task.id} without due date")
                continue

            events.append(CalendarEvent(
                uid=self.task_uid(task),
                title=task.content,
                start_date=format_date_to_ics(task.due.date),
                description=task.description or self.DEFAULT_DESCRIPTION,
                section=project.name,
                task_id=task.id
            ))

        logger.info(
            f"Built {len(events)} events for project '{project.name}' "
            f"({skipped} tasks without due date)"
        )
        return events

    def events_from_rows(
        self,
        rows: Iterable[Dict[str, Optional[str]]],
        section: Optional[str] = None
    ) -> List[CalendarEvent]:
        """
        Build events from deadline rows grouped by section marker rows.

        A row with TYPE "section" sets the current section for every
        following deadline row until the next marker. Deadline rows seen
        before any marker fall back to ``section``.

        Args:
            rows: Rows with TYPE, CONTENT, DEADLINE and DESCRIPTION columns
            section: Section name for deadline rows preceding any marker

        Returns:
            List of CalendarEvent objects in row order

        Raises:
            MissingSectionError: If a deadline row has no section available
        """
        events = []
        current_section = None

        for row in rows:
            if (row.get('TYPE') or '').strip() == self.SECTION_TYPE:
                current_section = row.get('CONTENT') or ''
                logger.debug(f"Entering section '{current_section}'")
                continue

            deadline = (row.get('DEADLINE') or '').strip()
            if not deadline:
                continue

            if not current_section:
                if not section:
                    raise MissingSectionError(
                        f"No section name found before deadline row "
                        f"'{row.get('CONTENT')}'"
                    )
                current_section = section

            events.append(CalendarEvent(
                uid=str(uuid.uuid4()),
                title=row.get('CONTENT') or '',
                start_date=format_date_to_ics(deadline),
                description=row.get('DESCRIPTION') or self.DEFAULT_DESCRIPTION,
                section=current_section
            ))

        logger.info(f"Built {len(events)} events from deadline rows")
        return events

    def task_uid(self, task: Task) -> str:
        """
        Generate a stable event UID for a task.

        Args:
            task: Task to identify

        Returns:
            UUID string derived from the task id
        """
        return str(uuid.uuid5(TASK_UID_NAMESPACE, str(task.id)))
