"""Data models for task and calendar processing."""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

ICS_DATE_FORMAT = '%Y%m%d'


def next_ics_date(start_date: str) -> str:
    """Return the day after a YYYYMMDD date, rolling over months and years."""
    start = datetime.strptime(start_date, ICS_DATE_FORMAT).date()
    return (start + timedelta(days=1)).strftime(ICS_DATE_FORMAT)


@dataclass
class Due:
    """Due information attached to a remote task."""
    date: str


@dataclass
class Task:
    """Task fetched from the remote to-do service."""
    id: str
    content: str
    description: str
    due: Optional[Due]


@dataclass
class Project:
    """Project metadata fetched from the remote to-do service."""
    id: str
    name: str


@dataclass
class CalendarEvent:
    """All-day calendar event derived from a task or a deadline row."""
    uid: str
    title: str
    start_date: str
    description: str
    section: Optional[str] = None
    task_id: Optional[str] = None

    @property
    def summary(self) -> str:
        """
        Display text for the event.

        Returns:
            "<title> | <section>" when a section is set, otherwise the title
        """
        if self.section:
            return f"{self.title} | {self.section}"
        return self.title

    @property
    def end_date(self) -> str:
        """Exclusive end date, one calendar day after the start."""
        return next_ics_date(self.start_date)
