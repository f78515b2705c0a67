"""iCalendar text generation for all-day events."""
import logging
from typing import Iterable, Optional

from dateutil import parser as date_parser

from processor.models import ICS_DATE_FORMAT, CalendarEvent

logger = logging.getLogger(__name__)

DEFAULT_PROD_ID = '-//Todoist Calendar Sync//EN'
TASK_URL_TEMPLATE = 'https://app.todoist.com/app/task/{task_id}'


def format_date_to_ics(value: str) -> str:
    """
    Format a date string as an iCalendar DATE value (YYYYMMDD).

    Args:
        value: Any string dateutil can parse as a calendar date

    Returns:
        Eight digit date string at local midnight, without time zone suffix

    Raises:
        ValueError: If the string is not a parseable date
    """
    parsed = date_parser.parse(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime(ICS_DATE_FORMAT)


def _escape_text(value: str) -> str:
    """
    Replace line breaks with the literal iCalendar \\n escape.

    Args:
        value: Text for a single property value

    Returns:
        Text without CR or LF characters
    """
    return value.replace('\r\n', '\\n').replace('\r', '\\n').replace('\n', '\\n')


def render_event(event: CalendarEvent) -> str:
    """
    Render a single VEVENT block.

    Args:
        event: Event to render

    Returns:
        VEVENT block, one property per line, ending with a newline
    """
    description = _escape_text(event.description)
    if event.task_id:
        task_url = TASK_URL_TEMPLATE.format(task_id=event.task_id)
        description = f"{description}\\n\\nView task: {task_url}"

    lines = [
        'BEGIN:VEVENT',
        f"UID:{event.uid}",
        f"SUMMARY:{_escape_text(event.summary)}",
        f"DESCRIPTION:{description}",
        f"DTSTART;VALUE=DATE:{event.start_date}",
        f"DTEND;VALUE=DATE:{event.end_date}",
        f"DTSTAMP:{event.start_date}",
        'END:VEVENT',
    ]
    return '\n'.join(lines) + '\n'


def build_event(
    title: str,
    start_date: str,
    uid: str,
    description: str,
    section: Optional[str] = None,
    task_id: Optional[str] = None
) -> str:
    """
    Build a VEVENT block for an all-day event.

    Args:
        title: Event title
        start_date: Start date in YYYYMMDD form
        uid: Unique identifier supplied by the caller
        description: Free text description
        section: Optional section or project name appended to the summary
        task_id: Optional originating task id, linked from the description

    Returns:
        VEVENT block text
    """
    return render_event(CalendarEvent(
        uid=uid,
        title=title,
        start_date=start_date,
        description=description,
        section=section,
        task_id=task_id
    ))


def build_calendar(
    events: Iterable[CalendarEvent],
    name: Optional[str] = None,
    prod_id: str = DEFAULT_PROD_ID
) -> str:
    """
    Wrap events in a VCALENDAR envelope.

    Events keep the order they are given in.
    """
    lines = [
        'BEGIN:VCALENDAR',
        'VERSION:2.0',
        f"PRODID:{prod_id}",
    ]
    if name:
        lines.append(f"X-WR-CALNAME:{_escape_text(name)}")

    count = 0
    for event in events:
        lines.append(render_event(event))
        count += 1

    lines.append('END:VCALENDAR')
    logger.debug(f"Built calendar with {count} events")
    return '\n'.join(lines)
