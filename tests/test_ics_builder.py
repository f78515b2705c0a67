"""Unit tests for iCalendar text generation."""
from datetime import datetime, timedelta

import pytest

from processor.ics_builder import build_calendar, build_event, format_date_to_ics, render_event
from processor.models import CalendarEvent, next_ics_date


def _property(block: str, name: str) -> str:
    for line in block.splitlines():
        if line.startswith(name + ':'):
            return line[len(name) + 1:]
    raise AssertionError(f"{name} not found in block")


class TestFormatDateToIcs:
    """Test cases for format_date_to_ics."""

    @pytest.mark.parametrize("value,expected", [
        ("2024-03-01", "20240301"),
        ("2024/12/31", "20241231"),
        ("March 5, 2024", "20240305"),
        ("2024-02-29T15:30:00", "20240229"),
    ])
    def test_formats_parseable_dates(self, value, expected):
        """Test that common date spellings become YYYYMMDD."""
        assert format_date_to_ics(value) == expected

    def test_result_round_trips(self):
        """Test that the formatted value parses back to the same day."""
        formatted = format_date_to_ics("2025-07-04")

        assert len(formatted) == 8
        assert formatted.isdigit()
        assert datetime.strptime(formatted, '%Y%m%d').date().isoformat() == "2025-07-04"

    def test_invalid_date_raises(self):
        """Test that garbage input is rejected."""
        with pytest.raises(ValueError):
            format_date_to_ics("not a date")


class TestBuildEvent:
    """Test cases for build_event."""

    @pytest.mark.parametrize("start,end", [
        ("20240301", "20240302"),
        ("20240229", "20240301"),
        ("20230228", "20230301"),
        ("20231231", "20240101"),
        ("20240430", "20240501"),
    ])
    def test_end_date_is_next_day(self, start, end):
        """Test the exclusive end date across month and year boundaries."""
        block = build_event("Essay", start, "uid-1", "Draft")

        assert _property(block, 'DTSTART;VALUE=DATE') == start
        assert _property(block, 'DTEND;VALUE=DATE') == end

        dtend = datetime.strptime(end, '%Y%m%d')
        assert (dtend - timedelta(days=1)).strftime('%Y%m%d') == start

    def test_block_structure(self):
        """Test the fixed property order of a VEVENT block."""
        block = build_event("Essay 1", "20240301", "abc-123", "Draft due", section="ACCT 2301")

        assert block == (
            "BEGIN:VEVENT\n"
            "UID:abc-123\n"
            "SUMMARY:Essay 1 | ACCT 2301\n"
            "DESCRIPTION:Draft due\n"
            "DTSTART;VALUE=DATE:20240301\n"
            "DTEND;VALUE=DATE:20240302\n"
            "DTSTAMP:20240301\n"
            "END:VEVENT\n"
        )

    def test_summary_without_section(self):
        """Test that the title stands alone when no section is given."""
        block = build_event("Standalone", "20240301", "uid", "desc")

        assert _property(block, 'SUMMARY') == "Standalone"

    def test_section_is_never_appended_twice(self):
        """Test that a title and section always produce a single suffix."""
        event = CalendarEvent(
            uid="uid", title="Essay 1", start_date="20240301",
            description="desc", section="ACCT 2301"
        )

        assert event.summary == "Essay 1 | ACCT 2301"
        assert _property(render_event(event), 'SUMMARY').count(" | ") == 1

    def test_task_link_appended_to_description(self):
        """Test that a task reference adds an escaped link line."""
        block = build_event("Pay rent", "20240301", "uid", "Monthly", task_id="8675309")

        assert _property(block, 'DESCRIPTION') == (
            "Monthly\\n\\nView task: https://app.todoist.com/app/task/8675309"
        )

    def test_line_breaks_are_escaped(self):
        """Test that multi-line descriptions stay on one property line."""
        block = build_event("Essay", "20240301", "uid", "line one\nline two\r\nline three")

        assert _property(block, 'DESCRIPTION') == "line one\\nline two\\nline three"
        assert len(block.splitlines()) == 8

    def test_idempotent_except_uid(self):
        """Test that identical inputs produce identical blocks."""
        first = build_event("Essay", "20240301", "uid-a", "Draft", section="ENGL 1301", task_id="42")
        second = build_event("Essay", "20240301", "uid-a", "Draft", section="ENGL 1301", task_id="42")
        other_uid = build_event("Essay", "20240301", "uid-b", "Draft", section="ENGL 1301", task_id="42")

        assert first == second
        assert first.replace("uid-a", "uid-b") == other_uid

    def test_next_ics_date(self):
        """Test the shared date arithmetic helper."""
        assert next_ics_date("20241231") == "20250101"


class TestBuildCalendar:
    """Test cases for build_calendar."""

    def test_envelope_with_name(self):
        """Test calendar envelope lines and event order."""
        events = [
            CalendarEvent(uid="2", title="Second", start_date="20240305", description="b"),
            CalendarEvent(uid="1", title="First", start_date="20240301", description="a"),
        ]

        calendar = build_calendar(events, name="Homework", prod_id="-//Test//EN")
        lines = calendar.split("\n")

        assert lines[:4] == [
            "BEGIN:VCALENDAR",
            "VERSION:2.0",
            "PRODID:-//Test//EN",
            "X-WR-CALNAME:Homework",
        ]
        assert lines[-1] == "END:VCALENDAR"
        assert calendar.index("UID:2") < calendar.index("UID:1")
        assert calendar.count("BEGIN:VEVENT") == 2

    def test_envelope_without_name(self):
        """Test that the calendar name line is optional."""
        calendar = build_calendar([])

        assert "X-WR-CALNAME" not in calendar
        assert calendar == (
            "BEGIN:VCALENDAR\n"
            "VERSION:2.0\n"
            "PRODID:-//Todoist Calendar Sync//EN\n"
            "END:VCALENDAR"
        )
