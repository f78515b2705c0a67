"""Convert a deadline CSV export into an iCalendar file."""
import argparse
import csv
import logging
import re
import sys
from pathlib import Path
from typing import Dict, List, Optional

from logging_setup import setup_logging
from processor.event_processor import EventProcessor, MissingSectionError
from processor.ics_builder import build_calendar

logger = logging.getLogger(__name__)

CSV_PROD_ID = '-//Deadline CSV Export//EN'
SECTION_PROMPT = "No section name found. Please enter the section name (e.g., ACCT 2301): "


class CsvParseError(Exception):
    """Raised when the deadline CSV cannot be read."""


def sanitize_section_name(section: str) -> str:
    """Strip everything but ASCII letters and digits from a section name."""
    return re.sub(r'[^A-Za-z0-9]', '', section)


def read_rows(csv_path: Path) -> List[Dict[str, Optional[str]]]:
    """
    Read every row of the CSV before anything is produced from it.

    Args:
        csv_path: Path to a CSV with a header row

    Returns:
        List of rows keyed by column name

    Raises:
        CsvParseError: If the file cannot be opened or parsed
    """
    try:
        with open(csv_path, newline='', encoding='utf-8-sig') as f:
            return list(csv.DictReader(f, strict=True))
    except (csv.Error, OSError, UnicodeDecodeError) as e:
        raise CsvParseError(f"Error processing CSV {csv_path}: {e}") from e


def _file_section(rows, events, section: Optional[str]) -> str:
    """
    Pick the section that names the output file.

    Args:
        rows: Rows read from the CSV
        events: Events built from the rows
        section: Section name supplied by the caller

    Returns:
        Section of the first event, else the first section row, else the supplied name

    Raises:
        MissingSectionError: If none of them is available
    """
    if events:
        return events[0].section
    for row in rows:
        if (row.get('TYPE') or '').strip() == EventProcessor.SECTION_TYPE and row.get('CONTENT'):
            return row['CONTENT']
    if section:
        return section
    raise MissingSectionError("No section name found for the output file")


def generate_ics_from_csv(
    csv_path,
    output_dir,
    section: Optional[str] = None,
    processor: Optional[EventProcessor] = None
) -> Path:
    """
    Generate a <Section>.ics file from a deadline CSV.

    Args:
        csv_path: CSV with TYPE, CONTENT, DEADLINE and DESCRIPTION columns
        output_dir: Directory the calendar is written to
        section: Section name for deadline rows preceding any section row
        processor: Event processor to use

    Returns:
        Path of the written file

    Raises:
        CsvParseError: If the CSV cannot be parsed; nothing is written
        MissingSectionError: If no section name is available
        OSError: If the output directory or file cannot be written
    """
    processor = processor or EventProcessor()
    rows = read_rows(Path(csv_path))
    logger.info(f"Read {len(rows)} rows from {csv_path}")

    events = processor.events_from_rows(rows, section=section)
    file_section = _file_section(rows, events, section)

    output_dir = Path(output_dir).resolve()
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"{sanitize_section_name(file_section)}.ics"
    output_path.write_text(
        build_calendar(events, prod_id=CSV_PROD_ID),
        encoding='utf-8'
    )
    logger.info(f"ICS file generated: {output_path}", extra={'events': len(events)})
    return output_path


def _parse_args(argv):
    """
    Parse command line arguments.

    Args:
        argv: Argument list, or None for sys.argv

    Returns:
        Parsed argparse namespace
    """
    parser = argparse.ArgumentParser(description="Convert a deadline CSV into an .ics calendar")
    parser.add_argument('csv_path', type=Path, help="CSV file with TYPE, CONTENT, DEADLINE, DESCRIPTION columns")
    parser.add_argument('--output-dir', type=Path, default=None,
                        help="Directory for the .ics file (default: next to the CSV)")
    parser.add_argument('--section', default=None,
                        help="Section name for deadlines listed before any section row")
    parser.add_argument('--log-level', default='INFO')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Command line entry point."""
    args = _parse_args(argv)
    setup_logging(args.log_level)

    output_dir = args.output_dir or args.csv_path.resolve().parent
    section = args.section

    try:
        try:
            path = generate_ics_from_csv(args.csv_path, output_dir, section=section)
        except MissingSectionError:
            if not sys.stdin.isatty():
                raise
            section = input(SECTION_PROMPT).strip()
            path = generate_ics_from_csv(args.csv_path, output_dir, section=section)
    except MissingSectionError as e:
        logger.error(f"{e}; pass --section to name it")
        return 1
    except CsvParseError as e:
        logger.error(str(e), exc_info=True)
        return 1
    except ValueError as e:
        logger.error(f"Invalid deadline date in {args.csv_path}: {e}")
        return 1
    except OSError as e:
        logger.error(f"Could not write calendar to {output_dir}: {e}")
        return 1

    print(path)
    return 0


if __name__ == '__main__':
    sys.exit(main())
