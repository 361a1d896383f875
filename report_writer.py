"""CSV serialization and report file output.

Every field is quoted and embedded quotes are doubled, so values such as
comma-joined group lists survive a round trip through any CSV reader.
"""

from __future__ import annotations

import csv
import io
import logging
import os
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

logger = logging.getLogger(__name__)

INTERSECTIONS_REPORT = "group-intersections"
INACTIVE_REPORT = "inactive-users"
UNREAD_REPORT = "inactive-users-unread"
UNDELIVERED_REPORT = "inactive-users-undelivered"
UNKNOWN_AUTHORS_REPORT = "unknown-authors"
EXCLUSIVE_REPORT = "users-only-in-one-group"


class EmptyReportError(ValueError):
    """Raised when asked to serialize zero records."""


def to_csv(records: Sequence[Mapping[str, Any]]) -> str:
    """Serialize uniformly-shaped records to CSV text.

    The header comes from the first record's keys.  Rows are joined by a
    bare newline with no trailing newline.

    Args:
        records: Non-empty sequence of mappings sharing the same keys.

    Returns:
        The CSV document as a string.

    Raises:
        EmptyReportError: If *records* is empty.
    """
    if not records:
        raise EmptyReportError("Cannot write a CSV report from zero records")

    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=list(records[0].keys()),
        quoting=csv.QUOTE_ALL,
        lineterminator="\n",
    )
    writer.writeheader()
    writer.writerows(records)
    return buffer.getvalue().rstrip("\n")


def report_filename(report_kind: str, today: date | None = None) -> str:
    """Return ``<ISO-date>-<report-kind>.csv`` for *today* (default: now)."""
    today = today or date.today()
    return f"{today.isoformat()}-{report_kind}.csv"


def write_report(
    records: Sequence[Mapping[str, Any]],
    report_kind: str,
    output_dir: str,
    today: date | None = None,
) -> str:
    """Write *records* as a dated CSV report file.

    Serialization happens before anything touches the filesystem, so an
    empty record set leaves no file behind.

    Args:
        records: Rows to write (see ``to_csv``).
        report_kind: Report slug used in the file name.
        output_dir: Directory for the report.  Created if missing.
        today: Date stamped into the file name.  Defaults to today.

    Returns:
        The path of the written file.

    Raises:
        EmptyReportError: If *records* is empty.
    """
    content = to_csv(records)
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, report_filename(report_kind, today))
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
    logger.info("Wrote %d rows to %s", len(records), path)
    return path
