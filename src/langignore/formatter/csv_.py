"""CSV rendering of comparer change lists for scripting."""

from __future__ import annotations

import csv
import io

from langignore.comparer import StorageComparer
from langignore.formatter.table import status_rows

CSV_HEADER = ("collection", "name", "operation")


def format_status_csv(comparer: StorageComparer) -> str:
    """Render pending changes as CSV text.

    Output always starts with a header row. The default collection is
    written as an empty ``collection`` value.

    Args:
        comparer: Comparer with change lists already built.

    Returns:
        str: CSV text with header, using LF line endings (no trailing newline).
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in status_rows(comparer):
        writer.writerow([row.collection, row.name, row.operation])

    # Remove trailing newline that csv.writer appends after the last row
    return buf.getvalue().rstrip("\n")
