"""
CSV serialization of report rows and multi-section exports.
"""

import csv
import io
import json
from typing import Any, List, Sequence

from entities.report import ReportSection, TransformedRow

LINE_TERMINATOR = "\n"


def render_cell(value: Any) -> str:
    """Text of one cell before quoting."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str, ensure_ascii=False)
    return str(value)


def serialize(rows: List[TransformedRow], columns: Sequence[str]) -> str:
    """
    Header line followed by one line per row.

    Every data cell is quoted, with embedded double quotes doubled. Header
    labels are only quoted when they contain a delimiter, quote or newline.
    """
    buffer = io.StringIO()
    header_writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator=LINE_TERMINATOR)
    row_writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator=LINE_TERMINATOR)

    header_writer.writerow(columns)
    for row in rows:
        row_writer.writerow([render_cell(row.get(column)) for column in columns])

    # No trailing newline after the last line
    return buffer.getvalue()[:-len(LINE_TERMINATOR)]


def serialize_sections(sections: List[ReportSection], columns: Sequence[str]) -> str:
    """Sections in order, labelled ones preceded by their label line, separated by a blank line."""
    blocks = []
    for section in sections:
        body = serialize(section.rows, columns)
        blocks.append(f"{section.label}{LINE_TERMINATOR}{body}" if section.label else body)
    return (LINE_TERMINATOR * 2).join(blocks)
