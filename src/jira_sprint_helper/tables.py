"""Plain-text table rendering and display helpers for command output."""

from __future__ import annotations

import os
import sys
from datetime import datetime
from typing import List, Optional, Sequence

NARROW_TERMINAL_COLUMNS = 188
NARROW_SUMMARY_WIDTH = 80.0
FIXED_COLUMNS_WIDTH = 108


def terminal_columns() -> Optional[int]:
    """Return the width of the terminal attached to stdout, if there is one."""
    try:
        return os.get_terminal_size(sys.stdout.fileno()).columns
    except (OSError, ValueError):
        return None


def summary_width(columns: Optional[int]) -> Optional[float]:
    """Compute the width budget shared by summary columns.

    Terminals narrower than 188 columns get a fixed 80 character budget; wider
    ones get whatever is left after the fixed-width columns. ``None`` means the
    width is unknown and summaries should not be truncated.
    """
    if columns is None:
        return None
    if columns < NARROW_TERMINAL_COLUMNS:
        return NARROW_SUMMARY_WIDTH
    return float(columns - FIXED_COLUMNS_WIDTH)


def format_date(value: Optional[str]) -> str:
    """Format a Jira ISO8601 timestamp as ``YYYY-MM-DD HH:MM``.

    Returns ``"n/a"`` when the value is missing or cannot be parsed.
    """
    if not value:
        return "n/a"

    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return "n/a"
    return parsed.strftime("%Y-%m-%d %H:%M")


def _column_widths(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> List[int]:
    widths = [len(header) for header in headers]
    for row in rows:
        for index, cell in enumerate(row):
            for line in str(cell).split("\n"):
                widths[index] = max(widths[index], len(line))
    return widths


def _row_lines(cells: Sequence[str], widths: Sequence[int], separator: str) -> List[str]:
    cell_lines = [str(cell).split("\n") for cell in cells]
    height = max(len(lines) for lines in cell_lines)

    lines = []
    for offset in range(height):
        parts = []
        for lines_of_cell, width in zip(cell_lines, widths):
            text = lines_of_cell[offset] if offset < len(lines_of_cell) else ""
            parts.append(f" {text.ljust(width)} ")
        lines.append(separator.join(parts))
    return lines


def render_table(headers: Sequence[str], rows: Sequence[Sequence[str]], boxed: bool = False) -> str:
    """Render rows as a text table.

    Cells may span several lines separated by ``\\n``. The default layout only
    draws column separators and a rule under the header; ``boxed`` draws a full
    frame with a rule between every row.
    """
    widths = _column_widths(headers, rows)
    spans = ["─" * (width + 2) for width in widths]

    if not boxed:
        lines = _row_lines(headers, widths, "│")
        lines.append("┼".join(spans))
        for row in rows:
            lines.extend(_row_lines(row, widths, "│"))
        return "\n".join(line.rstrip() for line in lines)

    lines = ["┌" + "┬".join(spans) + "┐"]
    lines.extend(f"│{line}│" for line in _row_lines(headers, widths, "│"))
    for row in rows:
        lines.append("├" + "┼".join(spans) + "┤")
        lines.extend(f"│{line}│" for line in _row_lines(row, widths, "│"))
    lines.append("└" + "┴".join(spans) + "┘")
    return "\n".join(lines)


def print_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    empty_message: str,
    boxed: bool = False,
) -> None:
    """Print a table surrounded by blank lines, or ``empty_message`` without rows."""
    if not rows:
        print(empty_message)
        return

    print()
    print(render_table(headers, rows, boxed=boxed))
    print()
