"""Shared ``header: value`` row rendering for the summary and AI context.

Private module -- not exported from the package.
"""

from __future__ import annotations

from sheetchat.models import Sheet

DEFAULT_PLACEHOLDER = "N/A"


def render_row(
    sheet: Sheet,
    row_index: int,
    separator: str,
    placeholder: str = DEFAULT_PLACEHOLDER,
) -> str:
    """Render one data row as ``header: value`` pairs, one per header.

    Absent and empty cells render as *placeholder*.  Cells beyond the last
    header are not rendered.
    """
    pairs = []
    for col_index, header in enumerate(sheet.headers):
        cell = sheet.cell(row_index, col_index)
        text = placeholder if cell is None or cell.is_empty else cell.display()
        pairs.append(f"{header}: {text}")
    return separator.join(pairs)
