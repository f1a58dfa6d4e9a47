"""Summarizer: short, display-oriented synopsis of a workbook.

The summary is lossy by design -- it shows shape plus a few sample rows per
sheet.  Consumers needing more data should use
:func:`sheetchat.context.format_for_model` or the sheets themselves.
"""

from __future__ import annotations

from collections.abc import Sequence

from sheetchat._rendering import DEFAULT_PLACEHOLDER, render_row
from sheetchat.models import Sheet

DEFAULT_SAMPLE_ROWS = 3


def summarize(
    sheets: Sequence[Sheet],
    sample_rows: int = DEFAULT_SAMPLE_ROWS,
    placeholder: str = DEFAULT_PLACEHOLDER,
) -> str:
    """Summarize *sheets* in source order.

    Per sheet: ordinal and name, row and column counts, the headers, and
    up to *sample_rows* rows rendered as ``header: value`` pairs.  Missing
    cells render as *placeholder*.  The result depends only on the input.
    """
    lines = [f"Excel file contains {len(sheets)} sheet(s):", ""]

    for index, sheet in enumerate(sheets, start=1):
        lines.append(f'Sheet {index}: "{sheet.name}"')
        lines.append(f"- Rows: {sheet.row_count}")
        lines.append(f"- Columns: {sheet.column_count}")
        lines.append(f"- Headers: {', '.join(sheet.headers)}")

        sample_count = min(sample_rows, sheet.row_count)
        if sample_count > 0:
            lines.append(f"- Sample data (first {sample_rows} rows):")
            for row_index in range(sample_count):
                row_text = render_row(sheet, row_index, ", ", placeholder)
                lines.append(f"  Row {row_index + 1}: {row_text}")
        lines.append("")

    return "\n".join(lines) + "\n"
