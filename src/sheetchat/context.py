"""AI-context formatter: size-bounded serialization for language-model prompts.

Only the first ``row_limit`` rows of each sheet are rendered; the remainder
is reported as a count.  The output is therefore *not* a complete copy of
the data, and answers derived from it only cover the sampled rows.
"""

from __future__ import annotations

from collections.abc import Sequence

from sheetchat._rendering import DEFAULT_PLACEHOLDER, render_row
from sheetchat.models import Sheet

DEFAULT_ROW_LIMIT = 10

_HEADER = "Excel Dataset Information:"
_SEPARATOR = " | "


def format_for_model(
    sheets: Sequence[Sheet],
    row_limit: int = DEFAULT_ROW_LIMIT,
    placeholder: str = DEFAULT_PLACEHOLDER,
) -> str:
    """Serialize *sheets* into the prompt-ready dataset block."""
    row_limit = max(row_limit, 0)
    lines = [_HEADER, ""]

    for sheet in sheets:
        lines.append(f"=== Sheet: {sheet.name} ===")
        lines.append(f"Headers: {_SEPARATOR.join(sheet.headers)}")
        lines.append("")

        for row_index in range(min(row_limit, sheet.row_count)):
            row_text = render_row(sheet, row_index, _SEPARATOR, placeholder)
            lines.append(f"Row {row_index + 1}: {row_text}")

        omitted = sheet.row_count - row_limit
        if omitted > 0:
            lines.append(f"... and {omitted} more rows")
        lines.append("")

    return "\n".join(lines) + "\n"
