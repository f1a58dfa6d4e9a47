"""Search index: exhaustive case-insensitive substring search over cells.

There is no pre-built index; every call scans every non-empty cell of every
sheet, so results always reflect the sheets passed in.  Results are ordered
by sheet, then row, then column.

An empty query is a substring of every cell and therefore matches every
non-empty cell.  Callers wanting "no results for empty input" must check
for it themselves.
"""

from __future__ import annotations

from collections.abc import Sequence

from sheetchat.models import Cell, SearchResult, Sheet

# Rows consumed by the header before the first data row.  Row numbers
# count from the first row of the sheet's used range.
HEADER_ROW_OFFSET = 1


def spreadsheet_row_number(row_index: int) -> int:
    """Map a 0-based data row index to the row number shown in a spreadsheet app."""
    return row_index + 1 + HEADER_ROW_OFFSET


def column_label(sheet: Sheet, col_index: int) -> str:
    """Header text for *col_index*, or ``Column N`` when the header is missing or blank."""
    if col_index < len(sheet.headers) and sheet.headers[col_index]:
        return sheet.headers[col_index]
    return f"Column {col_index + 1}"


def row_context(sheet: Sheet, row_index: int) -> dict[str, Cell | None]:
    """Map every header to the row's cell; ``None`` where the row is short or empty."""
    context: dict[str, Cell | None] = {}
    for col_index, header in enumerate(sheet.headers):
        cell = sheet.cell(row_index, col_index)
        context[header] = None if cell is None or cell.is_empty else cell
    return context


def search(query: str, sheets: Sequence[Sheet]) -> list[SearchResult]:
    """Return every non-empty cell whose text contains *query*, ignoring case."""
    needle = query.casefold()
    results: list[SearchResult] = []

    for sheet in sheets:
        for row_index, row in enumerate(sheet.rows):
            context: dict[str, Cell | None] | None = None
            for col_index, cell in enumerate(row):
                if cell.is_empty or needle not in cell.display().casefold():
                    continue
                if context is None:
                    context = row_context(sheet, row_index)
                results.append(
                    SearchResult(
                        sheet=sheet.name,
                        row=spreadsheet_row_number(row_index),
                        column=column_label(sheet, col_index),
                        value=cell,
                        context=context,
                    )
                )
    return results
