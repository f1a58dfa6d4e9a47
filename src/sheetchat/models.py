"""Pydantic data models and enumerations for sheetchat.

Defines the closed cell variant (``CellKind`` / ``Cell``), the canonical
``Sheet`` and ``Workbook`` models produced by ingestion, and the
``SearchResult`` returned by the search index.  All models are frozen: a
workbook is replaced wholesale on re-ingestion, never mutated in place.
"""

from __future__ import annotations

import datetime as dt
import math
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, computed_field, model_validator

_DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class CellKind(str, Enum):
    """Closed set of cell value kinds accepted at the model boundary."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    EMPTY = "empty"


class SourceFormat(str, Enum):
    """Container format the workbook was decoded from."""

    XLSX = "xlsx"
    XLS = "xls"
    CSV = "csv"


# ---------------------------------------------------------------------------
# Cell
# ---------------------------------------------------------------------------


class Cell(BaseModel):
    """A single typed cell value.

    ``value`` is ``None`` for ``EMPTY``, ``bool`` for ``BOOLEAN``,
    ``int``/``float`` for ``NUMBER`` and ``str`` for ``TEXT``.
    """

    model_config = ConfigDict(frozen=True)

    kind: CellKind
    value: bool | int | float | str | None = None

    @classmethod
    def empty(cls) -> Cell:
        return cls(kind=CellKind.EMPTY)

    @classmethod
    def from_value(cls, raw: Any, date_format: str = _DEFAULT_DATE_FORMAT) -> Cell:
        """Map a raw parser value onto the closed cell variant.

        Booleans are checked before numbers since ``bool`` subclasses
        ``int``.  Dates and times become text in *date_format*.
        """
        if raw is None:
            return cls.empty()
        if isinstance(raw, bool):
            return cls(kind=CellKind.BOOLEAN, value=raw)
        if isinstance(raw, Decimal):
            raw = float(raw)
        if isinstance(raw, (int, float)):
            if isinstance(raw, float) and math.isnan(raw):
                return cls.empty()
            return cls(kind=CellKind.NUMBER, value=raw)
        if isinstance(raw, (dt.datetime, dt.date)):
            return cls(kind=CellKind.TEXT, value=raw.strftime(date_format))
        if isinstance(raw, dt.time):
            return cls(kind=CellKind.TEXT, value=raw.isoformat())
        text = str(raw)
        if text == "":
            return cls.empty()
        return cls(kind=CellKind.TEXT, value=text)

    @property
    def is_empty(self) -> bool:
        return self.kind is CellKind.EMPTY

    def display(self) -> str:
        """String form used for searching, headers and rendering."""
        if self.kind is CellKind.EMPTY:
            return ""
        if self.kind is CellKind.BOOLEAN:
            return "TRUE" if self.value else "FALSE"
        if self.kind is CellKind.NUMBER:
            value = self.value
            if isinstance(value, float) and value.is_integer():
                return str(int(value))
            return str(value)
        return str(self.value)


# ---------------------------------------------------------------------------
# Core Models
# ---------------------------------------------------------------------------


class Sheet(BaseModel):
    """One worksheet: string headers plus ragged data rows.

    Rows may hold fewer or more cells than there are headers; use
    :meth:`cell` to index defensively.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    headers: tuple[str, ...] = ()
    rows: tuple[tuple[Cell, ...], ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def row_count(self) -> int:
        return len(self.rows)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def column_count(self) -> int:
        return len(self.headers)

    def cell(self, row_index: int, col_index: int) -> Cell | None:
        """Return the cell at the given 0-based data position, or ``None`` if absent."""
        if row_index < 0 or row_index >= len(self.rows):
            return None
        row = self.rows[row_index]
        if col_index < 0 or col_index >= len(row):
            return None
        return row[col_index]


class Workbook(BaseModel):
    """Normalized result of one ingestion call."""

    model_config = ConfigDict(frozen=True)

    sheets: tuple[Sheet, ...]
    sheet_names: tuple[str, ...]
    summary: str
    source_name: str | None = None
    source_format: SourceFormat | None = None
    content_hash: str | None = None

    @model_validator(mode="after")
    def _validate_sheet_names(self) -> Workbook:
        """Ensure ``sheet_names`` is parallel to ``sheets`` and unique."""
        names = tuple(sheet.name for sheet in self.sheets)
        if names != self.sheet_names:
            raise ValueError(
                f"sheet_names {list(self.sheet_names)} do not match "
                f"sheets {list(names)}"
            )
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate sheet names: {list(names)}")
        return self

    @property
    def total_rows(self) -> int:
        return sum(sheet.row_count for sheet in self.sheets)

    def get_sheet(self, name: str) -> Sheet | None:
        for sheet in self.sheets:
            if sheet.name == name:
                return sheet
        return None


class SearchResult(BaseModel):
    """One search match.

    ``row`` is the 1-based row number as seen in the spreadsheet
    application (the header occupies row 1).  ``context`` maps every
    header to the matching row's cell, ``None`` where the row is short.
    """

    model_config = ConfigDict(frozen=True)

    sheet: str
    row: int
    column: str
    value: Cell
    context: dict[str, Cell | None]
