"""Workbook parser: decode spreadsheet bytes into ordered raw sheets.

Supports three containers, selected by :class:`~sheetchat.security.SheetSecurityScanner`:

1. **xlsx** -- openpyxl (cached values), with a pandas ``read_excel``
   fallback when openpyxl cannot open the container.
2. **xls** -- xlrd, dates converted using the workbook datemode.
3. **csv** -- pandas ``read_csv``, numeric columns inferred per cell.

Every decoder yields :class:`RawSheet` objects in source order, clipped
to the used range: leading blank rows and columns are dropped, so the
header is the first non-blank row wherever the table starts.  Rows are
ragged: trailing empty cells are trimmed from each row and trailing blank
rows are dropped, while interior blanks are kept so row positions still
line up with the table.  Fatal conditions raise
:class:`~sheetchat.errors.ParseError`; non-fatal events are returned as
``IngestError`` warnings.
"""

from __future__ import annotations

import csv
import io
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import openpyxl
import pandas as pd
import xlrd
from openpyxl.chartsheet import Chartsheet

from sheetchat.config import SheetChatConfig
from sheetchat.errors import ErrorCode, IngestError, ParseError
from sheetchat.models import SourceFormat

logger = logging.getLogger("sheetchat")

_DEFAULT_CSV_SHEET_NAME = "Sheet1"

# OLE2 directory entry name of an encrypted OOXML payload (UTF-16LE).
_ENCRYPTED_PACKAGE_MARKER = "EncryptedPackage".encode("utf-16-le")


# ---------------------------------------------------------------------------
# Internal data structures
# ---------------------------------------------------------------------------


@dataclass
class RawSheet:
    """A decoded worksheet before normalization.

    ``rows[0]`` is the header row when present.  Values are plain Python
    objects (``str``, ``int``, ``float``, ``bool``, ``datetime`` or ``None``).
    """

    name: str
    rows: list[list[Any]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class WorkbookParser:
    """Decode raw spreadsheet bytes into an ordered list of :class:`RawSheet`.

    Parameters
    ----------
    config:
        Configuration controlling ``max_rows_per_sheet`` and chart-sheet
        handling.
    """

    def __init__(self, config: SheetChatConfig) -> None:
        self._config = config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse(
        self,
        data: bytes,
        source_format: SourceFormat,
        source_name: str | None = None,
    ) -> tuple[list[RawSheet], list[IngestError]]:
        """Decode *data* as *source_format*.

        Returns
        -------
        tuple[list[RawSheet], list[IngestError]]
            Sheets in source order, and non-fatal warnings.

        Raises
        ------
        ParseError
            If the container is corrupt, encrypted, or holds no sheets.
        """
        warnings: list[IngestError] = []
        start = time.monotonic()

        if source_format is SourceFormat.XLSX:
            sheets = self._parse_xlsx(data, warnings)
        elif source_format is SourceFormat.XLS:
            sheets = self._parse_xls(data)
        else:
            sheets = self._parse_csv(data, source_name)

        if not sheets:
            logger.error("Parse failed: no sheets found in %s", source_name or "<bytes>")
            raise ParseError(
                code=ErrorCode.E_PARSE_EMPTY,
                message="No sheets found in workbook.",
                stage="parse",
            )

        sheets = [self._normalize_sheet(sheet, warnings) for sheet in sheets]

        duration = time.monotonic() - start
        logger.info(
            "Parsed %s (%s): %d sheets in %.3fs",
            source_name or "<bytes>",
            source_format.value,
            len(sheets),
            duration,
        )
        return sheets, warnings

    # ------------------------------------------------------------------
    # xlsx: openpyxl primary, pandas fallback
    # ------------------------------------------------------------------

    def _parse_xlsx(self, data: bytes, warnings: list[IngestError]) -> list[RawSheet]:
        try:
            wb = openpyxl.load_workbook(io.BytesIO(data), data_only=True)
        except Exception as exc:
            logger.warning("openpyxl could not open workbook: %s; trying pandas fallback", exc)
            fallback = self._parse_xlsx_pandas(data, exc)
            warnings.append(
                IngestError(
                    code=ErrorCode.W_PARSER_FALLBACK,
                    message=f"Workbook parsed via pandas fallback. Reason: {exc}",
                    stage="parse",
                    recoverable=True,
                )
            )
            return fallback

        sheets: list[RawSheet] = []
        try:
            for sheet_name in wb.sheetnames:
                ws = wb[sheet_name]
                if isinstance(ws, Chartsheet):
                    if self._config.skip_chart_sheets:
                        warnings.append(
                            IngestError(
                                code=ErrorCode.W_SHEET_SKIPPED_CHART,
                                message=f"Sheet '{sheet_name}' is chart-only; skipped.",
                                sheet_name=sheet_name,
                                stage="parse",
                                recoverable=True,
                            )
                        )
                        logger.info("Skipped chart-only sheet '%s'", sheet_name)
                    else:
                        sheets.append(RawSheet(name=sheet_name))
                    continue
                rows = [
                    list(values)
                    for values in ws.iter_rows(
                        min_row=ws.min_row, min_col=ws.min_column, values_only=True
                    )
                ]
                sheets.append(RawSheet(name=sheet_name, rows=rows))
        finally:
            wb.close()
        return sheets

    def _parse_xlsx_pandas(self, data: bytes, cause: Exception) -> list[RawSheet]:
        try:
            frames = pd.read_excel(io.BytesIO(data), sheet_name=None, header=None)
        except Exception as exc:
            logger.error("All parsers failed for workbook: %s", exc)
            raise ParseError(
                code=ErrorCode.E_PARSE_CORRUPT,
                message=f"Failed to process spreadsheet: {cause}",
                stage="parse",
            ) from exc
        return [
            RawSheet(name=str(name), rows=_frame_to_rows(frame))
            for name, frame in frames.items()
        ]

    # ------------------------------------------------------------------
    # xls: xlrd
    # ------------------------------------------------------------------

    def _parse_xls(self, data: bytes) -> list[RawSheet]:
        # Encrypted xlsx files are wrapped in an OLE2 container.
        if _ENCRYPTED_PACKAGE_MARKER in data:
            logger.error("Parse failed: password-protected workbook")
            raise ParseError(
                code=ErrorCode.E_PARSE_PASSWORD,
                message="Workbook is password-protected.",
                stage="parse",
            )
        try:
            book = xlrd.open_workbook(file_contents=data)
        except Exception as exc:
            exc_msg = str(exc).lower()
            if "password" in exc_msg or "encrypt" in exc_msg:
                logger.error("Parse failed: password-protected workbook")
                raise ParseError(
                    code=ErrorCode.E_PARSE_PASSWORD,
                    message=f"Workbook is password-protected: {exc}",
                    stage="parse",
                ) from exc
            logger.error("xlrd could not open workbook: %s", exc)
            raise ParseError(
                code=ErrorCode.E_PARSE_CORRUPT,
                message=f"Failed to process spreadsheet: {exc}",
                stage="parse",
            ) from exc

        sheets: list[RawSheet] = []
        for sheet in book.sheets():
            rows = [
                [_xls_value(cell, book.datemode) for cell in sheet.row(row_idx)]
                for row_idx in range(sheet.nrows)
            ]
            sheets.append(RawSheet(name=sheet.name, rows=rows))
        return sheets

    # ------------------------------------------------------------------
    # csv: pandas
    # ------------------------------------------------------------------

    def _parse_csv(self, data: bytes, source_name: str | None) -> list[RawSheet]:
        try:
            text = data.decode("utf-8-sig")
            # pandas sizes the frame from the first line; longer records
            # need the full width declared up front.
            width = max((len(record) for record in csv.reader(io.StringIO(text))), default=0)
        except (UnicodeDecodeError, csv.Error) as exc:
            logger.error("CSV input could not be decoded: %s", exc)
            raise ParseError(
                code=ErrorCode.E_PARSE_CORRUPT,
                message=f"Failed to process spreadsheet: {exc}",
                stage="parse",
            ) from exc
        if width == 0:
            raise ParseError(
                code=ErrorCode.E_PARSE_EMPTY,
                message="CSV input has no data.",
                stage="parse",
            )

        try:
            frame = pd.read_csv(
                io.StringIO(text),
                header=None,
                names=list(range(width)),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=False,
            )
        except Exception as exc:
            logger.error("pandas could not read CSV: %s", exc)
            raise ParseError(
                code=ErrorCode.E_PARSE_CORRUPT,
                message=f"Failed to process spreadsheet: {exc}",
                stage="parse",
            ) from exc

        name = _DEFAULT_CSV_SHEET_NAME
        if source_name:
            stem = source_name.rsplit("/", 1)[-1].rsplit(".", 1)[0]
            name = stem or _DEFAULT_CSV_SHEET_NAME

        # Infer numbers per cell; header and non-numeric cells stay text.
        for column in frame.columns:
            numeric = pd.to_numeric(frame[column], errors="coerce")
            frame[column] = frame[column].where(numeric.isna(), numeric).astype(object)
        return [RawSheet(name=name, rows=_frame_to_rows(frame))]

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def _normalize_sheet(self, sheet: RawSheet, warnings: list[IngestError]) -> RawSheet:
        """Clip to the used range and enforce ``max_rows_per_sheet``.

        The header is the first non-blank row, and columns left of the
        leftmost non-blank cell are dropped.
        """
        rows = [_trim_row(row) for row in sheet.rows]
        while rows and not rows[-1]:
            rows.pop()
        first = next((i for i, row in enumerate(rows) if row), len(rows))
        rows = rows[first:]
        lead = min((_leading_blanks(row) for row in rows if row), default=0)
        if lead:
            rows = [row[lead:] for row in rows]

        limit = self._config.max_rows_per_sheet
        if len(rows) > limit:
            warnings.append(
                IngestError(
                    code=ErrorCode.W_ROWS_TRUNCATED,
                    message=(
                        f"Sheet '{sheet.name}' has {len(rows)} rows, exceeding "
                        f"max_rows_per_sheet ({limit}). Extra rows dropped."
                    ),
                    sheet_name=sheet.name,
                    stage="parse",
                    recoverable=True,
                )
            )
            logger.warning(
                "Sheet '%s' exceeds max_rows_per_sheet (%d > %d); truncated",
                sheet.name,
                len(rows),
                limit,
            )
            rows = rows[:limit]
        return RawSheet(name=sheet.name, rows=rows)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def _trim_row(row: list[Any]) -> list[Any]:
    end = len(row)
    while end > 0 and _is_blank(row[end - 1]):
        end -= 1
    return row[:end]


def _leading_blanks(row: list[Any]) -> int:
    count = 0
    while count < len(row) and _is_blank(row[count]):
        count += 1
    return count


def _to_python(value: Any) -> Any:
    """Unbox numpy scalars and map pandas missing markers to ``None``."""
    if value is None:
        return None
    if isinstance(value, np.generic):
        value = value.item()
    if not isinstance(value, str) and pd.isna(value):
        return None
    return value


def _frame_to_rows(frame: pd.DataFrame) -> list[list[Any]]:
    return [[_to_python(v) for v in row] for row in frame.itertuples(index=False, name=None)]


def _xls_value(cell: Any, datemode: int) -> Any:
    """Convert an xlrd cell to a plain Python value."""
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return None
    if cell.ctype == xlrd.XL_CELL_DATE:
        try:
            return xlrd.xldate_as_datetime(cell.value, datemode)
        except Exception as exc:
            logger.warning("xls date conversion failed: %s | keeping serial value", exc)
            return cell.value
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(cell.value)
    if cell.ctype == xlrd.XL_CELL_ERROR:
        return xlrd.error_text_from_code.get(cell.value, "#ERROR")
    return cell.value
