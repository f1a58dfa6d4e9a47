"""Tabular model builder: raw parser output -> canonical ``Workbook``."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sheetchat.config import SheetChatConfig
from sheetchat.models import Cell, Sheet, SourceFormat, Workbook
from sheetchat.parser import RawSheet
from sheetchat.summarizer import summarize

logger = logging.getLogger("sheetchat")


class TabularModelBuilder:
    """Normalize :class:`RawSheet` objects into an immutable :class:`Workbook`.

    The first raw row of each sheet becomes its headers (stringified, absent
    cells as ``""``).  Every later row becomes a data row of typed
    :class:`Cell` values, kept ragged and in source order.  The summary is
    generated once here.
    """

    def __init__(self, config: SheetChatConfig) -> None:
        self._config = config

    def build(
        self,
        raw_sheets: Sequence[RawSheet],
        source_name: str | None = None,
        source_format: SourceFormat | None = None,
        content_hash: str | None = None,
    ) -> Workbook:
        sheets = [self.build_sheet(raw) for raw in raw_sheets]
        summary = summarize(
            sheets,
            sample_rows=self._config.summary_sample_rows,
            placeholder=self._config.missing_placeholder,
        )
        workbook = Workbook(
            sheets=tuple(sheets),
            sheet_names=tuple(sheet.name for sheet in sheets),
            summary=summary,
            source_name=source_name,
            source_format=source_format,
            content_hash=content_hash,
        )
        logger.debug(
            "Built workbook with %d sheets, %d data rows",
            len(workbook.sheets),
            workbook.total_rows,
        )
        return workbook

    def build_sheet(self, raw: RawSheet) -> Sheet:
        date_format = self._config.date_format
        if not raw.rows:
            return Sheet(name=raw.name)

        headers = tuple(
            Cell.from_value(value, date_format).display() for value in raw.rows[0]
        )
        rows = tuple(
            tuple(Cell.from_value(value, date_format) for value in row)
            for row in raw.rows[1:]
        )
        return Sheet(name=raw.name, headers=headers, rows=rows)
