"""SheetProcessor -- orchestrator and public API for sheetchat.

Drives ingestion end to end:

1. Pre-flight scan of the raw bytes via :class:`SheetSecurityScanner`.
2. Decode via :class:`WorkbookParser`.
3. Normalize via :class:`TabularModelBuilder` (summary generated here).
4. Store the result in the injected :class:`WorkbookStore` (last step).

The read operations (:meth:`summarize`, :meth:`search`,
:meth:`format_for_model`, sheet lookup) default to the stored workbook
and treat an empty store as "no sheets".

:func:`get_processor` returns one process-wide instance for single-document
front-ends.  Its store is a single shared slot: concurrent ingestions are
last-writer-wins.
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from collections.abc import Sequence
from pathlib import Path

from sheetchat.builder import TabularModelBuilder
from sheetchat.config import SheetChatConfig
from sheetchat.context import format_for_model as format_sheets
from sheetchat.errors import IngestError, ParseError
from sheetchat.models import SearchResult, Sheet, Workbook
from sheetchat.parser import WorkbookParser
from sheetchat.prompts import build_analysis_prompt, build_voice_prompt
from sheetchat.search_index import search as search_sheets
from sheetchat.security import SheetSecurityScanner
from sheetchat.store import WorkbookStore
from sheetchat.summarizer import summarize as summarize_sheets

logger = logging.getLogger("sheetchat")


# ---------------------------------------------------------------------------
# Processor
# ---------------------------------------------------------------------------


class SheetProcessor:
    """Ingest spreadsheets and answer summary/search/context requests.

    Parameters
    ----------
    config:
        Processor configuration.  Uses defaults when *None*.
    store:
        Slot holding the most recent workbook.  A fresh private store is
        created when *None*.
    """

    def __init__(
        self,
        config: SheetChatConfig | None = None,
        store: WorkbookStore | None = None,
    ) -> None:
        self._config = config or SheetChatConfig()
        self._store = store if store is not None else WorkbookStore()
        self._scanner = SheetSecurityScanner(self._config)
        self._parser = WorkbookParser(self._config)
        self._builder = TabularModelBuilder(self._config)
        self._last_warnings: list[IngestError] = []

    @property
    def config(self) -> SheetChatConfig:
        return self._config

    @property
    def store(self) -> WorkbookStore:
        return self._store

    @property
    def last_warnings(self) -> list[IngestError]:
        """Non-fatal warnings from the most recent successful ingestion."""
        return list(self._last_warnings)

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ingest(self, data: bytes, filename: str | None = None) -> Workbook:
        """Decode *data* into a :class:`Workbook` and store it.

        Args:
            data: Raw spreadsheet bytes.
            filename: Optional name used for the extension check, CSV sheet
                naming and log messages.

        Returns:
            The new workbook, which also replaces the stored one.

        Raises:
            ParseError: If the input is empty, too large, unrecognizable,
                corrupt, encrypted, or contains no sheets.  The store is
                left untouched.
        """
        start = time.monotonic()
        label = filename or "<bytes>"

        source_format, findings = self._scanner.scan(data, filename)
        fatal = [e for e in findings if e.code.value.startswith("E_")]
        if fatal or source_format is None:
            error = fatal[0]
            logger.error("Ingestion rejected for %s: %s", label, error.message)
            raise ParseError.from_error(error)
        warnings = list(findings)

        raw_sheets, parse_warnings = self._parser.parse(data, source_format, filename)
        warnings.extend(parse_warnings)

        workbook = self._builder.build(
            raw_sheets,
            source_name=filename,
            source_format=source_format,
            content_hash=hashlib.sha256(data).hexdigest(),
        )
        for warning in warnings:
            logger.warning(
                "Ingestion warning for %s: [%s] %s",
                label,
                warning.code.value,
                warning.message,
            )

        if self._config.log_sample_data:
            logger.debug("Summary for %s:\n%s", label, workbook.summary)

        self._last_warnings = warnings
        self._store.set(workbook)

        logger.info(
            "Ingested %s: %d sheets, %d rows in %.3fs",
            label,
            len(workbook.sheets),
            workbook.total_rows,
            time.monotonic() - start,
        )
        return workbook

    def ingest_path(self, path: str | Path) -> Workbook:
        """Read *path* and ingest its bytes (e.g. a bundled default dataset)."""
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        return self.ingest(file_path.read_bytes(), filename=file_path.name)

    # ------------------------------------------------------------------
    # Cached reads
    # ------------------------------------------------------------------

    def get_cached(self) -> Workbook | None:
        return self._store.get()

    def all_sheets(self) -> list[Sheet]:
        workbook = self._store.get()
        return list(workbook.sheets) if workbook is not None else []

    def get_sheet(self, name: str) -> Sheet | None:
        workbook = self._store.get()
        return workbook.get_sheet(name) if workbook is not None else None

    def total_rows(self) -> int:
        workbook = self._store.get()
        return workbook.total_rows if workbook is not None else 0

    def _resolve(self, sheets: Sequence[Sheet] | None) -> Sequence[Sheet]:
        if sheets is not None:
            return sheets
        return self.all_sheets()

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def summarize(self, workbook: Workbook | None = None) -> str:
        """Synopsis of *workbook*, or of the stored workbook when omitted."""
        sheets = workbook.sheets if workbook is not None else self.all_sheets()
        return summarize_sheets(
            sheets,
            sample_rows=self._config.summary_sample_rows,
            placeholder=self._config.missing_placeholder,
        )

    def search(
        self, query: str, sheets: Sequence[Sheet] | None = None
    ) -> list[SearchResult]:
        """Case-insensitive substring search; see :func:`sheetchat.search_index.search`."""
        results = search_sheets(query, self._resolve(sheets))
        logger.debug("Search for %r returned %d results", query, len(results))
        return results

    def format_for_model(self, sheets: Sequence[Sheet] | None = None) -> str:
        """Row-capped dataset block for prompts; see :func:`sheetchat.context.format_for_model`."""
        return format_sheets(
            self._resolve(sheets),
            row_limit=self._config.context_row_limit,
            placeholder=self._config.missing_placeholder,
        )

    def build_prompt(self, question: str, voice: bool = False) -> str:
        """Wrap the stored workbook's AI context around *question*.

        Returns *question* unchanged when nothing has been ingested.
        """
        if self._store.get() is None:
            return question
        dataset = self.format_for_model()
        if voice:
            return build_voice_prompt(dataset, question)
        return build_analysis_prompt(dataset, question)


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------

_instance: SheetProcessor | None = None
_instance_lock = threading.Lock()


def get_processor() -> SheetProcessor:
    """Return the process-wide :class:`SheetProcessor`, creating it on first use."""
    global _instance  # noqa: PLW0603
    if _instance is None:
        with _instance_lock:
            if _instance is None:
                _instance = SheetProcessor()
    return _instance


def reset_processor() -> None:
    """Drop the process-wide instance so the next call builds a fresh one."""
    global _instance  # noqa: PLW0603
    with _instance_lock:
        _instance = None
