"""Shared test fixtures for sheetchat tests.

Provides config fixtures, in-memory ``Sheet`` factories, and ``.xlsx`` /
``.csv`` byte generators built with openpyxl.
"""

from __future__ import annotations

import io
from typing import Any

import openpyxl
import pytest

from sheetchat.config import SheetChatConfig
from sheetchat.models import Cell, Sheet
from sheetchat.processor import SheetProcessor, reset_processor
from sheetchat.store import WorkbookStore


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_sheet(name: str, headers: list[str], rows: list[list[Any]]) -> Sheet:
    """Build a ``Sheet`` from plain Python values (``None`` = empty cell)."""
    return Sheet(
        name=name,
        headers=tuple(headers),
        rows=tuple(tuple(Cell.from_value(v) for v in row) for row in rows),
    )


def xlsx_bytes(sheets: dict[str, list[list[Any]]]) -> bytes:
    """Serialize ``{sheet_name: rows}`` into .xlsx bytes, sheets in dict order."""
    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(name)
        for row in rows:
            ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    wb.close()
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_config() -> SheetChatConfig:
    """Return a SheetChatConfig with all defaults."""
    return SheetChatConfig()


@pytest.fixture()
def store() -> WorkbookStore:
    """Fresh empty ``WorkbookStore``."""
    return WorkbookStore()


@pytest.fixture()
def processor(sample_config: SheetChatConfig, store: WorkbookStore) -> SheetProcessor:
    """``SheetProcessor`` bound to a private store."""
    return SheetProcessor(config=sample_config, store=store)


@pytest.fixture(autouse=True)
def _reset_global_processor():
    """Keep the process-wide processor from leaking between tests."""
    reset_processor()
    yield
    reset_processor()


@pytest.fixture()
def people_sheet() -> Sheet:
    """Three-column sheet with a short (ragged) last row."""
    return make_sheet(
        "People",
        ["Name", "Age", "City"],
        [
            ["Alice", 30, "Paris"],
            ["Bob", 25, "Berlin"],
            ["Carol", 41],
        ],
    )


@pytest.fixture()
def fifteen_row_sheet() -> Sheet:
    """Two-column sheet with 15 data rows."""
    return make_sheet(
        "Big",
        ["ID", "Label"],
        [[i, f"item-{i}"] for i in range(1, 16)],
    )


@pytest.fixture()
def multi_sheet_xlsx() -> bytes:
    """Workbook with three sheets in a fixed order."""
    return xlsx_bytes(
        {
            "Sheet1": [["Name", "Age"], ["Alice", 30], ["Bob", 25]],
            "Products": [["Product", "Price", "InStock"], ["Widget", 9.99, True], ["Gadget", 19.99, False]],
            "Cities": [["City", "Population"], ["Tokyo", 13960000]],
        }
    )


@pytest.fixture()
def ragged_xlsx() -> bytes:
    """Single sheet whose rows are shorter and longer than the header."""
    return xlsx_bytes(
        {
            "Ragged": [
                ["A", "B", "C"],
                ["a1"],
                ["a2", "b2", "c2", "extra"],
                [None, "b3"],
            ]
        }
    )
