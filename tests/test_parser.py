"""Tests for the WorkbookParser.

Uses openpyxl to build .xlsx bytes in memory and patches xlrd / pandas
where a real legacy or broken file would be needed.
"""

from __future__ import annotations

import datetime as dt
import io
import zipfile
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import openpyxl
import pandas as pd
import pytest
import xlrd

from conftest import xlsx_bytes
from sheetchat.config import SheetChatConfig
from sheetchat.errors import ErrorCode, ParseError
from sheetchat.models import SourceFormat
from sheetchat.parser import RawSheet, WorkbookParser

_OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


@pytest.fixture
def parser(sample_config: SheetChatConfig) -> WorkbookParser:
    return WorkbookParser(sample_config)


# ---------------------------------------------------------------------------
# xlsx
# ---------------------------------------------------------------------------


class TestXlsx:
    def test_sheet_order_preserved(self, parser, multi_sheet_xlsx):
        sheets, warnings = parser.parse(multi_sheet_xlsx, SourceFormat.XLSX)
        assert [s.name for s in sheets] == ["Sheet1", "Products", "Cities"]
        assert warnings == []

    def test_row_order_and_types_preserved(self, parser, multi_sheet_xlsx):
        sheets, _ = parser.parse(multi_sheet_xlsx, SourceFormat.XLSX)
        products = sheets[1]
        assert products.rows == [
            ["Product", "Price", "InStock"],
            ["Widget", 9.99, True],
            ["Gadget", 19.99, False],
        ]

    def test_ragged_rows_trimmed(self, parser, ragged_xlsx):
        sheets, _ = parser.parse(ragged_xlsx, SourceFormat.XLSX)
        assert sheets[0].rows == [
            ["A", "B", "C"],
            ["a1"],
            ["a2", "b2", "c2", "extra"],
            [None, "b3"],
        ]

    def test_empty_sheet_has_no_rows(self, parser):
        data = xlsx_bytes({"Blank": [], "Data": [["h"], [1]]})
        sheets, _ = parser.parse(data, SourceFormat.XLSX)
        assert sheets[0] == RawSheet(name="Blank", rows=[])
        assert sheets[1].rows == [["h"], [1]]

    def test_interior_blank_rows_kept(self, parser):
        data = xlsx_bytes({"S": [["h"], [1], [None], [3], [None], [None]]})
        sheets, _ = parser.parse(data, SourceFormat.XLSX)
        assert sheets[0].rows == [["h"], [1], [], [3]]

    def test_row_limit_truncates(self):
        parser = WorkbookParser(SheetChatConfig(max_rows_per_sheet=3))
        data = xlsx_bytes({"S": [["h"]] + [[i] for i in range(10)]})
        sheets, warnings = parser.parse(data, SourceFormat.XLSX)
        assert len(sheets[0].rows) == 3
        assert warnings[0].code is ErrorCode.W_ROWS_TRUNCATED
        assert warnings[0].sheet_name == "S"

    def test_not_a_workbook_zip_is_corrupt(self, parser):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            zf.writestr("hello.txt", "not a workbook")
        with pytest.raises(ParseError) as exc_info:
            parser.parse(buffer.getvalue(), SourceFormat.XLSX)
        assert exc_info.value.code is ErrorCode.E_PARSE_CORRUPT
        assert exc_info.value.message.startswith("Failed to process spreadsheet")

    def test_pandas_fallback(self, parser):
        frames = {
            "Fallback": pd.DataFrame([["Name", "Score"], ["Ann", 7], ["Ben", float("nan")]])
        }
        with patch("sheetchat.parser.openpyxl.load_workbook", side_effect=ValueError("boom")), \
                patch("sheetchat.parser.pd.read_excel", return_value=frames):
            sheets, warnings = parser.parse(b"PK\x03\x04", SourceFormat.XLSX)

        assert sheets[0].name == "Fallback"
        assert sheets[0].rows == [["Name", "Score"], ["Ann", 7], ["Ben"]]
        assert [w.code for w in warnings] == [ErrorCode.W_PARSER_FALLBACK]

    def test_table_offset_from_a1(self, parser):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Offset"
        ws.cell(row=3, column=2, value="Name")
        ws.cell(row=3, column=3, value="Age")
        ws.cell(row=4, column=2, value="Ann")
        ws.cell(row=4, column=3, value=31)
        ws.cell(row=6, column=3, value=40)
        buffer = io.BytesIO()
        wb.save(buffer)

        sheets, _ = parser.parse(buffer.getvalue(), SourceFormat.XLSX)
        assert sheets[0].rows == [["Name", "Age"], ["Ann", 31], [], [None, 40]]

    def test_leading_blank_rows_dropped_for_fallback(self, parser):
        frames = {"F": pd.DataFrame([[None, None], [None, "h"], [None, 1]])}
        with patch("sheetchat.parser.openpyxl.load_workbook", side_effect=ValueError("boom")), \
                patch("sheetchat.parser.pd.read_excel", return_value=frames):
            sheets, _ = parser.parse(b"PK\x03\x04", SourceFormat.XLSX)
        assert sheets[0].rows == [["h"], [1]]


# ---------------------------------------------------------------------------
# xls
# ---------------------------------------------------------------------------


def _xls_cell(ctype: int, value):
    return SimpleNamespace(ctype=ctype, value=value)


def _xls_book(name: str, rows: list[list[tuple[int, object]]], datemode: int = 0):
    sheet = MagicMock()
    sheet.name = name
    sheet.nrows = len(rows)
    sheet.row = lambda idx: [_xls_cell(ctype, value) for ctype, value in rows[idx]]
    book = MagicMock()
    book.sheets.return_value = [sheet]
    book.datemode = datemode
    return book


class TestXls:
    def test_cell_types(self, parser):
        book = _xls_book(
            "Legacy",
            [
                [(xlrd.XL_CELL_TEXT, "Name"), (xlrd.XL_CELL_TEXT, "Joined"), (xlrd.XL_CELL_TEXT, "Active")],
                [(xlrd.XL_CELL_TEXT, "Ann"), (xlrd.XL_CELL_DATE, 45292.0), (xlrd.XL_CELL_BOOLEAN, 1)],
                [(xlrd.XL_CELL_NUMBER, 3.0), (xlrd.XL_CELL_ERROR, 0x07), (xlrd.XL_CELL_BLANK, "")],
            ],
        )
        with patch.object(xlrd, "open_workbook", return_value=book):
            sheets, _ = parser.parse(_OLE2_MAGIC, SourceFormat.XLS)

        rows = sheets[0].rows
        assert rows[0] == ["Name", "Joined", "Active"]
        assert rows[1] == ["Ann", dt.datetime(2024, 1, 1), True]
        assert rows[2] == [3.0, "#DIV/0!"]

    def test_open_failure_is_corrupt(self, parser):
        with patch.object(xlrd, "open_workbook", side_effect=xlrd.XLRDError("bad header")):
            with pytest.raises(ParseError) as exc_info:
                parser.parse(_OLE2_MAGIC, SourceFormat.XLS)
        assert exc_info.value.code is ErrorCode.E_PARSE_CORRUPT
        assert "bad header" in exc_info.value.message

    def test_encrypted_package(self, parser):
        data = _OLE2_MAGIC + b"\x00" * 64 + "EncryptedPackage".encode("utf-16-le")
        with pytest.raises(ParseError) as exc_info:
            parser.parse(data, SourceFormat.XLS)
        assert exc_info.value.code is ErrorCode.E_PARSE_PASSWORD

    def test_zero_sheets(self, parser):
        book = MagicMock()
        book.sheets.return_value = []
        with patch.object(xlrd, "open_workbook", return_value=book):
            with pytest.raises(ParseError) as exc_info:
                parser.parse(_OLE2_MAGIC, SourceFormat.XLS)
        assert exc_info.value.code is ErrorCode.E_PARSE_EMPTY


# ---------------------------------------------------------------------------
# csv
# ---------------------------------------------------------------------------


class TestCsv:
    def test_numbers_inferred(self, parser):
        data = b"Name,Age,Note\nAlice,30,\nBob,25.5,tall\n"
        sheets, _ = parser.parse(data, SourceFormat.CSV, "people.csv")
        sheet = sheets[0]
        assert sheet.name == "people"
        assert sheet.rows[0] == ["Name", "Age", "Note"]
        assert sheet.rows[1] == ["Alice", 30.0]
        assert sheet.rows[2] == ["Bob", 25.5, "tall"]

    def test_default_sheet_name(self, parser):
        sheets, _ = parser.parse(b"a\n1\n", SourceFormat.CSV)
        assert sheets[0].name == "Sheet1"

    def test_utf8_bom_stripped(self, parser):
        data = b"\xef\xbb\xbf" + "City\nZürich\n".encode("utf-8")
        sheets, _ = parser.parse(data, SourceFormat.CSV)
        assert sheets[0].rows == [["City"], ["Zürich"]]

    def test_row_longer_than_header_kept(self, parser):
        sheets, _ = parser.parse(b"A,B\n1,2\n3,4,5\n", SourceFormat.CSV, "r.csv")
        assert sheets[0].rows == [["A", "B"], [1.0, 2.0], [3.0, 4.0, 5.0]]

    def test_short_rows_stay_ragged(self, parser):
        sheets, _ = parser.parse(b"A,B,C\nx\ny,z,w,extra\n", SourceFormat.CSV)
        assert sheets[0].rows == [["A", "B", "C"], ["x"], ["y", "z", "w", "extra"]]

    def test_leading_blank_lines_skipped(self, parser):
        sheets, _ = parser.parse(b"\n,,\n,Name\n,Ann\n", SourceFormat.CSV)
        assert sheets[0].rows == [["Name"], ["Ann"]]

    def test_blank_lines_only_is_empty(self, parser):
        with pytest.raises(ParseError) as exc_info:
            parser.parse(b"\n\n", SourceFormat.CSV, "blank.csv")
        assert exc_info.value.code is ErrorCode.E_PARSE_EMPTY

    def test_invalid_utf8_is_corrupt(self, parser):
        with pytest.raises(ParseError) as exc_info:
            parser.parse(b"A\n\xff\xfe\xfa\n", SourceFormat.CSV)
        assert exc_info.value.code is ErrorCode.E_PARSE_CORRUPT
