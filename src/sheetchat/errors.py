"""Normalized error codes, structured error model, and raisable parse error.

``ErrorCode`` holds every error/warning code the ingestion pipeline emits.
``IngestError`` is the structured (Pydantic) representation used for both
fatal errors and collected warnings.  ``ParseError`` is the exception raised
when ingestion cannot produce a workbook; it carries the ``IngestError`` as
its ``.error`` attribute.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Normalized error codes for the sheetchat ingestion pipeline.

    Values equal their names so they are stable strings suitable for
    logging and programmatic handling.  ``E_`` prefix = fatal,
    ``W_`` prefix = warning.
    """

    # Security / pre-flight
    E_SECURITY_BAD_EXTENSION = "E_SECURITY_BAD_EXTENSION"
    E_SECURITY_TOO_LARGE = "E_SECURITY_TOO_LARGE"

    # Parse errors
    E_PARSE_UNRECOGNIZED = "E_PARSE_UNRECOGNIZED"
    E_PARSE_CORRUPT = "E_PARSE_CORRUPT"
    E_PARSE_PASSWORD = "E_PARSE_PASSWORD"
    E_PARSE_EMPTY = "E_PARSE_EMPTY"

    # Warnings (non-fatal)
    W_LARGE_FILE = "W_LARGE_FILE"
    W_PARSER_FALLBACK = "W_PARSER_FALLBACK"
    W_SHEET_SKIPPED_CHART = "W_SHEET_SKIPPED_CHART"
    W_ROWS_TRUNCATED = "W_ROWS_TRUNCATED"


class IngestError(BaseModel):
    """Structured error with code, message, and context.

    Used both for the fatal error wrapped by :class:`ParseError` and for
    non-fatal warnings collected during ingestion.
    """

    code: ErrorCode
    message: str
    sheet_name: str | None = None
    stage: str | None = None
    recoverable: bool = False


class ParseError(Exception):
    """Raisable exception wrapping an :class:`IngestError`.

    Raised when the input is not a recognizable spreadsheet container,
    is corrupt, or contains zero sheets.  The message of the underlying
    cause is preserved in ``message``.
    """

    def __init__(self, **kwargs: object) -> None:
        self.error = IngestError(**kwargs)  # type: ignore[arg-type]
        super().__init__(self.error.message)

    @classmethod
    def from_error(cls, error: IngestError) -> ParseError:
        return cls(**error.model_dump())

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def stage(self) -> str | None:
        return self.error.stage

    @property
    def recoverable(self) -> bool:
        return self.error.recoverable
