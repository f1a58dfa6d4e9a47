"""sheetchat -- spreadsheet ingestion and prompt-context serialization.

Public API exports for models, errors, configuration, the processor, and
the standalone summary/search/context functions.
"""

from sheetchat.builder import TabularModelBuilder
from sheetchat.config import SheetChatConfig
from sheetchat.context import format_for_model
from sheetchat.errors import ErrorCode, IngestError, ParseError
from sheetchat.models import (
    Cell,
    CellKind,
    SearchResult,
    Sheet,
    SourceFormat,
    Workbook,
)
from sheetchat.parser import RawSheet, WorkbookParser
from sheetchat.processor import SheetProcessor, get_processor, reset_processor
from sheetchat.prompts import build_analysis_prompt, build_voice_prompt
from sheetchat.search_index import HEADER_ROW_OFFSET, search
from sheetchat.security import SheetSecurityScanner
from sheetchat.store import WorkbookStore
from sheetchat.summarizer import summarize

__all__ = [
    # Enums
    "CellKind",
    "SourceFormat",
    # Models
    "Cell",
    "Sheet",
    "Workbook",
    "SearchResult",
    # Pipeline
    "SheetSecurityScanner",
    "WorkbookParser",
    "RawSheet",
    "TabularModelBuilder",
    "WorkbookStore",
    "SheetProcessor",
    "get_processor",
    "reset_processor",
    # Read operations
    "summarize",
    "search",
    "HEADER_ROW_OFFSET",
    "format_for_model",
    "build_analysis_prompt",
    "build_voice_prompt",
    # Errors
    "ErrorCode",
    "IngestError",
    "ParseError",
    # Config
    "SheetChatConfig",
]
