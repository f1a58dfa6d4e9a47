"""Pre-flight security scanner for spreadsheet bytes.

Rejects empty, oversized, or unrecognizable input before any decoding
begins.  Checks the optional filename extension, byte size, and the
container's magic bytes to decide which decoder the parser should use.
"""

from __future__ import annotations

import logging
import os

from sheetchat.config import SheetChatConfig
from sheetchat.errors import ErrorCode, IngestError
from sheetchat.models import SourceFormat

logger = logging.getLogger("sheetchat")

_LARGE_FILE_THRESHOLD_MB = 10

# ---------------------------------------------------------------------------
# Magic byte signatures for supported containers
# ---------------------------------------------------------------------------

_ZIP_MAGIC = b"PK\x03\x04"
_OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


class SheetSecurityScanner:
    """Run pre-flight checks on raw spreadsheet bytes.

    Returns the detected :class:`SourceFormat` (or ``None``) and a list of
    errors/warnings.  Fatal errors (``E_*`` codes) mean the input should
    not be decoded.
    """

    def __init__(self, config: SheetChatConfig) -> None:
        self.config = config

    def scan(
        self, data: bytes, filename: str | None = None
    ) -> tuple[SourceFormat | None, list[IngestError]]:
        """Run all pre-flight checks.

        Returns:
            A tuple of (detected format or None, list of errors/warnings).
            Fatal errors have codes starting with ``E_``.
        """
        errors: list[IngestError] = []
        ext = os.path.splitext(filename)[1].lower() if filename else ""

        # --- 1. Extension whitelist (only when a name is known) ---
        if ext and ext not in self.config.supported_extensions:
            errors.append(
                IngestError(
                    code=ErrorCode.E_SECURITY_BAD_EXTENSION,
                    message=f"Unsupported spreadsheet extension '{ext}': {filename}",
                    stage="security",
                )
            )
            return None, errors

        # --- 2. Empty input ---
        size = len(data)
        if size == 0:
            errors.append(
                IngestError(
                    code=ErrorCode.E_PARSE_EMPTY,
                    message="Input is empty (0 bytes).",
                    stage="security",
                )
            )
            return None, errors

        # --- 3. Size limit ---
        max_bytes = self.config.max_file_size_mb * 1024 * 1024
        if size > max_bytes:
            errors.append(
                IngestError(
                    code=ErrorCode.E_SECURITY_TOO_LARGE,
                    message=(
                        f"Input size {size} bytes exceeds limit of "
                        f"{max_bytes} bytes ({self.config.max_file_size_mb} MB)"
                    ),
                    stage="security",
                )
            )
            return None, errors

        # --- 4. Large file warning ---
        large_threshold = _LARGE_FILE_THRESHOLD_MB * 1024 * 1024
        if size > large_threshold:
            errors.append(
                IngestError(
                    code=ErrorCode.W_LARGE_FILE,
                    message=(
                        f"Input is {size / (1024 * 1024):.1f} MB "
                        f"(> {_LARGE_FILE_THRESHOLD_MB} MB)"
                    ),
                    stage="security",
                    recoverable=True,
                )
            )

        # --- 5. Container sniffing ---
        source_format = self._detect_format(data, ext)
        if source_format is None:
            errors.append(
                IngestError(
                    code=ErrorCode.E_PARSE_UNRECOGNIZED,
                    message="Input is not a recognizable spreadsheet container.",
                    stage="security",
                )
            )
            return None, errors

        logger.debug("Detected %s container (%d bytes)", source_format.value, size)
        return source_format, errors

    @staticmethod
    def _detect_format(data: bytes, ext: str) -> SourceFormat | None:
        if data.startswith(_ZIP_MAGIC):
            return SourceFormat.XLSX
        if data.startswith(_OLE2_MAGIC):
            return SourceFormat.XLS
        # Plain text has no signature; only trust it when named as CSV.
        if ext == ".csv":
            return SourceFormat.CSV
        return None
