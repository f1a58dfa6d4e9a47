"""Single-slot holder for the most recently ingested workbook.

The slot is last-writer-wins.  Two ingestions running at the same time
race, and the slot ends up holding whichever finished last; nothing
serializes them.  That suits a single-user, single-document front-end.
Callers handling several documents should give each one its own
``WorkbookStore``.
"""

from __future__ import annotations

import logging

from sheetchat.models import Workbook

logger = logging.getLogger("sheetchat")


class WorkbookStore:
    """Holds at most one :class:`Workbook`; ``None`` until the first ``set``."""

    def __init__(self) -> None:
        self._workbook: Workbook | None = None

    def get(self) -> Workbook | None:
        return self._workbook

    def set(self, workbook: Workbook) -> None:
        if self._workbook is not None:
            logger.debug(
                "Replacing cached workbook %s with %s",
                self._workbook.source_name or "<bytes>",
                workbook.source_name or "<bytes>",
            )
        self._workbook = workbook

    def clear(self) -> None:
        self._workbook = None
