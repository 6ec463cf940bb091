from __future__ import annotations

import itertools
from collections.abc import Callable
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

import structlog

from domain.exceptions import PageNotFoundError, SessionSupersededError
from domain.value_objects.session_state import SessionState

if TYPE_CHECKING:
    from application.ports.rasterizer import DocumentHandle
    from domain.aggregates.page_record import PageRecord

log = structlog.get_logger(__name__)


class PipelineSession:
    """Explicitly owned state of one upload: the document handle and its page records.

    Every upload gets a fresh ``document_id``. Work started against an older
    document id must check ``is_current`` before writing, so that responses
    arriving after a new upload or a ``reset()`` never leak into the new session.

    Records are only ever replaced whole, through ``update``. The transition is
    applied to the record held *now*, synchronously, so two overlapping async
    workflows on the same page always merge against each other's writes.
    """

    def __init__(self) -> None:
        self._document_id: UUID | None = None
        self._document: DocumentHandle | None = None
        self._source_filename: str | None = None
        self._state = SessionState.EMPTY
        self._error_message: str | None = None
        self._total_pages: int | None = None
        self._pages: dict[int, PageRecord] = {}
        self._tokens = itertools.count(1)

    # ============================================================================
    # SESSION LIFECYCLE
    # ============================================================================

    @property
    def document_id(self) -> UUID | None:
        return self._document_id

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def source_filename(self) -> str | None:
        return self._source_filename

    @property
    def error_message(self) -> str | None:
        return self._error_message

    @property
    def total_pages(self) -> int | None:
        return self._total_pages

    def is_current(self, document_id: UUID) -> bool:
        return self._document_id == document_id

    def begin_load(self, source_filename: str | None = None) -> UUID:
        """Discard the previous document and records and start a new load."""
        self._discard_document()
        self._document_id = uuid4()
        self._source_filename = source_filename
        self._state = SessionState.LOADING
        log.info(
            "pipeline_session.load_started",
            document_id=str(self._document_id),
            source_filename=source_filename,
        )
        return self._document_id

    def install_pages(
        self,
        document_id: UUID,
        handle: DocumentHandle,
        records: list[PageRecord],
    ) -> None:
        """Take ownership of the document and publish all records of a finished load at once.

        Until this point the loader owns the handle; a superseded load keeps
        ownership and must close it.
        """
        if not self.is_current(document_id):
            msg = f"Load {document_id} was superseded before rendering finished"
            raise SessionSupersededError(msg)
        self._document = handle
        self._total_pages = handle.page_count
        self._pages = {record.page_number: record for record in records}
        self._state = SessionState.READY
        self._error_message = None
        log.info(
            "pipeline_session.load_ready",
            document_id=str(document_id),
            pages=len(records),
            total_pages=self._total_pages,
        )

    def fail_load(self, document_id: UUID, message: str) -> None:
        if not self.is_current(document_id):
            return
        self._discard_document()
        self._state = SessionState.FAILED
        self._error_message = message
        log.warning("pipeline_session.load_failed", document_id=str(document_id), error=message)

    def reset(self) -> None:
        """Drop the document and every record; in-flight work becomes stale."""
        previous = self._document_id
        self._discard_document()
        self._document_id = None
        self._source_filename = None
        self._state = SessionState.EMPTY
        self._error_message = None
        log.info("pipeline_session.reset", previous_document_id=str(previous) if previous else None)

    def _discard_document(self) -> None:
        if self._document is not None:
            self._document.close()
        self._document = None
        self._total_pages = None
        self._pages = {}

    # ============================================================================
    # PAGE RECORDS
    # ============================================================================

    def pages(self) -> list[PageRecord]:
        """All records in ascending page-number order."""
        return [self._pages[n] for n in sorted(self._pages)]

    def get(self, page_number: int) -> PageRecord:
        try:
            return self._pages[page_number]
        except KeyError:
            msg = f"Page {page_number} is not part of the active session"
            raise PageNotFoundError(msg) from None

    def update(
        self,
        page_number: int,
        transition: Callable[[PageRecord], PageRecord],
    ) -> PageRecord:
        """Replace a record with ``transition(latest record)`` and return the replacement."""
        current = self.get(page_number)
        replacement = transition(current)
        if replacement is not current:
            self._pages[page_number] = replacement
        return replacement

    def next_request_token(self) -> int:
        """Monotonic token identifying one chemistry request."""
        return next(self._tokens)
