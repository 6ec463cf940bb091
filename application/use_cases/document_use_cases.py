from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog
from returns.result import Failure, Result, Success

from application.dtos.errors import AppError
from application.mappers.page_mappers import PageMapper
from domain.aggregates.page_record import PageRecord
from domain.exceptions import DecodeError, RenderError, SessionSupersededError
from domain.value_objects.mime_type import MimeType
from domain.value_objects.render_policy import MAX_PAGES, RENDER_SCALE

if TYPE_CHECKING:
    from uuid import UUID

    from application.dtos.page_dtos import SessionResponse
    from application.ports.rasterizer import DocumentHandle, Rasterizer
    from application.session.pipeline_session import PipelineSession
    from application.session.render_scheduler import SequentialRenderScheduler

log = structlog.get_logger(__name__)


class LoadDocumentUseCase:
    """Decode an uploaded PDF and rasterize its first pages into a fresh session.

    Pipeline:
      1. Reject anything that is not ``application/pdf`` before touching the session.
      2. Start a new load (the previous document and records are discarded).
      3. Decode; a decode failure is fatal for the load and leaves no records.
      4. Render pages ``1..min(page_count, MAX_PAGES)`` strictly one after another.
         A page that fails to render is omitted and the next page is attempted.
      5. Publish all rendered records at once. The load fails if none rendered.
    """

    def __init__(
        self,
        session: PipelineSession,
        rasterizer: Rasterizer,
        render_scheduler: SequentialRenderScheduler,
        max_pages: int = MAX_PAGES,
        render_scale: float = RENDER_SCALE,
    ) -> None:
        self.session = session
        self.rasterizer = rasterizer
        self.render_scheduler = render_scheduler
        self.max_pages = max_pages
        self.render_scale = render_scale

    async def execute(
        self,
        file_bytes: bytes,
        *,
        mime_type: str | None,
        source_filename: str | None = None,
    ) -> Result[SessionResponse, AppError]:
        if mime_type != MimeType.PDF.value:
            log.warning("load_document.unsupported_media_type", mime_type=mime_type)
            msg = f"Expected {MimeType.PDF.value}, got {mime_type}"
            return Failure(AppError("unsupported_media_type", msg))
        if not file_bytes:
            return Failure(AppError("validation", "Uploaded file is empty"))

        document_id = self.session.begin_load(source_filename)
        try:
            handle = await asyncio.to_thread(self.rasterizer.decode, file_bytes)
        except DecodeError as e:
            self.session.fail_load(document_id, str(e))
            return Failure(AppError("decode_error", str(e)))
        except Exception as e:
            log.exception("load_document.unexpected_decode_error", error=str(e))
            self.session.fail_load(document_id, "Failed to load PDF")
            return Failure(AppError("internal_error", f"Unexpected error: {e!s}"))

        installed = False
        try:
            records = await self._render_pages(document_id, handle)
            if not records:
                msg = "No page of the document could be rendered"
                self.session.fail_load(document_id, msg)
                return Failure(AppError("render_error", msg))

            self.session.install_pages(document_id, handle, records)
            installed = True
            return Success(PageMapper.to_session_response(self.session))

        except SessionSupersededError as e:
            log.info("load_document.superseded", document_id=str(document_id))
            return Failure(AppError("concurrency", str(e)))
        except Exception as e:
            log.exception(
                "load_document.unexpected_error",
                document_id=str(document_id),
                error=str(e),
            )
            self.session.fail_load(document_id, "Failed to load PDF")
            return Failure(AppError("internal_error", f"Unexpected error: {e!s}"))
        finally:
            if not installed:
                handle.close()

    async def _render_pages(self, document_id: UUID, handle: DocumentHandle) -> list[PageRecord]:
        page_count = self.rasterizer.page_count(handle)
        limit = min(page_count, self.max_pages)
        log.info(
            "load_document.rendering",
            document_id=str(document_id),
            page_count=page_count,
            rendering=limit,
        )

        records: list[PageRecord] = []
        for page_number in range(1, limit + 1):
            if not self.session.is_current(document_id):
                msg = f"Load {document_id} was superseded during rendering"
                raise SessionSupersededError(msg)
            try:
                image = await self.render_scheduler.render(
                    self.rasterizer,
                    handle,
                    page_number,
                    self.render_scale,
                )
            except RenderError as e:
                log.warning(
                    "load_document.page_render_failed",
                    document_id=str(document_id),
                    page_number=page_number,
                    error=str(e),
                )
                continue
            records.append(PageRecord.create(page_number=page_number, image=image))
        return records


class ResetSessionUseCase:
    """Discard the active document and every page record."""

    def __init__(self, session: PipelineSession) -> None:
        self.session = session

    async def execute(self) -> Result[None, AppError]:
        self.session.reset()
        return Success(None)
