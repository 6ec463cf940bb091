from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog
from returns.result import Failure, Result, Success

from application.dtos.errors import AppError
from application.mappers.page_mappers import PageMapper
from domain.exceptions import PageNotFoundError, PageProcessingError, ValidationError

if TYPE_CHECKING:
    from application.dtos.page_dtos import PageResponse
    from application.ports.extraction_client import ExtractionClient
    from application.session.pipeline_session import PipelineSession
    from domain.aggregates.page_record import PageRecord
    from domain.value_objects.page_content import PageContent

log = structlog.get_logger(__name__)


class ProcessPageUseCase:
    """Run whole-page extraction for one page and drive its state machine.

    idle/error/done -> processing happens in one record replacement that also
    drops the old content and every chemistry result. The request then always
    ends in a terminal status: ``done`` (real or fallback content) or ``error``
    (request failure or timeout). Pages run independently of each other.
    """

    def __init__(
        self,
        session: PipelineSession,
        extraction_client: ExtractionClient,
        timeout_seconds: float | None = None,
    ) -> None:
        self.session = session
        self.extraction_client = extraction_client
        self.timeout_seconds = timeout_seconds

    async def execute(self, page_number: int) -> Result[PageResponse, AppError]:
        try:
            document_id = self.session.document_id
            record = self.session.update(page_number, lambda r: r.start_processing())
            revision = record.revision
            log.info("process_page.start", page_number=page_number, revision=revision)

            content: PageContent | None = None
            error_message: str | None = None
            try:
                content = await self._extract(record)
            except PageProcessingError as e:
                error_message = str(e)
                log.warning(
                    "process_page.request_failed",
                    page_number=page_number,
                    error=str(e),
                )
            except Exception as e:
                error_message = "Unexpected error while processing the page"
                log.exception(
                    "process_page.extraction_crashed",
                    page_number=page_number,
                    error=str(e),
                )

            if document_id is None or not self.session.is_current(document_id):
                log.info("process_page.stale_session", page_number=page_number)
                return Failure(AppError("concurrency", "The session was replaced while processing"))

            if content is not None:
                updated = self.session.update(
                    page_number,
                    lambda r: r.complete_processing(revision, content),
                )
                log.info(
                    "process_page.success",
                    page_number=page_number,
                    figures=len(content.figures),
                    fallback=content.is_fallback,
                )
            else:
                updated = self.session.update(
                    page_number,
                    lambda r: r.fail_processing(revision, error_message or "Processing failed"),
                )

            return Success(PageMapper.to_page_response(updated))

        except PageNotFoundError as e:
            log.warning("process_page.not_found", page_number=page_number, error=str(e))
            return Failure(AppError("not_found", str(e)))
        except ValidationError as e:
            log.warning("process_page.validation_error", page_number=page_number, error=str(e))
            return Failure(AppError("validation", str(e)))
        except Exception as e:
            log.exception("process_page.unexpected_error", page_number=page_number, error=str(e))
            return Failure(AppError("internal_error", f"Unexpected error: {e!s}"))

    async def _extract(self, record: PageRecord) -> PageContent:
        try:
            async with asyncio.timeout(self.timeout_seconds):
                return await self.extraction_client.extract_page_content(record.image)
        except TimeoutError as e:
            msg = f"Page extraction timed out after {self.timeout_seconds}s"
            raise PageProcessingError(msg) from e
