from __future__ import annotations

from typing import TYPE_CHECKING

from application.dtos.page_dtos import PageResponse, SessionResponse

if TYPE_CHECKING:
    from application.session.pipeline_session import PipelineSession
    from domain.aggregates.page_record import PageRecord


class PageMapper:
    """Map page records and the session to response DTOs."""

    @staticmethod
    def to_page_response(record: PageRecord, *, include_image: bool = False) -> PageResponse:
        return PageResponse(
            page_number=record.page_number,
            status=record.status,
            image_width=record.image.width,
            image_height=record.image.height,
            image_data_uri=record.image.to_data_uri() if include_image else None,
            content=record.content,
            chemistry_results=dict(record.chemistry_results),
            chemistry_structures=dict(record.chemistry_structures),
            chemistry_busy=record.chemistry_busy,
            error_message=record.error_message,
        )

    @staticmethod
    def to_session_response(
        session: PipelineSession,
        *,
        include_images: bool = False,
    ) -> SessionResponse:
        return SessionResponse(
            document_id=session.document_id,
            source_filename=session.source_filename,
            state=session.state,
            total_pages=session.total_pages,
            error_message=session.error_message,
            pages=[
                PageMapper.to_page_response(record, include_image=include_images)
                for record in session.pages()
            ],
        )
