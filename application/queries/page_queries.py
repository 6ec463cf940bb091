from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog
from returns.result import Failure, Result, Success

from application.dtos.errors import AppError
from application.mappers.page_mappers import PageMapper
from domain.exceptions import PageNotFoundError, ValidationError

if TYPE_CHECKING:
    from application.dtos.page_dtos import PageResponse, SessionResponse
    from application.ports.region_cropper import RegionCropper
    from application.session.pipeline_session import PipelineSession
    from domain.value_objects.raster_image import RasterImage

log = structlog.get_logger(__name__)


class GetSessionQuery:
    def __init__(self, session: PipelineSession) -> None:
        self.session = session

    async def execute(self, *, include_images: bool = False) -> Result[SessionResponse, AppError]:
        return Success(PageMapper.to_session_response(self.session, include_images=include_images))


class ListPagesQuery:
    def __init__(self, session: PipelineSession) -> None:
        self.session = session

    async def execute(self) -> Result[list[PageResponse], AppError]:
        return Success([PageMapper.to_page_response(record) for record in self.session.pages()])


class GetPageQuery:
    def __init__(self, session: PipelineSession) -> None:
        self.session = session

    async def execute(
        self,
        page_number: int,
        *,
        include_image: bool = False,
    ) -> Result[PageResponse, AppError]:
        try:
            record = self.session.get(page_number)
        except PageNotFoundError as e:
            return Failure(AppError("not_found", str(e)))
        return Success(PageMapper.to_page_response(record, include_image=include_image))


class GetPageImageQuery:
    """Return the rendered raster of a page."""

    def __init__(self, session: PipelineSession) -> None:
        self.session = session

    async def execute(self, page_number: int) -> Result[RasterImage, AppError]:
        try:
            return Success(self.session.get(page_number).image)
        except PageNotFoundError as e:
            return Failure(AppError("not_found", str(e)))


class GetFigureImageQuery:
    """Crop one detected figure out of its page for display.

    Uses the same cropper as structure extraction, so what the user sees is what
    the inference service is sent.
    """

    def __init__(self, session: PipelineSession, region_cropper: RegionCropper) -> None:
        self.session = session
        self.region_cropper = region_cropper

    async def execute(self, page_number: int, figure_index: int) -> Result[RasterImage, AppError]:
        try:
            record = self.session.get(page_number)
            if record.content is None:
                msg = f"Page {page_number} has no extracted content"
                raise ValidationError(msg)
            try:
                box = record.content.figure(figure_index)
            except IndexError as e:
                raise ValidationError(str(e)) from e
            box.ensure_well_formed()
            image = await asyncio.to_thread(self.region_cropper.crop, record.image, box)
            return Success(image)

        except PageNotFoundError as e:
            return Failure(AppError("not_found", str(e)))
        except ValidationError as e:
            return Failure(AppError("validation", str(e)))
        except Exception as e:
            log.exception(
                "get_figure_image.unexpected_error",
                page_number=page_number,
                figure_index=figure_index,
                error=str(e),
            )
            return Failure(AppError("internal_error", f"Unexpected error: {e!s}"))
