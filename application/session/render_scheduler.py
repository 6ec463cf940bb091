from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from application.ports.rasterizer import DocumentHandle, Rasterizer
    from domain.value_objects.raster_image import RasterImage

log = structlog.get_logger(__name__)


class SequentialRenderScheduler:
    """Run page renders one at a time, off the event loop.

    High-resolution rasterization is memory and CPU heavy, so at most one render
    is in progress per process regardless of how many loads are running. Callers
    that await ``render`` page by page get strictly ordered, non-overlapping renders.
    """

    def __init__(self) -> None:
        self._slot = asyncio.Semaphore(1)

    async def render(
        self,
        rasterizer: Rasterizer,
        handle: DocumentHandle,
        page_number: int,
        scale: float,
    ) -> RasterImage:
        async with self._slot:
            log.debug("render_scheduler.render", page_number=page_number, scale=scale)
            return await asyncio.to_thread(rasterizer.render_page, handle, page_number, scale)
