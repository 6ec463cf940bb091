from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from domain.value_objects.raster_image import RasterImage


class DocumentHandle(Protocol):
    """Opaque reference to a decoded PDF owned by the pipeline session."""

    @property
    def page_count(self) -> int: ...

    def close(self) -> None: ...


class Rasterizer(Protocol):
    """Port wrapping a PDF decoding/rendering engine.

    Implementations are synchronous and CPU bound; the pipeline schedules them
    off the event loop, one render at a time.
    """

    def decode(self, file_bytes: bytes) -> DocumentHandle:
        """Decode PDF bytes.

        Raises:
            DecodeError: If the bytes are not a readable PDF with at least one page.

        """
        ...

    def page_count(self, handle: DocumentHandle) -> int:
        """Return the number of physical pages in the document."""
        ...

    def render_page(self, handle: DocumentHandle, page_number: int, scale: float) -> RasterImage:
        """Render the 1-based ``page_number`` to a PNG at ``scale`` x native size.

        Raises:
            RenderError: If this page cannot be rendered.

        """
        ...
