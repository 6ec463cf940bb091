from __future__ import annotations

import fitz  # PyMuPDF
import structlog

from domain.exceptions import DecodeError, RenderError
from domain.value_objects.raster_image import RasterImage

log = structlog.get_logger(__name__)


class PyMuPDFDocument:
    """DocumentHandle over an in-memory ``fitz.Document``."""

    def __init__(self, doc: fitz.Document) -> None:
        self._doc = doc

    @property
    def document(self) -> fitz.Document:
        return self._doc

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def close(self) -> None:
        if not self._doc.is_closed:
            self._doc.close()


class PyMuPDFRasterizer:
    """Rasterizer backed by PyMuPDF.

    A scale of 2.0 renders at 144 dpi (PDF user space is 72 units per inch).
    """

    def decode(self, file_bytes: bytes) -> PyMuPDFDocument:
        if not file_bytes:
            msg = "PDF data is empty"
            raise DecodeError(msg)
        try:
            doc = fitz.open(stream=file_bytes, filetype="pdf")
        except Exception as e:
            msg = f"Failed to load PDF: {e!s}"
            raise DecodeError(msg) from e

        if doc.page_count < 1:
            doc.close()
            msg = "PDF has no pages"
            raise DecodeError(msg)

        log.info("pymupdf.decoded", page_count=doc.page_count, encrypted=doc.is_encrypted)
        return PyMuPDFDocument(doc)

    def page_count(self, handle: PyMuPDFDocument) -> int:
        return handle.page_count

    def render_page(self, handle: PyMuPDFDocument, page_number: int, scale: float) -> RasterImage:
        if page_number < 1 or page_number > handle.page_count:
            msg = f"Page {page_number} out of range (document has {handle.page_count} pages)"
            raise RenderError(msg)
        try:
            page = handle.document.load_page(page_number - 1)
            pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
            png_bytes = pix.tobytes("png")
        except Exception as e:
            msg = f"Failed to render page {page_number}: {e!s}"
            raise RenderError(msg) from e

        log.debug(
            "pymupdf.rendered",
            page_number=page_number,
            width=pix.width,
            height=pix.height,
            bytes=len(png_bytes),
        )
        return RasterImage(png=png_bytes, width=pix.width, height=pix.height)
