from .bounding_box import NORMALIZED_SPACE, BoundingBox, PixelRect
from .chemical_structure import ChemicalStructure, Confidence
from .mime_type import MimeType
from .page_content import FALLBACK_MARKDOWN, PageContent, figure_id
from .page_status import PageStatus
from .raster_image import RasterImage, strip_data_uri_prefix
from .render_policy import MAX_PAGES, RENDER_SCALE
from .session_state import SessionState

__all__ = [
    "MAX_PAGES",
    "NORMALIZED_SPACE",
    "RENDER_SCALE",
    "FALLBACK_MARKDOWN",
    "BoundingBox",
    "ChemicalStructure",
    "Confidence",
    "MimeType",
    "PageContent",
    "PageStatus",
    "PixelRect",
    "RasterImage",
    "SessionState",
    "figure_id",
    "strip_data_uri_prefix",
]
