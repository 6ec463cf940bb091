from enum import Enum


class MimeType(str, Enum):
    """Represent MIME types crossing the pipeline boundaries."""

    PDF = "application/pdf"
    PNG = "image/png"
