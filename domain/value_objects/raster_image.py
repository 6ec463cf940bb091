import base64
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.value_objects.mime_type import MimeType

_DATA_URI_PREFIX = re.compile(r"^data:[\w.+-]+/[\w.+-]+;base64,", re.IGNORECASE)


def strip_data_uri_prefix(data: str) -> str:
    """Return the bare base64 payload of a data URI (or the input unchanged)."""
    return _DATA_URI_PREFIX.sub("", data.strip(), count=1)


class RasterImage(BaseModel):
    """A PNG-encoded bitmap together with its true pixel dimensions.

    The pixel dimensions are the denormalization basis for bounding boxes,
    so they always describe the encoded bitmap, never a display size.
    """

    model_config = ConfigDict(frozen=True)

    png: bytes = Field(..., repr=False, description="PNG-encoded image bytes")
    width: int = Field(..., ge=1, description="Width in pixels")
    height: int = Field(..., ge=1, description="Height in pixels")

    @field_validator("png")
    @classmethod
    def validate_png(cls, v: bytes) -> bytes:
        """Ensure image bytes are present."""
        if not v:
            msg = "png bytes cannot be empty"
            raise ValueError(msg)
        return v

    def to_base64(self) -> str:
        """Bare base64 payload, as transmitted to the inference service."""
        return base64.b64encode(self.png).decode("ascii")

    def to_data_uri(self) -> str:
        """Prefixed data URI for local display only."""
        return f"data:{MimeType.PNG.value};base64,{self.to_base64()}"
