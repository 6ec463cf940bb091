from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field

from domain.exceptions import InvalidBoundingBoxError

NORMALIZED_SPACE = 1000
"""Width and height of the coordinate space the inference service reports boxes in."""


class PixelRect(BaseModel):
    """A rectangle in the pixel space of a concrete image."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: int
    height: int


class BoundingBox(BaseModel):
    """A figure region expressed in the normalized 1000x1000 space.

    Boxes are stored exactly as the inference service returned them. Whether a box
    may be rendered or cropped is decided by ``is_well_formed`` / ``ensure_well_formed``;
    out-of-range values are rejected, never clamped.
    """

    model_config = ConfigDict(frozen=True)

    ymin: float
    xmin: float
    ymax: float
    xmax: float
    label: str = Field(default="", description="Caption or label reported for the figure")

    def violations(
        self,
        norm_width: float = NORMALIZED_SPACE,
        norm_height: float = NORMALIZED_SPACE,
    ) -> list[str]:
        """List every invariant this box breaks (empty when well formed)."""
        problems = []
        if not 0 <= self.ymin <= self.ymax <= norm_height:
            problems.append(
                f"expected 0 <= ymin <= ymax <= {norm_height}, "
                f"got ymin={self.ymin} ymax={self.ymax}",
            )
        if not 0 <= self.xmin <= self.xmax <= norm_width:
            problems.append(
                f"expected 0 <= xmin <= xmax <= {norm_width}, "
                f"got xmin={self.xmin} xmax={self.xmax}",
            )
        return problems

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_well_formed(self) -> bool:
        return not self.violations()

    def ensure_well_formed(
        self,
        norm_width: float = NORMALIZED_SPACE,
        norm_height: float = NORMALIZED_SPACE,
    ) -> None:
        """Raise InvalidBoundingBoxError if the box breaks the invariant."""
        problems = self.violations(norm_width, norm_height)
        if problems:
            msg = f"Malformed bounding box {self.label!r}: " + "; ".join(problems)
            raise InvalidBoundingBoxError(msg)

    def to_pixel_rect(
        self,
        image_width: int,
        image_height: int,
        norm_width: float = NORMALIZED_SPACE,
        norm_height: float = NORMALIZED_SPACE,
    ) -> PixelRect:
        """Denormalize against the actual pixel dimensions of an image.

        Validation happens before any arithmetic. Output width and height are
        rounded to the nearest integer and never fall below one pixel.
        """
        if norm_width <= 0 or norm_height <= 0:
            msg = f"Normalization space must be positive, got {norm_width}x{norm_height}"
            raise InvalidBoundingBoxError(msg)
        self.ensure_well_formed(norm_width, norm_height)

        source_x = self.xmin / norm_width * image_width
        source_y = self.ymin / norm_height * image_height
        source_w = (self.xmax - self.xmin) / norm_width * image_width
        source_h = (self.ymax - self.ymin) / norm_height * image_height

        return PixelRect(
            x=source_x,
            y=source_y,
            width=max(1, round(source_w)),
            height=max(1, round(source_h)),
        )
