from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from domain.value_objects.bounding_box import NORMALIZED_SPACE

if TYPE_CHECKING:
    from domain.value_objects.bounding_box import BoundingBox
    from domain.value_objects.raster_image import RasterImage


class RegionCropper(Protocol):
    """Port for cutting a normalized-space region out of a raster image."""

    def crop(
        self,
        image: RasterImage,
        box: BoundingBox,
        norm_width: float = NORMALIZED_SPACE,
        norm_height: float = NORMALIZED_SPACE,
    ) -> RasterImage:
        """Return a new image holding only ``box``, denormalized against the image's pixels.

        Raises:
            InvalidBoundingBoxError: If the box violates the normalized-space invariant.
                Checked before any cropping arithmetic.

        """
        ...
