from __future__ import annotations

import io
from typing import TYPE_CHECKING

import structlog
from PIL import Image, UnidentifiedImageError

from domain.exceptions import InfrastructureError
from domain.value_objects.bounding_box import NORMALIZED_SPACE
from domain.value_objects.raster_image import RasterImage

if TYPE_CHECKING:
    from domain.value_objects.bounding_box import BoundingBox

log = structlog.get_logger(__name__)


class PillowRegionCropper:
    """RegionCropper backed by Pillow.

    Denormalizes against the decoded bitmap's real size rather than the size
    recorded on the RasterImage, so a mismatched record cannot skew the crop.
    """

    def crop(
        self,
        image: RasterImage,
        box: BoundingBox,
        norm_width: float = NORMALIZED_SPACE,
        norm_height: float = NORMALIZED_SPACE,
    ) -> RasterImage:
        box.ensure_well_formed(norm_width, norm_height)

        try:
            with Image.open(io.BytesIO(image.png)) as source:
                source.load()
                rect = box.to_pixel_rect(source.width, source.height, norm_width, norm_height)
                # Origin and size round independently; keep the crop inside the bitmap
                left = max(0, min(round(rect.x), source.width - rect.width))
                top = max(0, min(round(rect.y), source.height - rect.height))
                cropped = source.crop((left, top, left + rect.width, top + rect.height))
        except (UnidentifiedImageError, OSError) as e:
            msg = f"Cannot decode page image for cropping: {e!s}"
            raise InfrastructureError(msg) from e

        buffer = io.BytesIO()
        cropped.save(buffer, format="PNG")
        log.debug(
            "pillow_cropper.cropped",
            label=box.label,
            width=cropped.width,
            height=cropped.height,
        )
        return RasterImage(png=buffer.getvalue(), width=cropped.width, height=cropped.height)
