"""Port for the two inference operations the pipeline depends on."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from domain.value_objects.chemical_structure import ChemicalStructure
    from domain.value_objects.page_content import PageContent
    from domain.value_objects.raster_image import RasterImage


class ExtractionClient(Protocol):
    """Abstract port over the multimodal inference service.

    Both operations are one-shot (no internal retry) and always return a
    well-typed value for malformed upstream output.
    """

    async def extract_page_content(self, image: RasterImage) -> PageContent:
        """Transcribe a full page to markdown and locate its figures.

        Returns:
            The validated content, or ``PageContent.fallback()`` if the response
            could not be parsed.

        Raises:
            PageProcessingError: If the request itself fails.

        """
        ...

    async def extract_chemical_structure(self, cropped: RasterImage) -> ChemicalStructure:
        """Read the chemical structure shown in a cropped figure.

        Returns:
            The parsed structure, or ``ChemicalStructure.unresolved()`` on any
            request or parse failure. Never raises for upstream problems.

        """
        ...
