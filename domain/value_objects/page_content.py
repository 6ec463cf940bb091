from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from domain.value_objects.bounding_box import BoundingBox

FALLBACK_MARKDOWN = "Error processing content. Please try again."


def figure_id(index: int) -> str:
    """Stable key for the figure at ``index`` within one extraction result."""
    return f"fig-{index}"


class PageContent(BaseModel):
    """Structured extraction result for a single page."""

    model_config = ConfigDict(frozen=True)

    markdown: str = Field(default="", description="Page text transcribed to markdown")
    figures: tuple[BoundingBox, ...] = Field(
        default=(),
        description="Detected figures, in the order the inference service reported them",
    )
    is_fallback: bool = Field(
        default=False,
        description="True when the upstream response could not be parsed",
    )

    @classmethod
    def fallback(cls) -> PageContent:
        """Deterministic content used when the upstream response is unusable."""
        return cls(markdown=FALLBACK_MARKDOWN, figures=(), is_fallback=True)

    def figure(self, index: int) -> BoundingBox:
        if index < 0 or index >= len(self.figures):
            msg = f"Figure index {index} out of range (page has {len(self.figures)} figures)"
            raise IndexError(msg)
        return self.figures[index]
