"""Domain layer exports."""

from domain.aggregates import CHEMISTRY_PENDING, PageRecord
from domain.exceptions import DomainError, ValidationError
from domain.value_objects import (
    BoundingBox,
    ChemicalStructure,
    Confidence,
    MimeType,
    PageContent,
    PageStatus,
    RasterImage,
)

__all__ = [
    "CHEMISTRY_PENDING",
    "BoundingBox",
    "ChemicalStructure",
    "Confidence",
    "DomainError",
    "MimeType",
    "PageContent",
    "PageRecord",
    "PageStatus",
    "RasterImage",
    "ValidationError",
]
