"""Schemas for the structured responses returned by the inference service.

Upstream output is untrusted: it is validated into one of these models in full or
rejected, never accepted partially.
"""

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.value_objects.bounding_box import BoundingBox
from domain.value_objects.chemical_structure import ChemicalStructure
from domain.value_objects.page_content import PageContent


class FigurePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ymin: int
    xmin: int
    ymax: int
    xmax: int
    label: str = ""

    @field_validator("ymin", "xmin", "ymax", "xmax", mode="before")
    @classmethod
    def round_coordinates(cls, v: object) -> object:
        """Models occasionally emit fractional coordinates; snap them to the integer grid."""
        if isinstance(v, float):
            if not math.isfinite(v):
                msg = f"Coordinate must be a finite number, got {v}"
                raise ValueError(msg)
            return round(v)
        return v

    @field_validator("label", mode="before")
    @classmethod
    def coerce_label(cls, v: object) -> object:
        return "" if v is None else v


class PageExtractionPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    markdown: str
    figures: list[FigurePayload] = Field(default_factory=list)

    def to_page_content(self) -> PageContent:
        return PageContent(
            markdown=self.markdown,
            figures=tuple(
                BoundingBox(
                    ymin=f.ymin,
                    xmin=f.xmin,
                    ymax=f.ymax,
                    xmax=f.xmax,
                    label=f.label,
                )
                for f in self.figures
            ),
        )


class ChemistryExtractionPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    smiles: str
    confidence: str = "Low"

    @field_validator("smiles")
    @classmethod
    def validate_smiles(cls, v: str) -> str:
        """Validate that SMILES is not blank or empty."""
        if not v or not v.strip():
            msg = "SMILES cannot be blank or empty"
            raise ValueError(msg)
        return v.strip()

    def to_chemical_structure(self) -> ChemicalStructure:
        return ChemicalStructure(smiles=self.smiles, confidence=self.confidence)
