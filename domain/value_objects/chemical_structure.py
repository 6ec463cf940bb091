from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNRESOLVED_SMILES = "Could not extract SMILES"


class Confidence(str, Enum):
    """Confidence label reported alongside an extracted structure."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def parse(cls, value: str | None) -> Confidence:
        """Map a free-text label onto the enum, defaulting to LOW."""
        if not value:
            return cls.LOW
        normalized = value.strip().lower()
        for member in cls:
            if normalized.startswith(member.value.lower()):
                return member
        return cls.LOW


class ChemicalStructure(BaseModel):
    """A chemical structure resolved from a cropped figure.

    ``smiles`` is treated as an opaque string. ``canonical_smiles`` and
    ``is_smiles_valid`` are filled in after validation and stay None for the
    unresolved sentinel.
    """

    model_config = ConfigDict(frozen=True)

    smiles: str = Field(..., description="SMILES notation returned by the inference service")
    confidence: Confidence = Field(default=Confidence.LOW)
    canonical_smiles: str | None = Field(None, description="Canonicalized SMILES representation")
    is_smiles_valid: bool | None = Field(
        None,
        description="Indicates whether the SMILES notation parses as a molecule",
    )

    @field_validator("confidence", mode="before")
    @classmethod
    def normalize_confidence(cls, v: object) -> object:
        if isinstance(v, Confidence):
            return v
        return Confidence.parse(v if isinstance(v, str) else None)

    @classmethod
    def unresolved(cls) -> ChemicalStructure:
        """Sentinel returned when no structure could be extracted."""
        return cls(smiles=UNRESOLVED_SMILES, confidence=Confidence.LOW)

    @property
    def is_unresolved(self) -> bool:
        return self.smiles == UNRESOLVED_SMILES
