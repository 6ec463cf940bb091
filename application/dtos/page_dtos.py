from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field

from domain.value_objects.chemical_structure import ChemicalStructure
from domain.value_objects.page_content import PageContent
from domain.value_objects.page_status import PageStatus
from domain.value_objects.session_state import SessionState


class PageResponse(BaseModel):
    page_number: int
    status: PageStatus
    image_width: int
    image_height: int
    image_data_uri: str | None = Field(
        None,
        description="PNG data URI for local display; only included on request",
    )
    content: PageContent | None = None
    chemistry_results: dict[str, str] = Field(default_factory=dict)
    chemistry_structures: dict[str, ChemicalStructure] = Field(default_factory=dict)
    chemistry_busy: bool = False
    error_message: str | None = None


class SessionResponse(BaseModel):
    document_id: UUID | None = None
    source_filename: str | None = None
    state: SessionState
    total_pages: int | None = Field(
        None,
        description="Physical page count of the document, before the page cap",
    )
    error_message: str | None = None
    pages: list[PageResponse] = Field(default_factory=list)


class ChemistryOutcome(StrEnum):
    RESOLVED = "resolved"
    FAILED = "failed"
    SUPERSEDED = "superseded"


class ChemistryResponse(BaseModel):
    page_number: int
    figure_id: str
    outcome: ChemistryOutcome
    structure: ChemicalStructure | None = None
    page: PageResponse
