from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from returns.result import Failure, Result, Success

from application.dtos.errors import AppError
from application.dtos.page_dtos import ChemistryOutcome, ChemistryResponse
from application.mappers.page_mappers import PageMapper
from domain.exceptions import (
    ChemistryExtractionError,
    PageNotFoundError,
    SessionSupersededError,
    ValidationError,
)
from domain.value_objects.page_content import figure_id

if TYPE_CHECKING:
    from uuid import UUID

    from application.ports.extraction_client import ExtractionClient
    from application.ports.region_cropper import RegionCropper
    from application.ports.smiles_validator import SmilesValidator
    from application.session.pipeline_session import PipelineSession
    from domain.value_objects.bounding_box import BoundingBox
    from domain.value_objects.chemical_structure import ChemicalStructure
    from domain.value_objects.raster_image import RasterImage

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ChemistryRequest:
    """Everything phase 2 needs, captured when the placeholder was written."""

    document_id: UUID
    page_number: int
    figure_index: int
    figure_id: str
    token: int
    revision: int
    image: RasterImage
    box: BoundingBox


class IdentifyStructureUseCase:
    """Extract the chemical structure shown in one detected figure.

    Two-phase write:
      1. ``begin`` synchronously marks the figure ``pending`` and registers a
         request token, so ``chemistry_busy`` is visible before any await.
      2. ``resolve`` crops, calls the inference service, validates the SMILES and
         merges the outcome into the *current* record. A response whose token was
         superseded by a newer request for the same figure, or whose page was
         re-processed meanwhile, is dropped.

    Failures (bad crop, request error, timeout) remove the figure entry so the
    figure can be requested again.
    """

    def __init__(
        self,
        session: PipelineSession,
        region_cropper: RegionCropper,
        extraction_client: ExtractionClient,
        smiles_validator: SmilesValidator,
        timeout_seconds: float | None = None,
    ) -> None:
        self.session = session
        self.region_cropper = region_cropper
        self.extraction_client = extraction_client
        self.smiles_validator = smiles_validator
        self.timeout_seconds = timeout_seconds

    def begin(self, page_number: int, figure_index: int) -> ChemistryRequest:
        """Phase 1. Raises PageNotFoundError or ValidationError without touching state."""
        document_id = self.session.document_id
        if document_id is None:
            msg = "No document is loaded"
            raise PageNotFoundError(msg)
        token = self.session.next_request_token()
        record = self.session.update(
            page_number,
            lambda r: r.request_chemistry(figure_index, token),
        )
        log.info(
            "identify_structure.pending",
            page_number=page_number,
            figure_index=figure_index,
            token=token,
        )
        return ChemistryRequest(
            document_id=document_id,
            page_number=page_number,
            figure_index=figure_index,
            figure_id=figure_id(figure_index),
            token=token,
            revision=record.revision,
            image=record.image,
            box=record.content.figure(figure_index),  # type: ignore[union-attr]
        )

    async def resolve(self, request: ChemistryRequest) -> ChemistryResponse:
        """Phase 2. Always leaves the figure in a non-pending state unless superseded."""
        structure: ChemicalStructure | None = None
        try:
            structure = self._validate(await self._extract(request))
        except ChemistryExtractionError as e:
            log.warning(
                "identify_structure.failed",
                page_number=request.page_number,
                figure_id=request.figure_id,
                error=str(e),
            )

        if not self.session.is_current(request.document_id):
            msg = "The session was replaced while the structure was being extracted"
            raise SessionSupersededError(msg)

        current = self.session.get(request.page_number)
        owns = current.owns_chemistry_request(request.figure_id, request.token, request.revision)

        if structure is not None:
            updated = self.session.update(
                request.page_number,
                lambda r: r.resolve_chemistry(
                    request.figure_id,
                    request.token,
                    request.revision,
                    structure,
                ),
            )
        else:
            updated = self.session.update(
                request.page_number,
                lambda r: r.fail_chemistry(request.figure_id, request.token, request.revision),
            )

        if not owns:
            outcome = ChemistryOutcome.SUPERSEDED
            log.info(
                "identify_structure.stale_result",
                page_number=request.page_number,
                figure_id=request.figure_id,
                token=request.token,
            )
        elif structure is not None:
            outcome = ChemistryOutcome.RESOLVED
            log.info(
                "identify_structure.success",
                page_number=request.page_number,
                figure_id=request.figure_id,
                confidence=structure.confidence.value,
                is_smiles_valid=structure.is_smiles_valid,
            )
        else:
            outcome = ChemistryOutcome.FAILED

        return ChemistryResponse(
            page_number=request.page_number,
            figure_id=request.figure_id,
            outcome=outcome,
            structure=structure if outcome is ChemistryOutcome.RESOLVED else None,
            page=PageMapper.to_page_response(updated),
        )

    async def execute(
        self,
        page_number: int,
        figure_index: int,
    ) -> Result[ChemistryResponse, AppError]:
        try:
            request = self.begin(page_number, figure_index)
            return Success(await self.resolve(request))

        except PageNotFoundError as e:
            log.warning("identify_structure.not_found", page_number=page_number, error=str(e))
            return Failure(AppError("not_found", str(e)))
        except ValidationError as e:
            log.warning(
                "identify_structure.validation_error",
                page_number=page_number,
                figure_index=figure_index,
                error=str(e),
            )
            return Failure(AppError("validation", str(e)))
        except SessionSupersededError as e:
            log.info("identify_structure.stale_session", page_number=page_number)
            return Failure(AppError("concurrency", str(e)))
        except Exception as e:
            log.exception(
                "identify_structure.unexpected_error",
                page_number=page_number,
                figure_index=figure_index,
                error=str(e),
            )
            return Failure(AppError("internal_error", f"Unexpected error: {e!s}"))

    async def _extract(self, request: ChemistryRequest) -> ChemicalStructure:
        try:
            async with asyncio.timeout(self.timeout_seconds):
                cropped = await asyncio.to_thread(
                    self.region_cropper.crop,
                    request.image,
                    request.box,
                )
                return await self.extraction_client.extract_chemical_structure(cropped)
        except TimeoutError as e:
            msg = f"Structure extraction timed out after {self.timeout_seconds}s"
            raise ChemistryExtractionError(msg) from e
        except Exception as e:
            msg = f"Structure extraction failed: {e!s}"
            raise ChemistryExtractionError(msg) from e

    def _validate(self, structure: ChemicalStructure) -> ChemicalStructure:
        """Attach RDKit validity and canonical form; the sentinel is left untouched."""
        if structure.is_unresolved:
            return structure
        try:
            is_valid = self.smiles_validator.validate(structure.smiles)
            canonical = self.smiles_validator.canonicalize(structure.smiles) if is_valid else None
        except Exception as e:  # noqa: BLE001
            log.warning("identify_structure.smiles_validation_unavailable", error=str(e))
            return structure
        return structure.model_copy(
            update={"is_smiles_valid": is_valid, "canonical_smiles": canonical},
        )
