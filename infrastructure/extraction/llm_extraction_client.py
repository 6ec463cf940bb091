from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from application.dtos.extraction_dtos import ChemistryExtractionPayload, PageExtractionPayload
from domain.exceptions import ExtractionParseError, PageProcessingError
from domain.value_objects.chemical_structure import ChemicalStructure
from domain.value_objects.page_content import PageContent
from infrastructure.extraction.response_parsing import parse_structured_response

if TYPE_CHECKING:
    from application.ports.llm_client import LLMClientPort
    from application.ports.prompt_repository import PromptRepositoryPort
    from domain.value_objects.raster_image import RasterImage

log = structlog.get_logger(__name__)

PAGE_EXTRACTION_PROMPT = "page_extraction"
CHEMISTRY_EXTRACTION_PROMPT = "chemical_structure_extraction"


async def _model_name(llm: LLMClientPort) -> str:
    model_info = await llm.get_model_info()
    return f"{model_info.get('provider', 'unknown')}/{model_info.get('model_name', 'unknown')}"


class LlmExtractionClient:
    """ExtractionClient adapter: prompt repository + multimodal LLM + schema validation.

    Page and chemistry calls may go to different models; the caller wires in one
    LLM client per operation. Both calls are one-shot.
    """

    def __init__(
        self,
        page_llm: LLMClientPort,
        chemistry_llm: LLMClientPort,
        prompt_repository: PromptRepositoryPort,
    ) -> None:
        self.page_llm = page_llm
        self.chemistry_llm = chemistry_llm
        self.prompt_repository = prompt_repository

    async def extract_page_content(self, image: RasterImage) -> PageContent:
        try:
            prompt = await self.prompt_repository.render_prompt(PAGE_EXTRACTION_PROMPT)
            text = await self.page_llm.complete_with_image(
                prompt,
                image.to_base64(),
                json_output=True,
            )
        except Exception as e:
            log.warning("extraction_client.page_request_failed", error=str(e))
            msg = f"Page extraction request failed: {e!s}"
            raise PageProcessingError(msg) from e

        try:
            payload = parse_structured_response(text, PageExtractionPayload)
        except ExtractionParseError as e:
            log.warning("extraction_client.page_parse_failed", error=str(e), response_len=len(text))
            return PageContent.fallback()

        content = payload.to_page_content()
        log.info(
            "extraction_client.page_extracted",
            model=await _model_name(self.page_llm),
            markdown_len=len(content.markdown),
            figures=len(content.figures),
        )
        return content

    async def extract_chemical_structure(self, cropped: RasterImage) -> ChemicalStructure:
        try:
            prompt = await self.prompt_repository.render_prompt(CHEMISTRY_EXTRACTION_PROMPT)
            text = await self.chemistry_llm.complete_with_image(
                prompt,
                cropped.to_base64(),
                json_output=True,
            )
            payload = parse_structured_response(text, ChemistryExtractionPayload)
            structure = payload.to_chemical_structure()
            log.info(
                "extraction_client.structure_extracted",
                model=await _model_name(self.chemistry_llm),
                smiles=structure.smiles,
                confidence=structure.confidence,
            )
            return structure
        except ExtractionParseError as e:
            log.warning("extraction_client.chemistry_parse_failed", error=str(e))
        except Exception as e:
            log.warning("extraction_client.chemistry_request_failed", error=str(e))
        return ChemicalStructure.unresolved()
