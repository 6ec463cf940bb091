from __future__ import annotations

from lagom import Container

from application.ports.extraction_client import ExtractionClient
from application.ports.prompt_repository import PromptRepositoryPort
from application.ports.rasterizer import Rasterizer
from application.ports.region_cropper import RegionCropper
from application.ports.smiles_validator import SmilesValidator
from application.queries.page_queries import (
    GetFigureImageQuery,
    GetPageImageQuery,
    GetPageQuery,
    GetSessionQuery,
    ListPagesQuery,
)
from application.session.pipeline_session import PipelineSession
from application.session.render_scheduler import SequentialRenderScheduler
from application.use_cases.chemistry_use_cases import IdentifyStructureUseCase
from application.use_cases.document_use_cases import LoadDocumentUseCase, ResetSessionUseCase
from application.use_cases.page_use_cases import ProcessPageUseCase
from infrastructure.chemistry.rdkit_smiles_validator import RdkitSmilesValidator
from infrastructure.config import Settings, settings
from infrastructure.extraction.llm_extraction_client import LlmExtractionClient
from infrastructure.imaging.pillow_region_cropper import PillowRegionCropper
from infrastructure.llm.factory import create_llm_client, create_prompt_repository
from infrastructure.rasterizers.pymupdf_rasterizer import PyMuPDFRasterizer


def create_container(app_settings: Settings = settings) -> Container:
    container = Container()

    # One pipeline session and one render slot per process
    container[PipelineSession] = PipelineSession()
    container[SequentialRenderScheduler] = SequentialRenderScheduler()

    # Adapters
    container[Rasterizer] = PyMuPDFRasterizer()
    container[RegionCropper] = PillowRegionCropper()
    container[SmilesValidator] = lambda _: RdkitSmilesValidator()

    prompt_repository = create_prompt_repository(app_settings)
    container[PromptRepositoryPort] = prompt_repository
    container[ExtractionClient] = LlmExtractionClient(
        page_llm=create_llm_client(app_settings),
        chemistry_llm=create_llm_client(app_settings, app_settings.chemistry_model_name),
        prompt_repository=prompt_repository,
    )

    # Document Use Cases
    container[LoadDocumentUseCase] = lambda c: LoadDocumentUseCase(
        session=c[PipelineSession],
        rasterizer=c[Rasterizer],
        render_scheduler=c[SequentialRenderScheduler],
    )
    container[ResetSessionUseCase] = lambda c: ResetSessionUseCase(session=c[PipelineSession])

    # Page Use Cases
    container[ProcessPageUseCase] = lambda c: ProcessPageUseCase(
        session=c[PipelineSession],
        extraction_client=c[ExtractionClient],
        timeout_seconds=app_settings.page_extraction_timeout_seconds,
    )

    # Chemistry Use Cases
    container[IdentifyStructureUseCase] = lambda c: IdentifyStructureUseCase(
        session=c[PipelineSession],
        region_cropper=c[RegionCropper],
        extraction_client=c[ExtractionClient],
        smiles_validator=c[SmilesValidator],
        timeout_seconds=app_settings.chemistry_extraction_timeout_seconds,
    )

    # Queries
    container[GetSessionQuery] = lambda c: GetSessionQuery(session=c[PipelineSession])
    container[ListPagesQuery] = lambda c: ListPagesQuery(session=c[PipelineSession])
    container[GetPageQuery] = lambda c: GetPageQuery(session=c[PipelineSession])
    container[GetPageImageQuery] = lambda c: GetPageImageQuery(session=c[PipelineSession])
    container[GetFigureImageQuery] = lambda c: GetFigureImageQuery(
        session=c[PipelineSession],
        region_cropper=c[RegionCropper],
    )

    return container
