"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest

from application.session.pipeline_session import PipelineSession
from application.session.render_scheduler import SequentialRenderScheduler
from domain.aggregates.page_record import PageRecord
from domain.value_objects.raster_image import RasterImage
from tests.mocks import (
    ControllableExtractionClient,
    FakeDocument,
    MockSmilesValidator,
    RecordingCropper,
    RecordingRasterizer,
    make_content,
    make_raster_image,
)


@pytest.fixture
def page_image() -> RasterImage:
    """A 400x600 rendered page."""
    return make_raster_image(400, 600)


@pytest.fixture
def idle_record(page_image: RasterImage) -> PageRecord:
    return PageRecord.create(page_number=1, image=page_image)


@pytest.fixture
def done_record(idle_record: PageRecord) -> PageRecord:
    """Page 1 processed, with two well-formed figures and one malformed one."""
    processing = idle_record.start_processing()
    content = make_content(
        (100, 100, 400, 500),
        (500, 200, 900, 800),
        (600, 100, 200, 300),  # ymin > ymax
    )
    return processing.complete_processing(processing.revision, content)


@pytest.fixture
def session() -> PipelineSession:
    return PipelineSession()


@pytest.fixture
def loaded_session(session: PipelineSession, done_record: PageRecord, page_image: RasterImage):
    """Session holding page 1 (done) and page 2 (idle)."""
    document_id = session.begin_load("paper.pdf")
    session.install_pages(
        document_id,
        FakeDocument(page_count=2),
        [done_record, PageRecord.create(page_number=2, image=page_image)],
    )
    return session


@pytest.fixture
def render_scheduler() -> SequentialRenderScheduler:
    return SequentialRenderScheduler()


@pytest.fixture
def rasterizer() -> RecordingRasterizer:
    return RecordingRasterizer(page_count=3)


@pytest.fixture
def extraction_client() -> ControllableExtractionClient:
    return ControllableExtractionClient()


@pytest.fixture
def cropper() -> RecordingCropper:
    return RecordingCropper()


@pytest.fixture
def smiles_validator() -> MockSmilesValidator:
    return MockSmilesValidator()
