"""Integration tests for the API with real use cases and an in-memory session."""

from __future__ import annotations

from collections.abc import Callable

import pytest
from fastapi.testclient import TestClient

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
from domain.exceptions import DecodeError
from interfaces.api.main import app
from interfaces.dependencies import get_container
from tests.mocks import (
    ControllableExtractionClient,
    MockSmilesValidator,
    RecordingCropper,
    RecordingRasterizer,
    make_content,
)

PDF_UPLOAD = {"file": ("paper.pdf", b"%PDF-1.7 fake body", "application/pdf")}


class SimpleContainer:
    def __init__(self, mapping: dict[type, object]) -> None:
        self._mapping = mapping

    def __getitem__(self, key: type) -> object:
        return self._mapping[key]


@pytest.fixture
def client() -> Callable[[dict[type, object]], TestClient]:
    def _client(overrides: dict[type, object]) -> TestClient:
        container = SimpleContainer(overrides)
        app.dependency_overrides[get_container] = lambda: container
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()


def _build_use_cases(
    rasterizer: RecordingRasterizer | None = None,
    extraction_client: ControllableExtractionClient | None = None,
) -> tuple[dict[type, object], PipelineSession]:
    session = PipelineSession()
    rasterizer = rasterizer or RecordingRasterizer(page_count=2, render_delay=0)
    extraction_client = extraction_client or ControllableExtractionClient()
    cropper = RecordingCropper()

    use_cases: dict[type, object] = {
        LoadDocumentUseCase: LoadDocumentUseCase(
            session,
            rasterizer,
            SequentialRenderScheduler(),
        ),
        ResetSessionUseCase: ResetSessionUseCase(session),
        ProcessPageUseCase: ProcessPageUseCase(session, extraction_client),
        IdentifyStructureUseCase: IdentifyStructureUseCase(
            session=session,
            region_cropper=cropper,
            extraction_client=extraction_client,
            smiles_validator=MockSmilesValidator(),
        ),
        GetSessionQuery: GetSessionQuery(session),
        ListPagesQuery: ListPagesQuery(session),
        GetPageQuery: GetPageQuery(session),
        GetPageImageQuery: GetPageImageQuery(session),
        GetFigureImageQuery: GetFigureImageQuery(session, cropper),
    }

    return use_cases, session


def test_upload_process_and_identify_structure(client) -> None:
    use_cases, session = _build_use_cases()
    api = client(use_cases)

    upload = api.post("/session/document", files=PDF_UPLOAD)
    assert upload.status_code == 201
    body = upload.json()
    assert body["state"] == "ready"
    assert body["source_filename"] == "paper.pdf"
    assert [p["status"] for p in body["pages"]] == ["idle", "idle"]
    assert body["pages"][0]["image_width"] == 200

    processed = api.post("/session/pages/1/process")
    assert processed.status_code == 200
    assert processed.json()["status"] == "done"
    assert processed.json()["content"]["figures"][0]["ymax"] == 400

    structure = api.post("/session/pages/1/figures/0/structure")
    assert structure.status_code == 200
    assert structure.json()["outcome"] == "resolved"
    assert structure.json()["structure"]["canonical_smiles"] == "canonical:CCO"
    assert structure.json()["page"]["chemistry_results"] == {"fig-0": "CCO"}

    # the stored record reflects both writes
    record = session.get(1)
    assert record.chemistry_results == {"fig-0": "CCO"}
    assert record.content is not None


def test_session_and_page_reads(client) -> None:
    use_cases, _ = _build_use_cases()
    api = client(use_cases)
    api.post("/session/document", files=PDF_UPLOAD)

    pages = api.get("/session/pages")
    assert [p["page_number"] for p in pages.json()] == [1, 2]
    assert pages.json()[0]["image_data_uri"] is None

    page = api.get("/session/pages/2", params={"include_image": "true"})
    assert page.status_code == 200
    assert page.json()["image_data_uri"].startswith("data:image/png;base64,")

    state = api.get("/session")
    assert state.json()["total_pages"] == 2


def test_page_image_is_png(client) -> None:
    use_cases, _ = _build_use_cases()
    api = client(use_cases)
    api.post("/session/document", files=PDF_UPLOAD)

    response = api.get("/session/pages/1/image")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.headers["x-image-width"] == "200"
    assert response.headers["x-image-height"] == "300"
    assert response.content.startswith(b"\x89PNG")


def test_figure_image_is_cropped_from_page(client) -> None:
    use_cases, _ = _build_use_cases()
    api = client(use_cases)
    api.post("/session/document", files=PDF_UPLOAD)
    api.post("/session/pages/1/process")

    response = api.get("/session/pages/1/figures/0/image")

    assert response.status_code == 200
    # (100, 100, 400, 500) on a 200x300 page
    assert response.headers["x-image-width"] == "80"
    assert response.headers["x-image-height"] == "90"


def test_malformed_figure_is_rejected(client) -> None:
    extraction_client = ControllableExtractionClient(
        page_content=make_content((100, 100, 400, 500), (600, 100, 200, 300)),
    )
    use_cases, session = _build_use_cases(extraction_client=extraction_client)
    api = client(use_cases)
    api.post("/session/document", files=PDF_UPLOAD)
    api.post("/session/pages/1/process")

    response = api.post("/session/pages/1/figures/1/structure")

    assert response.status_code == 400
    assert session.get(1).chemistry_results == {}


def test_structure_before_processing_is_rejected(client) -> None:
    use_cases, _ = _build_use_cases()
    api = client(use_cases)
    api.post("/session/document", files=PDF_UPLOAD)

    response = api.post("/session/pages/1/figures/0/structure")

    assert response.status_code == 400


def test_failed_extraction_marks_page_error(client) -> None:
    extraction_client = ControllableExtractionClient(page_error=ConnectionError("refused"))
    use_cases, _ = _build_use_cases(extraction_client=extraction_client)
    api = client(use_cases)
    api.post("/session/document", files=PDF_UPLOAD)

    response = api.post("/session/pages/1/process")

    assert response.status_code == 200
    assert response.json()["status"] == "error"
    assert response.json()["error_message"]


@pytest.mark.parametrize(
    ("files", "expected_status"),
    [
        ({"file": ("notes.txt", b"hello", "text/plain")}, 415),
        ({"file": ("empty.pdf", b"", "application/pdf")}, 400),
        ({"file": ("broken.pdf", b"garbage", "application/pdf")}, 422),
    ],
)
def test_upload_errors(client, files, expected_status: int) -> None:
    use_cases, session = _build_use_cases()
    api = client(use_cases)

    response = api.post("/session/document", files=files)

    assert response.status_code == expected_status
    assert session.pages() == []


def test_decoder_failure_is_422(client) -> None:
    rasterizer = RecordingRasterizer(decode_error=DecodeError("Failed to load PDF: encrypted"))
    use_cases, _ = _build_use_cases(rasterizer=rasterizer)
    api = client(use_cases)

    response = api.post("/session/document", files=PDF_UPLOAD)

    assert response.status_code == 422
    assert "encrypted" in response.json()["detail"]


def test_reset_clears_session(client) -> None:
    use_cases, session = _build_use_cases()
    api = client(use_cases)
    api.post("/session/document", files=PDF_UPLOAD)

    response = api.delete("/session")

    assert response.status_code == 204
    assert session.pages() == []
    assert api.get("/session/pages/1").status_code == 404


def test_unknown_page_is_404(client) -> None:
    use_cases, _ = _build_use_cases()
    api = client(use_cases)
    api.post("/session/document", files=PDF_UPLOAD)

    assert api.get("/session/pages/9").status_code == 404
    assert api.post("/session/pages/9/process").status_code == 404
    assert api.get("/session/pages/9/image").status_code == 404


def test_health() -> None:
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
