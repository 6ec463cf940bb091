"""Tests for the pipeline session, page mapping and read queries."""

from __future__ import annotations

import pytest
from returns.result import Failure, Success

from application.mappers.page_mappers import PageMapper
from application.queries.page_queries import (
    GetFigureImageQuery,
    GetPageImageQuery,
    GetPageQuery,
    GetSessionQuery,
    ListPagesQuery,
)
from application.session.pipeline_session import PipelineSession
from domain.aggregates.page_record import PageRecord
from domain.exceptions import PageNotFoundError, SessionSupersededError
from domain.value_objects.session_state import SessionState
from tests.mocks import FakeDocument, RecordingCropper


class TestPipelineSession:
    """Test PipelineSession ownership and record replacement."""

    def test_new_session_is_empty(self, session: PipelineSession) -> None:
        assert session.state is SessionState.EMPTY
        assert session.document_id is None
        assert session.pages() == []

    def test_pages_are_ordered(self, session: PipelineSession, page_image) -> None:
        document_id = session.begin_load()
        records = [PageRecord.create(page_number=n, image=page_image) for n in (3, 1, 2)]

        session.install_pages(document_id, FakeDocument(3), records)

        assert [r.page_number for r in session.pages()] == [1, 2, 3]
        assert session.state is SessionState.READY

    def test_update_applies_transition_to_latest_record(
        self,
        loaded_session: PipelineSession,
    ) -> None:
        first = loaded_session.update(1, lambda r: r.request_chemistry(0, token=1))
        second = loaded_session.update(1, lambda r: r.request_chemistry(1, token=2))

        assert set(second.chemistry_requests) == {"fig-0", "fig-1"}
        assert loaded_session.get(1) is second
        assert first is not second

    def test_get_unknown_page(self, loaded_session: PipelineSession) -> None:
        with pytest.raises(PageNotFoundError):
            loaded_session.get(42)

    def test_install_after_reset_is_refused(self, session: PipelineSession, page_image) -> None:
        document_id = session.begin_load()
        session.reset()

        with pytest.raises(SessionSupersededError):
            session.install_pages(
                document_id,
                FakeDocument(1),
                [PageRecord.create(page_number=1, image=page_image)],
            )

    def test_begin_load_closes_previous_document(
        self,
        session: PipelineSession,
        page_image,
    ) -> None:
        document = FakeDocument(1)
        document_id = session.begin_load()
        session.install_pages(
            document_id,
            document,
            [PageRecord.create(page_number=1, image=page_image)],
        )

        session.begin_load()

        assert document.closed is True
        assert session.pages() == []
        assert session.state is SessionState.LOADING

    def test_fail_load_for_old_document_is_ignored(self, session: PipelineSession) -> None:
        old = session.begin_load()
        session.begin_load()

        session.fail_load(old, "late failure")

        assert session.state is SessionState.LOADING
        assert session.error_message is None

    def test_request_tokens_are_unique(self, session: PipelineSession) -> None:
        tokens = {session.next_request_token() for _ in range(5)}

        assert len(tokens) == 5


class TestPageMapper:
    """Test PageMapper."""

    def test_image_is_only_included_on_request(self, done_record: PageRecord) -> None:
        without = PageMapper.to_page_response(done_record)
        with_image = PageMapper.to_page_response(done_record, include_image=True)

        assert without.image_data_uri is None
        assert with_image.image_data_uri.startswith("data:image/png;base64,")
        assert without.image_width == 400
        assert without.image_height == 600

    def test_busy_flag_is_mapped(self, done_record: PageRecord) -> None:
        response = PageMapper.to_page_response(done_record.request_chemistry(0, token=1))

        assert response.chemistry_busy is True
        assert response.chemistry_results == {"fig-0": "pending"}


class TestQueries:
    """Test read queries over the session."""

    @pytest.mark.asyncio
    async def test_get_session(self, loaded_session: PipelineSession) -> None:
        result = await GetSessionQuery(loaded_session).execute()

        response = result.unwrap()
        assert response.state is SessionState.READY
        assert response.source_filename == "paper.pdf"
        assert response.total_pages == 2
        assert len(response.pages) == 2

    @pytest.mark.asyncio
    async def test_list_pages(self, loaded_session: PipelineSession) -> None:
        result = await ListPagesQuery(loaded_session).execute()

        assert [p.page_number for p in result.unwrap()] == [1, 2]

    @pytest.mark.asyncio
    async def test_get_page_not_found(self, loaded_session: PipelineSession) -> None:
        result = await GetPageQuery(loaded_session).execute(3)

        assert isinstance(result, Failure)
        assert result.failure().category == "not_found"

    @pytest.mark.asyncio
    async def test_get_page_image(self, loaded_session: PipelineSession) -> None:
        result = await GetPageImageQuery(loaded_session).execute(1)

        assert isinstance(result, Success)
        assert result.unwrap() == loaded_session.get(1).image

    @pytest.mark.asyncio
    async def test_get_figure_image(
        self,
        loaded_session: PipelineSession,
        cropper: RecordingCropper,
    ) -> None:
        result = await GetFigureImageQuery(loaded_session, cropper).execute(1, 1)

        image = result.unwrap()
        # (500, 200, 900, 800) on 400x600
        assert (image.width, image.height) == (240, 240)
        assert loaded_session.get(1).chemistry_results == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("page_number", "figure_index"), [(1, 2), (1, 3), (2, 0)])
    async def test_get_figure_image_rejects_bad_figure(
        self,
        loaded_session: PipelineSession,
        cropper: RecordingCropper,
        page_number: int,
        figure_index: int,
    ) -> None:
        result = await GetFigureImageQuery(loaded_session, cropper).execute(
            page_number,
            figure_index,
        )

        assert isinstance(result, Failure)
        assert result.failure().category == "validation"
        assert cropper.boxes == []
