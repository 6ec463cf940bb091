"""Tests for whole-page processing."""

from __future__ import annotations

import asyncio

import pytest
from returns.result import Failure, Success

from application.session.pipeline_session import PipelineSession
from application.use_cases.page_use_cases import ProcessPageUseCase
from domain.aggregates.page_record import CHEMISTRY_PENDING
from domain.exceptions import PageProcessingError
from domain.value_objects.chemical_structure import ChemicalStructure
from domain.value_objects.page_content import FALLBACK_MARKDOWN, PageContent
from domain.value_objects.page_status import PageStatus
from tests.mocks import ControllableExtractionClient, make_content, wait_until


class TestProcessPageUseCase:
    """Test ProcessPageUseCase."""

    @pytest.mark.asyncio
    async def test_idle_page_becomes_done(
        self,
        loaded_session: PipelineSession,
        extraction_client: ControllableExtractionClient,
    ) -> None:
        use_case = ProcessPageUseCase(loaded_session, extraction_client)

        result = await use_case.execute(2)

        assert isinstance(result, Success)
        page = result.unwrap()
        assert page.status is PageStatus.DONE
        assert page.content == extraction_client.page_content
        assert loaded_session.get(2).status is PageStatus.DONE
        assert extraction_client.page_images == [loaded_session.get(2).image]

    @pytest.mark.asyncio
    async def test_page_is_processing_while_request_is_in_flight(
        self,
        loaded_session: PipelineSession,
    ) -> None:
        client = ControllableExtractionClient(manual_pages=True)
        use_case = ProcessPageUseCase(loaded_session, client)

        task = asyncio.create_task(use_case.execute(2))
        await wait_until(lambda: len(client.page_calls) == 1)

        assert loaded_session.get(2).status is PageStatus.PROCESSING
        client.page_calls[0].set_result(make_content())
        result = await task

        assert result.unwrap().status is PageStatus.DONE

    @pytest.mark.asyncio
    async def test_unparseable_response_still_completes(
        self,
        loaded_session: PipelineSession,
    ) -> None:
        """The extraction client's fallback content is a normal ``done`` result."""
        client = ControllableExtractionClient(page_content=PageContent.fallback())

        result = await ProcessPageUseCase(loaded_session, client).execute(2)

        page = result.unwrap()
        assert page.status is PageStatus.DONE
        assert page.content is not None
        assert page.content.markdown == FALLBACK_MARKDOWN
        assert page.content.figures == ()

    @pytest.mark.asyncio
    async def test_request_failure_sets_error(self, loaded_session: PipelineSession) -> None:
        client = ControllableExtractionClient(
            page_error=PageProcessingError("Page extraction request failed: 503"),
        )

        result = await ProcessPageUseCase(loaded_session, client).execute(2)

        page = result.unwrap()
        assert page.status is PageStatus.ERROR
        assert page.content is None
        assert page.error_message == "Page extraction request failed: 503"

    @pytest.mark.asyncio
    async def test_unexpected_client_crash_sets_error(
        self,
        loaded_session: PipelineSession,
    ) -> None:
        client = ControllableExtractionClient(page_error=RuntimeError("bug"))

        result = await ProcessPageUseCase(loaded_session, client).execute(2)

        assert result.unwrap().status is PageStatus.ERROR

    @pytest.mark.asyncio
    async def test_timeout_sets_error(self, loaded_session: PipelineSession) -> None:
        client = ControllableExtractionClient(manual_pages=True)
        use_case = ProcessPageUseCase(loaded_session, client, timeout_seconds=0.05)

        result = await use_case.execute(2)

        page = result.unwrap()
        assert page.status is PageStatus.ERROR
        assert "timed out" in (page.error_message or "")

    @pytest.mark.asyncio
    async def test_error_page_can_be_retried(self, loaded_session: PipelineSession) -> None:
        client = ControllableExtractionClient(page_error=PageProcessingError("down"))
        use_case = ProcessPageUseCase(loaded_session, client)
        await use_case.execute(2)

        client.page_error = None
        result = await use_case.execute(2)

        assert result.unwrap().status is PageStatus.DONE
        assert loaded_session.get(2).error_message is None

    @pytest.mark.asyncio
    async def test_reprocessing_clears_chemistry(
        self,
        loaded_session: PipelineSession,
        extraction_client: ControllableExtractionClient,
    ) -> None:
        record = loaded_session.update(1, lambda r: r.request_chemistry(0, token=1))
        structure = ChemicalStructure(smiles="C")
        loaded_session.update(
            1,
            lambda r: r.resolve_chemistry("fig-0", 1, record.revision, structure),
        )
        loaded_session.update(1, lambda r: r.request_chemistry(1, token=2))

        result = await ProcessPageUseCase(loaded_session, extraction_client).execute(1)

        page = result.unwrap()
        assert page.status is PageStatus.DONE
        assert page.chemistry_results == {}
        assert page.chemistry_busy is False

    @pytest.mark.asyncio
    async def test_pages_process_concurrently(self, loaded_session: PipelineSession) -> None:
        client = ControllableExtractionClient(manual_pages=True)
        use_case = ProcessPageUseCase(loaded_session, client)

        first = asyncio.create_task(use_case.execute(1))
        second = asyncio.create_task(use_case.execute(2))
        await wait_until(lambda: len(client.page_calls) == 2)

        assert loaded_session.get(1).status is PageStatus.PROCESSING
        assert loaded_session.get(2).status is PageStatus.PROCESSING

        # Completing page 2 first must not disturb page 1
        client.page_calls[1].set_result(make_content(markdown="page two"))
        await second
        assert loaded_session.get(1).status is PageStatus.PROCESSING
        client.page_calls[0].set_result(make_content(markdown="page one"))
        await first

        assert loaded_session.get(1).content.markdown == "page one"
        assert loaded_session.get(2).content.markdown == "page two"

    @pytest.mark.asyncio
    async def test_chemistry_written_during_processing_is_not_lost(
        self,
        loaded_session: PipelineSession,
    ) -> None:
        """Completion merges against the latest record, not a pre-await snapshot."""
        client = ControllableExtractionClient(manual_pages=True)
        use_case = ProcessPageUseCase(loaded_session, client)

        task = asyncio.create_task(use_case.execute(2))
        await wait_until(lambda: len(client.page_calls) == 1)
        # A concurrent write to another page while page 2 is in flight
        loaded_session.update(1, lambda r: r.request_chemistry(0, token=5))
        client.page_calls[0].set_result(make_content((0, 0, 10, 10)))
        await task

        assert loaded_session.get(1).chemistry_results == {"fig-0": CHEMISTRY_PENDING}
        assert loaded_session.get(2).status is PageStatus.DONE

    @pytest.mark.asyncio
    async def test_double_trigger_is_rejected(self, loaded_session: PipelineSession) -> None:
        client = ControllableExtractionClient(manual_pages=True)
        use_case = ProcessPageUseCase(loaded_session, client)

        task = asyncio.create_task(use_case.execute(2))
        await wait_until(lambda: len(client.page_calls) == 1)
        second = await use_case.execute(2)

        assert isinstance(second, Failure)
        assert second.failure().category == "validation"
        client.page_calls[0].set_result(make_content())
        await task

    @pytest.mark.asyncio
    async def test_unknown_page(
        self,
        loaded_session: PipelineSession,
        extraction_client: ControllableExtractionClient,
    ) -> None:
        result = await ProcessPageUseCase(loaded_session, extraction_client).execute(9)

        assert isinstance(result, Failure)
        assert result.failure().category == "not_found"

    @pytest.mark.asyncio
    async def test_result_after_reset_is_discarded(self, loaded_session: PipelineSession) -> None:
        client = ControllableExtractionClient(manual_pages=True)
        use_case = ProcessPageUseCase(loaded_session, client)

        task = asyncio.create_task(use_case.execute(2))
        await wait_until(lambda: len(client.page_calls) == 1)
        loaded_session.reset()
        client.page_calls[0].set_result(make_content())
        result = await task

        assert isinstance(result, Failure)
        assert result.failure().category == "concurrency"
        assert loaded_session.pages() == []
