from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from lagom import Container

from application.dtos.page_dtos import ChemistryResponse, PageResponse, SessionResponse
from application.queries.page_queries import (
    GetFigureImageQuery,
    GetPageImageQuery,
    GetPageQuery,
    GetSessionQuery,
    ListPagesQuery,
)
from application.use_cases.chemistry_use_cases import IdentifyStructureUseCase
from application.use_cases.document_use_cases import LoadDocumentUseCase, ResetSessionUseCase
from application.use_cases.page_use_cases import ProcessPageUseCase
from domain.value_objects.mime_type import MimeType
from domain.value_objects.raster_image import RasterImage
from interfaces.api.middleware import handle_use_case_errors
from interfaces.dependencies import get_container

router = APIRouter(prefix="/session", tags=["session"])


def _png_response(image: RasterImage) -> Response:
    return Response(
        content=image.png,
        media_type=MimeType.PNG.value,
        headers={"X-Image-Width": str(image.width), "X-Image-Height": str(image.height)},
    )


@router.post("/document", status_code=status.HTTP_201_CREATED)
@handle_use_case_errors
async def upload_document(
    file: Annotated[UploadFile, File()],
    container: Annotated[Container, Depends(get_container)],
) -> SessionResponse:
    """Upload a PDF and rasterize its first pages.

    Returns:
        201 Created: Session with one idle record per rendered page
        400 Bad Request: Empty upload
        415 Unsupported Media Type: Not an application/pdf upload
        422 Unprocessable Entity: PDF could not be decoded, or no page rendered
        409 Conflict: A newer upload or reset replaced this load

    """
    content = await file.read()
    use_case = container[LoadDocumentUseCase]
    return await use_case.execute(
        content,
        mime_type=file.content_type,
        source_filename=file.filename,
    )


@router.get("", status_code=status.HTTP_200_OK)
@handle_use_case_errors
async def get_session(
    container: Annotated[Container, Depends(get_container)],
    include_images: Annotated[bool, Query()] = False,
) -> SessionResponse:
    """Current session state and all page records."""
    query = container[GetSessionQuery]
    return await query.execute(include_images=include_images)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
@handle_use_case_errors
async def reset_session(
    container: Annotated[Container, Depends(get_container)],
) -> None:
    """Discard the document and every page record."""
    use_case = container[ResetSessionUseCase]
    return await use_case.execute()


@router.get("/pages", status_code=status.HTTP_200_OK)
@handle_use_case_errors
async def list_pages(
    container: Annotated[Container, Depends(get_container)],
) -> list[PageResponse]:
    """All page records ordered by page number."""
    query = container[ListPagesQuery]
    return await query.execute()


@router.get("/pages/{page_number}", status_code=status.HTTP_200_OK)
@handle_use_case_errors
async def get_page(
    page_number: int,
    container: Annotated[Container, Depends(get_container)],
    include_image: Annotated[bool, Query()] = False,
) -> PageResponse:
    query = container[GetPageQuery]
    return await query.execute(page_number, include_image=include_image)


@router.get("/pages/{page_number}/image", response_class=Response)
@handle_use_case_errors
async def get_page_image(
    page_number: int,
    container: Annotated[Container, Depends(get_container)],
) -> Response:
    """Rendered page as PNG."""
    query = container[GetPageImageQuery]
    result = await query.execute(page_number)
    return result.map(_png_response)


@router.post("/pages/{page_number}/process", status_code=status.HTTP_200_OK)
@handle_use_case_errors
async def process_page(
    page_number: int,
    container: Annotated[Container, Depends(get_container)],
) -> PageResponse:
    """Run page extraction and wait for a terminal status.

    A failed extraction is not an HTTP error: the page comes back with
    ``status="error"`` and can be re-triggered.

    Returns:
        200 OK: Page in ``done`` or ``error``
        400 Bad Request: Page is already processing
        404 Not Found: Page is not part of the session
        409 Conflict: Session was replaced while processing

    """
    use_case = container[ProcessPageUseCase]
    return await use_case.execute(page_number)


@router.post(
    "/pages/{page_number}/figures/{figure_index}/structure",
    status_code=status.HTTP_200_OK,
)
@handle_use_case_errors
async def identify_structure(
    page_number: int,
    figure_index: int,
    container: Annotated[Container, Depends(get_container)],
) -> ChemistryResponse:
    """Extract the chemical structure shown in one figure of a processed page.

    Returns:
        200 OK: ``outcome`` is ``resolved``, ``failed`` or ``superseded``
        400 Bad Request: Page not done, figure index out of range, or malformed box
        404 Not Found: Page is not part of the session

    """
    use_case = container[IdentifyStructureUseCase]
    return await use_case.execute(page_number, figure_index)


@router.get("/pages/{page_number}/figures/{figure_index}/image", response_class=Response)
@handle_use_case_errors
async def get_figure_image(
    page_number: int,
    figure_index: int,
    container: Annotated[Container, Depends(get_container)],
) -> Response:
    """The cropped figure region as PNG."""
    query = container[GetFigureImageQuery]
    result = await query.execute(page_number, figure_index)
    return result.map(_png_response)
