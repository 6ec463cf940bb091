from fastapi import HTTPException, status

from application.dtos.errors import AppError

_STATUS_BY_CATEGORY = {
    "validation": status.HTTP_400_BAD_REQUEST,
    "not_found": status.HTTP_404_NOT_FOUND,
    "concurrency": status.HTTP_409_CONFLICT,
    "unsupported_media_type": status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    "decode_error": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "render_error": status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def _map_app_error_to_http_exception(error: AppError) -> HTTPException:
    """Map application layer errors to appropriate HTTP exceptions."""
    status_code = _STATUS_BY_CATEGORY.get(error.category)
    if status_code is not None:
        return HTTPException(status_code=status_code, detail=error.message)
    # internal_error and unknown categories never leak their message
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )
