"""Error handling decorator for API routes."""

import functools
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import HTTPException, status
from returns.result import Failure, Success

from domain.exceptions import InfrastructureError
from interfaces.api.routes.helpers import _map_app_error_to_http_exception

logger = structlog.get_logger()


def handle_use_case_errors[T](
    func: Callable[..., Awaitable[Any]],
) -> Callable[..., Awaitable[T]]:
    """Turn a route returning a use-case ``Result`` into a plain FastAPI handler.

    - ``Success`` is unwrapped and returned as the response body
    - ``Failure(AppError)`` becomes an ``HTTPException`` with the category's status
    - ``InfrastructureError`` becomes 503 (an adapter such as imaging is unavailable)
    - anything else is logged and becomes 500
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:  # noqa: ANN401
        try:
            result = await func(*args, **kwargs)
        except HTTPException:
            raise
        except InfrastructureError as exc:
            logger.exception("api.infrastructure_error", error=str(exc), function=func.__name__)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Service temporarily unavailable",
            ) from exc
        except Exception as exc:
            logger.exception(
                "api.unexpected_error",
                error=str(exc),
                error_type=type(exc).__name__,
                function=func.__name__,
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal server error",
            ) from exc

        if isinstance(result, Success):
            return result.unwrap()
        if isinstance(result, Failure):
            error = result.failure()
            logger.info("api.use_case_failure", category=error.category, function=func.__name__)
            raise _map_app_error_to_http_exception(error) from None

        logger.error("api.unexpected_result_type", result_type=type(result).__name__)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unexpected result type",
        )

    return wrapper
