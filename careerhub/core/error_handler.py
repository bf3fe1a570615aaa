import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from careerhub.core.exceptions import CareerHubError

logger = logging.getLogger(__name__)


def _error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}


async def careerhub_exception_handler(request: Request, exc: CareerHubError) -> JSONResponse:
    """Render a CareerHubError as a JSON error body with its status code."""
    if exc.status_code >= 500:
        logger.error("%s %s failed (%s): %s", request.method, request.url.path, exc.code, exc.message)
    else:
        logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc.message)

    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.code, exc.message))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Internals stay in the log, never in the response
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=_error_body("INTERNAL_SERVER_ERROR", "An unexpected error occurred"),
    )
