"""Exception handler middleware for structured error responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import DocTreeException

logger = logging.getLogger(__name__)


async def doctree_exception_handler(request: Request, exc: DocTreeException) -> JSONResponse:
    """
    Convert a DocTreeException into its JSON error payload.

    Client errors (4xx) are logged at warning level, everything else at error.
    """
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(
        level,
        f"DocTreeException: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
