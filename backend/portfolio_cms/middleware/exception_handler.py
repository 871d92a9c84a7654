"""Exception handlers for structured error responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from ..exceptions import ConflictError, ErrorCode, PortfolioError

logger = logging.getLogger(__name__)


async def portfolio_exception_handler(request: Request, exc: PortfolioError) -> JSONResponse:
    """
    Handle domain exceptions and return structured JSON responses.

    Client errors (4xx) are logged at INFO, server errors at ERROR.

    Args:
        request: FastAPI request object
        exc: PortfolioError instance

    Returns:
        JSONResponse with error details
    """
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(
        level,
        f"PortfolioError: {exc.error_code.value}",
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


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Constraint violations that escaped the service layer become 409s."""
    logger.warning(
        "Unhandled integrity error",
        extra={"path": request.url.path, "method": request.method, "error": str(exc.orig)},
    )
    return JSONResponse(status_code=409, content=ConflictError("Conflicting change; reload and try again").to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log with traceback, return a generic 500 without internals."""
    logger.exception(
        "Unhandled exception",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=500,
        content={"error": ErrorCode.INTERNAL_ERROR.value, "message": "An unexpected error occurred", "details": {}},
    )
