"""Error Handlers — every failure leaves the API as {"error": {...}}.

Invariants:
    - LearnHubError → its own http_status and to_response() body
    - 401 responses carry WWW-Authenticate: Bearer
    - RequestValidationError → 400 with one detail entry per invalid field
    - Anything else → 500 INTERNAL_ERROR, exception text only in the logs

Design Decisions:
    - 4xx logged at warning, 5xx at error: a wrong password is not an incident
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from learnhub.core.errors import ErrorCategory, ErrorSeverity, LearnHubError

logger = logging.getLogger(__name__)


def _error_body(
    code: str, message: str, category: ErrorCategory, severity: ErrorSeverity, **extra,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            **extra,
        },
    }


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(LearnHubError)
    async def handle_domain_error(request: Request, exc: LearnHubError):
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"{request.method} {request.url.path} -> {exc.http_status}: {exc.message}",
            extra={"error_code": exc.code},
        )
        headers = (
            {"WWW-Authenticate": "Bearer"}
            if exc.http_status == status.HTTP_401_UNAUTHORIZED else None
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(), headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            }
            for err in exc.errors()
        ]
        logger.warning(
            f"{request.method} {request.url.path} -> 400: {len(details)} invalid field(s)",
            extra={"error_code": "VALIDATION_ERROR"},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(
                "VALIDATION_ERROR", "Invalid request data",
                ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details=details,
            ),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                "INTERNAL_ERROR", "An unexpected error occurred",
                ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
            ),
        )
