"""FastAPI exception handlers producing the ``{ok: false, error, code}`` envelope."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from autopilot.errors.exceptions import AuthorizationError, AutopilotError

logger = logging.getLogger(__name__)

_HTTP_STATUS_CODES = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "VALIDATION_ERROR",
    429: "RATE_LIMITED",
}


def error_response(message: str, status_code: int, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"ok": False, "error": message, "code": code},
    )


def autopilot_error_response(exc: AutopilotError) -> JSONResponse:
    return error_response(exc.message, exc.status_code, exc.code)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app."""

    @app.exception_handler(AutopilotError)
    async def autopilot_error_handler(request: Request, exc: AutopilotError):
        if isinstance(exc, AuthorizationError):
            logger.warning(
                "api_access_denied",
                extra={"path": request.url.path, "method": request.method, "reason": exc.message},
            )
        return autopilot_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return error_response(_format_validation_errors(exc), 422, "VALIDATION_ERROR")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        code = _HTTP_STATUS_CODES.get(exc.status_code, "INTERNAL_ERROR")
        message = "Not found" if exc.status_code == 404 else str(exc.detail)
        return error_response(message, exc.status_code, code)
