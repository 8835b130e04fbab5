"""API gateway middleware: auth gate, last-resort error handling and audit logging."""

import logging
import time

from starlette.background import BackgroundTask, BackgroundTasks
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from autopilot.config import settings
from autopilot.errors.exceptions import AutopilotError
from autopilot.errors.handlers import autopilot_error_response, error_response
from autopilot.logging_config import bind_request_context
from autopilot.services.audit import write_audit_entry
from autopilot.services.auth_gate import AuthGate

logger = logging.getLogger(__name__)

# (method, path) pairs that skip the auth gate
_PUBLIC_ROUTES = {
    ("GET", "/v1/health"),
}


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    cf_ip = request.headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip
    return request.client.host if request.client else "unknown"


class GatewayMiddleware(BaseHTTPMiddleware):
    """Authenticate, dispatch and audit every request.

    Auth failures short-circuit before any handler runs. Exceptions that
    escape the route layer become a generic 500. Exactly one audit entry is
    written per request, as a background task after the response is sent.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        auth = None

        if (request.method, request.url.path) in _PUBLIC_ROUTES:
            response = await self._call_route(request, call_next)
        else:
            gate = AuthGate(
                request.app.state.db_session_factory,
                max_requests=settings.rate_limit_max_requests,
                window_seconds=settings.rate_limit_window_seconds,
            )
            try:
                auth = await gate.authenticate(request.headers)
            except AutopilotError as exc:
                logger.info("Auth rejected %s %s: %s", request.method, request.url.path, exc.code)
                response = autopilot_error_response(exc)
            except Exception:
                logger.exception("Auth gate failed on %s %s", request.method, request.url.path)
                response = error_response("Internal server error", 500, "INTERNAL_ERROR")
            else:
                request.state.auth = auth
                bind_request_context(
                    getattr(request.state, "trace_id", "unknown"),
                    seller_id=auth.seller_id,
                    api_key_id=auth.api_key_id,
                )
                response = await self._call_route(request, call_next)

        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        audit = BackgroundTask(
            write_audit_entry,
            request.app.state.db_session_factory,
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=int((time.perf_counter() - started) * 1000),
            ip=_client_ip(request),
            api_key_id=auth.api_key_id if auth else None,
            seller_id=auth.seller_id if auth else None,
        )
        if response.background is None:
            response.background = audit
        else:
            tasks = BackgroundTasks()
            tasks.add_task(response.background)
            tasks.add_task(audit)
            response.background = tasks
        return response

    async def _call_route(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return error_response("Internal server error", 500, "INTERNAL_ERROR")
