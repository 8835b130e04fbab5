"""Strip deployment prefixes so routes match on their ``/v1/...`` suffix."""

import re

from starlette.types import ASGIApp, Receive, Scope, Send

# /functions/v1/api/v1/orders -> /v1/orders, /api/v1/health -> /v1/health
_API_V1 = re.compile(r"/api(/v1(?:/.*)?)$")
_V1 = re.compile(r"(/v1(?:/.*)?)$")


def normalize_path(path: str) -> str:
    match = _API_V1.search(path) or _V1.search(path)
    if match:
        return match.group(1)
    return re.sub(r"^/api(?=/|$)", "", path) or "/"


class PathPrefixMiddleware:
    """Pure ASGI middleware; rewrites ``scope["path"]`` before routing."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            path = normalize_path(scope["path"])
            if path != scope["path"]:
                scope = dict(scope)
                scope["path"] = path
                scope["raw_path"] = path.encode("utf-8")
        await self.app(scope, receive, send)
