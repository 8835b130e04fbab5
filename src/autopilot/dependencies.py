"""FastAPI dependency injection providers."""

from collections.abc import AsyncGenerator

from fastapi import Request

from autopilot.errors.exceptions import AuthenticationError
from autopilot.services.auth_gate import AuthContext


async def get_db(request: Request) -> AsyncGenerator:
    """Yield a database session from the app's session factory."""
    session_factory = request.app.state.db_session_factory
    async with session_factory() as session:
        yield session


def get_auth(request: Request) -> AuthContext:
    """Return the API key context resolved by the gateway middleware."""
    auth = getattr(request.state, "auth", None)
    if auth is None:
        raise AuthenticationError("Authentication required")
    return auth


def get_cj(request: Request):
    return request.app.state.cj


def get_ebay(request: Request):
    return request.app.state.ebay


def get_pricing(request: Request):
    return request.app.state.pricing
