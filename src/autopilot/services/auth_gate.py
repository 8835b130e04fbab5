"""API key authentication and per-key fixed-window rate limiting."""

import hashlib
import logging
import secrets
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone

from autopilot.errors.exceptions import AuthenticationError, AuthorizationError, RateLimitedError
from autopilot.repositories.api_key_repo import ApiKeyRepository, RateLimitRepository

logger = logging.getLogger(__name__)

_MISSING_KEY_MESSAGE = "Missing API key. Use X-API-Key header or Authorization: Bearer <api-key>"


@dataclass(frozen=True)
class AuthContext:
    """Identity resolved from an API key, consumed by every handler."""

    seller_id: str
    api_key_id: str


def hash_api_key(raw_key: str) -> str:
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


def generate_api_key() -> str:
    """Return a new raw key. URL-safe base64 never contains '.', so it cannot pass for a JWT."""
    return f"ak_{secrets.token_urlsafe(32)}"


def extract_credential(headers: Mapping[str, str]) -> str | None:
    """Pull the raw API key from ``X-API-Key`` or ``Authorization: Bearer``.

    Dotted bearer values are dashboard session JWTs, not API keys, and are ignored.
    """
    api_key = headers.get("x-api-key")
    if api_key:
        return api_key.strip() or None

    auth_header = headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        if token and "." not in token:
            return token
    return None


def window_start(now: datetime, window_seconds: int) -> datetime:
    """Truncate ``now`` to the start of its fixed rate-limit window."""
    epoch = int(now.timestamp())
    return datetime.fromtimestamp(epoch - epoch % window_seconds, tz=timezone.utc)


class AuthGate:
    """Resolves a request's API key to an :class:`AuthContext` or raises."""

    def __init__(self, session_factory, max_requests: int = 60, window_seconds: int = 60):
        self.session_factory = session_factory
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    async def authenticate(self, headers: Mapping[str, str], now: datetime | None = None) -> AuthContext:
        """Authenticate, count the request against the key's window and touch last_used_at.

        Raises:
            AuthenticationError: no credential, or no key with that hash.
            AuthorizationError: the key exists but is deactivated.
            RateLimitedError: the current window is full; nothing is written.
        """
        raw_key = extract_credential(headers)
        if not raw_key:
            raise AuthenticationError(_MISSING_KEY_MESSAGE)

        now = now or datetime.now(timezone.utc)
        async with self.session_factory() as session:
            api_key = await ApiKeyRepository(session).get_by_hash(hash_api_key(raw_key))
            if not api_key:
                raise AuthenticationError("Invalid API key")
            if not api_key.is_active:
                raise AuthorizationError("API key is deactivated")

            # Rollback expires loaded rows, so keep plain values
            key_id, seller_id = api_key.key_id, api_key.seller_id
            count = await RateLimitRepository(session).try_consume(
                key_id,
                window_start(now, self.window_seconds),
                self.max_requests,
            )
            if count is None:
                await session.rollback()
                logger.info("Rate limit reached for api key %s", key_id)
                raise RateLimitedError(self.max_requests, self.window_seconds)

            await ApiKeyRepository(session).touch_last_used(key_id, now)
            await session.commit()
            return AuthContext(seller_id=seller_id, api_key_id=key_id)
