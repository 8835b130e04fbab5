"""CJ Dropshipping client for supplier catalogue, freight, orders and tracking.

CJ answers every call with ``{"code": 200, "message": ..., "data": ...}``;
any other code is surfaced as :class:`UpstreamError`. Access tokens are
rate limited to one request per 300 seconds, so they are cached in the
``api_token_cache`` table and shared by the API and the worker.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from autopilot.errors.exceptions import UpstreamError
from autopilot.repositories.token_cache_repo import TokenCacheRepository

logger = logging.getLogger(__name__)

_TOKEN_CACHE_ID = "cj_api"
_SERVICE = "CJ"


class CJClient:
    """Thin async wrapper over the CJ Dropshipping REST API v2."""

    def __init__(
        self,
        base_url: str,
        email: str,
        api_key: str,
        session_factory,
        token_ttl: timedelta = timedelta(hours=23),
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.email = email
        self.api_key = api_key
        self.session_factory = session_factory
        self.token_ttl = token_ttl
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings, session_factory) -> CJClient:
        return cls(
            base_url=settings.cj_base_url,
            email=settings.cj_email,
            api_key=settings.cj_api_key,
            session_factory=session_factory,
            token_ttl=timedelta(hours=settings.cj_token_ttl_hours),
            timeout=settings.cj_timeout_seconds,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def get_access_token(self) -> str:
        """Return a cached access token, fetching a new one when expired."""
        now = datetime.now(timezone.utc)
        async with self.session_factory() as session:
            cached = await TokenCacheRepository(session).get_valid(_TOKEN_CACHE_ID, now)
        if cached:
            return cached

        if not self.email or not self.api_key:
            raise UpstreamError(_SERVICE, "CJ email or API key not configured")

        data = await self._send(
            "POST",
            "/authentication/getAccessToken",
            json={"email": self.email, "password": self.api_key},
            authenticated=False,
        )
        token = (data or {}).get("accessToken")
        if not token:
            raise UpstreamError(_SERVICE, "No accessToken in CJ response")

        async with self.session_factory() as session:
            await TokenCacheRepository(session).store(_TOKEN_CACHE_ID, token, now + self.token_ttl)
            await session.commit()
        logger.info("CJ access token refreshed")
        return token

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json: dict | None = None,
        authenticated: bool = True,
    ) -> Any:
        headers = {}
        if authenticated:
            headers["CJ-Access-Token"] = await self.get_access_token()

        try:
            async with self._client() as client:
                response = await client.request(method, path, params=params, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("CJ request %s %s failed: %s", method, path, exc)
            raise UpstreamError(_SERVICE, f"request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamError(_SERVICE, f"invalid JSON (HTTP {response.status_code})") from exc

        if response.status_code >= 400 or body.get("code") != 200:
            message = body.get("message") or f"HTTP {response.status_code}"
            logger.warning("CJ %s %s returned code=%s: %s", method, path, body.get("code"), message)
            raise UpstreamError(_SERVICE, message)
        return body.get("data")

    # ------------------------------------------------------------------
    # Catalogue
    # ------------------------------------------------------------------

    async def search_products(self, query: str, page: int = 1, page_size: int = 20) -> dict:
        data = await self._send(
            "GET",
            "/product/list",
            params={"productNameEn": query, "pageNum": page, "pageSize": page_size},
        ) or {}
        return {"products": data.get("list") or [], "total": data.get("total") or 0}

    async def get_product(self, product_id: str) -> dict:
        return await self._send("GET", "/product/query", params={"pid": product_id}) or {}

    async def get_variant(self, variant_id: str) -> dict:
        return await self._send("POST", "/product/variant/query", json={"vid": variant_id}) or {}

    async def calculate_freight(
        self,
        variant_id: str,
        quantity: int,
        end_country_code: str,
        start_country_code: str = "CN",
    ) -> list[dict]:
        """Return shipping options sorted cheapest first."""
        data = await self._send(
            "POST",
            "/logistic/freightCalculate",
            json={
                "startCountryCode": start_country_code,
                "endCountryCode": end_country_code,
                "products": [{"vid": variant_id, "quantity": quantity}],
            },
        ) or []
        return sorted(data, key=lambda option: float(option.get("logisticPrice") or 0))

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    async def create_order(self, payload: dict) -> str:
        """Create a supplier order and return its CJ order id."""
        data = await self._send("POST", "/shopping/order/createOrderV2", json=payload) or {}
        order_id = data.get("orderId") or data.get("orderNum") or ""
        if not order_id:
            raise UpstreamError(_SERVICE, "order created without an order id")
        return order_id

    async def get_order_detail(self, cj_order_id: str) -> dict:
        return await self._send("GET", "/shopping/order/getOrderDetail", params={"orderId": cj_order_id}) or {}
