"""eBay Trading API client for order import, shipment completion and listings."""

from __future__ import annotations

import base64
import logging
import time
from datetime import datetime
from typing import Any
from xml.etree import ElementTree as ET
from xml.sax.saxutils import escape

import httpx

from autopilot.errors.exceptions import UpstreamError

logger = logging.getLogger(__name__)

NS = {"e": "urn:ebay:apis:eBLBaseComponents"}
_SERVICE = "eBay"

# Refresh the OAuth token this many seconds before eBay says it expires
_TOKEN_EXPIRY_MARGIN = 60


def _xml_text(val: Any) -> str:
    return escape("" if val is None else str(val))


def _xml_cdata(val: Any) -> str:
    # CDATA cannot contain "]]>" safely; split if needed.
    s = "" if val is None else str(val)
    return "<![CDATA[" + s.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def _text(node: ET.Element, path: str, default: str = "") -> str:
    value = node.findtext(path, default=None, namespaces=NS)
    return value.strip() if value else default


def _to_float(value: str, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_int(value: str, default: int = 1) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_orders(root: ET.Element) -> list[dict]:
    """Flatten a GetOrders response into plain dicts."""
    orders = []
    for order in root.findall(".//e:OrderArray/e:Order", namespaces=NS):
        order_id = _text(order, "e:OrderID")
        if not order_id:
            continue
        address = order.find("e:ShippingAddress", namespaces=NS)
        addr = {}
        if address is not None:
            addr = {
                "name": _text(address, "e:Name"),
                "street1": _text(address, "e:Street1"),
                "street2": _text(address, "e:Street2"),
                "city": _text(address, "e:CityName"),
                "state": _text(address, "e:StateOrProvince"),
                "postalCode": _text(address, "e:PostalCode"),
                "country": _text(address, "e:Country"),
                "phone": _text(address, "e:Phone"),
            }
        items = []
        for tx in order.findall(".//e:TransactionArray/e:Transaction", namespaces=NS):
            items.append({
                "lineItemId": _text(tx, "e:OrderLineItemID"),
                "itemId": _text(tx, "e:Item/e:ItemID"),
                "sku": _text(tx, "e:Item/e:SKU") or _text(tx, "e:Variation/e:SKU"),
                "title": _text(tx, "e:Item/e:Title"),
                "qty": _to_int(_text(tx, "e:QuantityPurchased", "1")),
                "price": _to_float(_text(tx, "e:TransactionPrice", "0")),
            })
        orders.append({
            "orderId": order_id,
            "orderStatus": _text(order, "e:OrderStatus", "Active"),
            "total": _to_float(_text(order, "e:Total", "0")),
            "buyerUserId": _text(order, "e:BuyerUserID"),
            "address": addr,
            "items": items,
        })
    return orders


class EbayTradingClient:
    """Async client for the XML Trading API, authenticated with an OAuth IAF token."""

    def __init__(
        self,
        api_base_url: str,
        oauth_url: str,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        site_id: int = 77,
        compatibility_level: int = 1193,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_base_url = api_base_url.rstrip("/")
        self.oauth_url = oauth_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.site_id = site_id
        self.compatibility_level = compatibility_level
        self.timeout = timeout
        self._transport = transport
        self._access_token: str | None = None
        self._token_expires_at: float = 0.0

    @classmethod
    def from_settings(cls, settings) -> EbayTradingClient:
        return cls(
            api_base_url=settings.ebay_api_base_url,
            oauth_url=settings.ebay_oauth_url,
            client_id=settings.ebay_client_id,
            client_secret=settings.ebay_client_secret,
            refresh_token=settings.ebay_refresh_token,
            site_id=settings.ebay_site_id,
            compatibility_level=settings.ebay_compatibility_level,
            timeout=settings.ebay_timeout_seconds,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def get_access_token(self) -> str:
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        if not self.client_id or not self.client_secret or not self.refresh_token:
            raise UpstreamError(_SERVICE, "eBay API credentials not configured")

        credentials = base64.b64encode(f"{self.client_id}:{self.client_secret}".encode()).decode()
        try:
            async with self._client() as client:
                response = await client.post(
                    self.oauth_url,
                    headers={
                        "Authorization": f"Basic {credentials}",
                        "Content-Type": "application/x-www-form-urlencoded",
                    },
                    data={"grant_type": "refresh_token", "refresh_token": self.refresh_token},
                )
        except httpx.HTTPError as exc:
            raise UpstreamError(_SERVICE, f"OAuth request failed: {exc}") from exc

        if response.status_code != 200:
            logger.error("eBay OAuth failed [%s]: %s", response.status_code, response.text[:500])
            raise UpstreamError(_SERVICE, f"OAuth failed [{response.status_code}]")

        data = response.json()
        self._access_token = data["access_token"]
        expires_in = int(data.get("expires_in", 7200))
        self._token_expires_at = time.monotonic() + max(expires_in - _TOKEN_EXPIRY_MARGIN, 0)
        logger.info("eBay access token obtained")
        return self._access_token

    async def call(self, call_name: str, body: str) -> ET.Element:
        """POST a Trading API call and return the parsed response root.

        Raises:
            UpstreamError: on transport failure, unparseable XML or ``Ack=Failure``.
        """
        token = await self.get_access_token()
        request_xml = (
            '<?xml version="1.0" encoding="utf-8"?>'
            f'<{call_name}Request xmlns="urn:ebay:apis:eBLBaseComponents">'
            "<ErrorLanguage>en_US</ErrorLanguage>"
            "<WarningLevel>High</WarningLevel>"
            f"{body}"
            f"</{call_name}Request>"
        )
        headers = {
            "X-EBAY-API-CALL-NAME": call_name,
            "X-EBAY-API-SITEID": str(self.site_id),
            "X-EBAY-API-COMPATIBILITY-LEVEL": str(self.compatibility_level),
            "X-EBAY-API-IAF-TOKEN": token,
            "Content-Type": "text/xml; charset=utf-8",
            "Accept": "text/xml",
        }
        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.api_base_url}/ws/api.dll",
                    headers=headers,
                    content=request_xml.encode("utf-8"),
                )
        except httpx.HTTPError as exc:
            raise UpstreamError(_SERVICE, f"{call_name} request failed: {exc}") from exc

        try:
            root = ET.fromstring(response.text or "")
        except ET.ParseError as exc:
            raise UpstreamError(_SERVICE, f"{call_name} returned invalid XML (HTTP {response.status_code})") from exc

        ack = _text(root, "e:Ack")
        if ack == "Failure" or response.status_code >= 400:
            message = _text(root, ".//e:Errors/e:LongMessage") or _text(root, ".//e:Errors/e:ShortMessage")
            logger.warning("eBay %s failed: %s", call_name, message or ack)
            raise UpstreamError(_SERVICE, f"{call_name} failed: {message or ack or response.status_code}")
        return root

    # ------------------------------------------------------------------
    # Calls used by the worker
    # ------------------------------------------------------------------

    async def get_orders(self, create_time_from: datetime, create_time_to: datetime) -> list[dict]:
        root = await self.call(
            "GetOrders",
            f"<CreateTimeFrom>{create_time_from.isoformat()}</CreateTimeFrom>"
            f"<CreateTimeTo>{create_time_to.isoformat()}</CreateTimeTo>"
            "<OrderRole>Seller</OrderRole>"
            "<OrderStatus>All</OrderStatus>"
            "<Pagination><EntriesPerPage>100</EntriesPerPage><PageNumber>1</PageNumber></Pagination>",
        )
        return parse_orders(root)

    async def complete_sale(self, order_id: str, carrier: str, tracking_number: str) -> None:
        await self.call(
            "CompleteSale",
            f"<OrderID>{_xml_text(order_id)}</OrderID>"
            "<Shipment><ShipmentTrackingDetails>"
            f"<ShippingCarrierUsed>{_xml_text(carrier)}</ShippingCarrierUsed>"
            f"<ShipmentTrackingNumber>{_xml_text(tracking_number)}</ShipmentTrackingNumber>"
            "</ShipmentTrackingDetails></Shipment>"
            "<Shipped>true</Shipped>",
        )

    async def add_fixed_price_item(
        self,
        *,
        sku: str,
        title: str,
        description: str,
        price: float,
        quantity: int,
        category_id: str,
        images: list[str],
    ) -> str:
        pictures = "".join(f"<PictureURL>{_xml_text(url)}</PictureURL>" for url in images)
        root = await self.call(
            "AddFixedPriceItem",
            "<Item>"
            f"<Title>{_xml_text(title[:80])}</Title>"
            f"<Description>{_xml_cdata(description)}</Description>"
            f"<PrimaryCategory><CategoryID>{_xml_text(category_id)}</CategoryID></PrimaryCategory>"
            f'<StartPrice currencyID="EUR">{price:.2f}</StartPrice>'
            f"<Quantity>{quantity}</Quantity>"
            "<ListingDuration>GTC</ListingDuration>"
            "<ListingType>FixedPriceItem</ListingType>"
            "<Country>DE</Country><Currency>EUR</Currency><Site>Germany</Site>"
            f"<SKU>{_xml_text(sku)}</SKU>"
            f"<PictureDetails>{pictures}</PictureDetails>"
            "<ConditionID>1000</ConditionID>"
            "<DispatchTimeMax>3</DispatchTimeMax>"
            "</Item>",
        )
        item_id = _text(root, "e:ItemID")
        if not item_id:
            raise UpstreamError(_SERVICE, "AddFixedPriceItem returned no ItemID")
        return item_id

    async def revise_fixed_price_item(self, item_id: str, price: float, quantity: int) -> None:
        await self.call(
            "ReviseFixedPriceItem",
            "<Item>"
            f"<ItemID>{_xml_text(item_id)}</ItemID>"
            f"<StartPrice>{price:.2f}</StartPrice>"
            f"<Quantity>{quantity}</Quantity>"
            "</Item>",
        )
