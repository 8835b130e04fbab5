"""eBay Trading client: XML requests and response parsing."""

from datetime import datetime, timezone
from xml.etree import ElementTree as ET

import httpx
import pytest

from autopilot.errors.exceptions import UpstreamError
from autopilot.integrations.ebay import EbayTradingClient, parse_orders

GET_ORDERS_RESPONSE = """<?xml version="1.0" encoding="UTF-8"?>
<GetOrdersResponse xmlns="urn:ebay:apis:eBLBaseComponents">
  <Ack>Success</Ack>
  <OrderArray>
    <Order>
      <OrderID>12-34567-89012</OrderID>
      <OrderStatus>Completed</OrderStatus>
      <Total currencyID="EUR">29.98</Total>
      <BuyerUserID>buyer42</BuyerUserID>
      <ShippingAddress>
        <Name>Erika Mustermann</Name>
        <Street1>Hauptstr. 1</Street1>
        <CityName>Berlin</CityName>
        <PostalCode>10115</PostalCode>
        <Country>DE</Country>
      </ShippingAddress>
      <TransactionArray>
        <Transaction>
          <OrderLineItemID>L1</OrderLineItemID>
          <Item><ItemID>110001</ItemID><SKU>LAMP-W</SKU><Title>LED Desk Lamp</Title></Item>
          <QuantityPurchased>2</QuantityPurchased>
          <TransactionPrice currencyID="EUR">14.99</TransactionPrice>
        </Transaction>
      </TransactionArray>
    </Order>
  </OrderArray>
</GetOrdersResponse>"""

FAILURE_RESPONSE = """<?xml version="1.0" encoding="UTF-8"?>
<CompleteSaleResponse xmlns="urn:ebay:apis:eBLBaseComponents">
  <Ack>Failure</Ack>
  <Errors><ShortMessage>Invalid order</ShortMessage><LongMessage>The order ID is invalid.</LongMessage></Errors>
</CompleteSaleResponse>"""


def _client(handler) -> EbayTradingClient:
    return EbayTradingClient(
        api_base_url="https://ebay.test",
        oauth_url="https://ebay.test/identity/v1/oauth2/token",
        client_id="cid",
        client_secret="csecret",
        refresh_token="rtoken",
        transport=httpx.MockTransport(handler),
    )


def _with_oauth(api_handler, oauth_calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/oauth2/token"):
            if oauth_calls is not None:
                oauth_calls.append(request)
            return httpx.Response(200, json={"access_token": "v^1.1#token", "expires_in": 7200})
        return api_handler(request)

    return handler


def test_parse_orders():
    orders = parse_orders(ET.fromstring(GET_ORDERS_RESPONSE))
    assert orders == [{
        "orderId": "12-34567-89012",
        "orderStatus": "Completed",
        "total": 29.98,
        "buyerUserId": "buyer42",
        "address": {
            "name": "Erika Mustermann",
            "street1": "Hauptstr. 1",
            "street2": "",
            "city": "Berlin",
            "state": "",
            "postalCode": "10115",
            "country": "DE",
            "phone": "",
        },
        "items": [{
            "lineItemId": "L1",
            "itemId": "110001",
            "sku": "LAMP-W",
            "title": "LED Desk Lamp",
            "qty": 2,
            "price": 14.99,
        }],
    }]


@pytest.mark.asyncio
async def test_get_orders_sends_trading_headers():
    seen = []
    oauth_calls = []

    def api(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=GET_ORDERS_RESPONSE)

    client = _client(_with_oauth(api, oauth_calls))
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    orders = await client.get_orders(now, now)
    await client.get_orders(now, now)

    assert orders[0]["orderId"] == "12-34567-89012"
    assert len(oauth_calls) == 1
    request = seen[0]
    assert request.url.path == "/ws/api.dll"
    assert request.headers["X-EBAY-API-CALL-NAME"] == "GetOrders"
    assert request.headers["X-EBAY-API-SITEID"] == "77"
    assert request.headers["X-EBAY-API-IAF-TOKEN"] == "v^1.1#token"
    assert b"<OrderRole>Seller</OrderRole>" in request.content


@pytest.mark.asyncio
async def test_ack_failure_raises_upstream_error():
    client = _client(_with_oauth(lambda request: httpx.Response(200, text=FAILURE_RESPONSE)))
    with pytest.raises(UpstreamError, match="The order ID is invalid."):
        await client.complete_sale("bad", "DHL", "LX1")


@pytest.mark.asyncio
async def test_complete_sale_escapes_values():
    seen = []

    def api(request: httpx.Request) -> httpx.Response:
        seen.append(request.content.decode())
        return httpx.Response(200, text='<CompleteSaleResponse xmlns="urn:ebay:apis:eBLBaseComponents"><Ack>Success</Ack></CompleteSaleResponse>')

    await _client(_with_oauth(api)).complete_sale("12-1", "DHL & Co", "LX<1>")

    assert "<ShippingCarrierUsed>DHL &amp; Co</ShippingCarrierUsed>" in seen[0]
    assert "<ShipmentTrackingNumber>LX&lt;1&gt;</ShipmentTrackingNumber>" in seen[0]


@pytest.mark.asyncio
async def test_add_fixed_price_item_returns_item_id():
    def api(request: httpx.Request) -> httpx.Response:
        body = request.content.decode()
        assert "<![CDATA[<p>Lamp</p>]]>" in body
        return httpx.Response(
            200,
            text='<AddFixedPriceItemResponse xmlns="urn:ebay:apis:eBLBaseComponents">'
                 "<Ack>Warning</Ack><ItemID>110099</ItemID></AddFixedPriceItemResponse>",
        )

    item_id = await _client(_with_oauth(api)).add_fixed_price_item(
        sku="V1", title="Lamp", description="<p>Lamp</p>", price=19.99,
        quantity=1, category_id="175673", images=["https://img.example/a.jpg"],
    )
    assert item_id == "110099"


@pytest.mark.asyncio
async def test_missing_credentials():
    client = EbayTradingClient("https://ebay.test", "https://ebay.test/token", "", "", "")
    with pytest.raises(UpstreamError, match="not configured"):
        await client.get_access_token()
