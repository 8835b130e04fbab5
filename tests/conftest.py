"""Shared test fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from autopilot.db.base import Base
# Import all models to register with Base.metadata
import autopilot.db.models  # noqa: F401
from autopilot.db.models.order import OrderItemRow, OrderRow
from autopilot.errors.exceptions import UpstreamError
from autopilot.repositories.api_key_repo import ApiKeyRepository
from autopilot.services.auth_gate import generate_api_key, hash_api_key
from autopilot.services.id_generator import generate_id
from autopilot.services.pricing import PricingConfig
from autopilot.workers.base import WorkerServices
from autopilot.workers.runner import JobRunner

SELLER_ID = "bot-1"


class FakeCJ:
    """In-memory stand-in for :class:`CJClient` recording every call."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.created_orders: list[dict] = []
        self.tracking: dict[str, dict] = {}
        self.fail_create_order = 0
        self.variant = {
            "productName": "LED Desk Lamp",
            "description": "Dimmable lamp",
            "sellPrice": 10.0,
            "productImage": "https://img.example/lamp.jpg",
            "variantName": "White",
        }

    async def search_products(self, query, page=1, page_size=20):
        self.calls.append(("search_products", query, page, page_size))
        return {"products": [{"pid": "P1", "productNameEn": query}], "total": 1}

    async def get_product(self, product_id):
        self.calls.append(("get_product", product_id))
        return {"pid": product_id, "productNameEn": "LED Desk Lamp"}

    async def get_variant(self, variant_id):
        self.calls.append(("get_variant", variant_id))
        return dict(self.variant, vid=variant_id)

    async def calculate_freight(self, variant_id, quantity, end_country_code, start_country_code="CN"):
        self.calls.append(("calculate_freight", variant_id, quantity, end_country_code, start_country_code))
        return [
            {"logisticName": "CJPacket", "logisticPrice": 2.5},
            {"logisticName": "DHL", "logisticPrice": 9.0},
        ]

    async def create_order(self, payload):
        self.calls.append(("create_order", payload))
        if self.fail_create_order:
            self.fail_create_order -= 1
            raise UpstreamError("CJ", "supplier unavailable")
        self.created_orders.append(payload)
        return f"CJ{len(self.created_orders):04d}"

    async def get_order_detail(self, cj_order_id):
        self.calls.append(("get_order_detail", cj_order_id))
        return self.tracking.get(cj_order_id, {})


class FakeEbay:
    """In-memory stand-in for :class:`EbayTradingClient`."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.orders: list[dict] = []
        self.completed: list[tuple] = []
        self.items: dict[str, dict] = {}

    async def get_orders(self, create_time_from, create_time_to):
        self.calls.append(("get_orders", create_time_from, create_time_to))
        return list(self.orders)

    async def complete_sale(self, order_id, carrier, tracking_number):
        self.calls.append(("complete_sale", order_id, carrier, tracking_number))
        self.completed.append((order_id, carrier, tracking_number))

    async def add_fixed_price_item(self, *, sku, title, description, price, quantity, category_id, images):
        self.calls.append(("add_fixed_price_item", sku))
        item_id = f"11{len(self.items) + 1:010d}"
        self.items[item_id] = {"sku": sku, "title": title, "price": price, "quantity": quantity,
                               "category_id": category_id, "images": images}
        return item_id

    async def revise_fixed_price_item(self, item_id, price, quantity):
        self.calls.append(("revise_fixed_price_item", item_id, price, quantity))
        self.items[item_id].update(price=price, quantity=quantity)


def make_remote_order(order_id: str = "12-34567-89012", sku: str = "LAMP-W", status: str = "Active") -> dict:
    return {
        "orderId": order_id,
        "orderStatus": status,
        "total": 29.99,
        "buyerUserId": "buyer42",
        "address": {
            "name": "Erika Mustermann",
            "street1": "Hauptstr. 1",
            "street2": "",
            "city": "Berlin",
            "state": "BE",
            "postalCode": "10115",
            "country": "DE",
            "phone": "+49301234567",
        },
        "items": [{"lineItemId": "L1", "itemId": "I1", "sku": sku, "title": "LED Desk Lamp", "qty": 2, "price": 14.99}],
    }


@pytest.fixture
async def db_engine(tmp_path):
    """Create a file-backed SQLite async engine for testing.

    A file gives every session its own connection, so the audit background
    task and the route session never share one transaction.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_cj():
    return FakeCJ()


@pytest.fixture
def fake_ebay():
    return FakeEbay()


@pytest.fixture
def services(fake_cj, fake_ebay):
    return WorkerServices(cj=fake_cj, ebay=fake_ebay)


@pytest.fixture
def clock():
    """Controllable clock for the job runner; advance with ``clock.now = ...``.

    Starts a few seconds ahead so jobs enqueued during the test are already due.
    """

    class _Clock:
        now = datetime.now(timezone.utc) + timedelta(seconds=5)

        def __call__(self):
            return self.now

    return _Clock()


@pytest.fixture
def job_runner(session_factory, services, clock):
    return JobRunner(session_factory, services, clock=clock)


@pytest.fixture
def app(db_engine, session_factory, fake_cj, fake_ebay, job_runner):
    """Create a test application instance with in-memory DB and fake upstreams."""
    from autopilot.main import create_app

    _app = create_app()
    _app.state.db_engine = db_engine
    _app.state.db_session_factory = session_factory
    _app.state.cj = fake_cj
    _app.state.ebay = fake_ebay
    _app.state.pricing = PricingConfig()
    _app.state.job_runner = job_runner
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def create_api_key(session_factory, seller_id: str = SELLER_ID, is_active: bool = True) -> tuple[str, str]:
    """Insert an API key and return ``(key_id, raw_key)``."""
    raw_key = generate_api_key()
    async with session_factory() as session:
        row = await ApiKeyRepository(session).create(
            key_id=generate_id("key_"),
            seller_id=seller_id,
            name="test",
            key_hash=hash_api_key(raw_key),
            is_active=is_active,
        )
        await session.commit()
    return row.key_id, raw_key


@pytest.fixture
async def api_key(session_factory):
    return await create_api_key(session_factory)


@pytest.fixture
def auth_headers(api_key):
    return {"X-API-Key": api_key[1]}


@pytest.fixture
def seed_order(session_factory):
    """Factory inserting a local order for ``bot-1``; returns the order row."""

    async def _seed(order_id: str = "12-34567-89012", sku: str = "LAMP-W", seller_id: str = SELLER_ID, **fields):
        async with session_factory() as session:
            order = OrderRow(
                order_pk=generate_id("ord_"),
                seller_id=seller_id,
                order_id=order_id,
                order_status=fields.pop("order_status", "pending"),
                total_price=29.99,
                buyer_json={"name": "buyer42", "address": make_remote_order()["address"]},
                needs_fulfillment=fields.pop("needs_fulfillment", True),
                items=[
                    OrderItemRow(
                        item_id=generate_id("itm_"),
                        seller_id=seller_id,
                        line_item_id="L1",
                        sku=sku,
                        title="LED Desk Lamp",
                        quantity=2,
                        price=14.99,
                    )
                ],
                shipments=[],
                **fields,
            )
            session.add(order)
            await session.commit()
            return order

    return _seed
