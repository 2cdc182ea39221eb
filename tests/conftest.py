"""Shared test fixtures."""

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from wonderful_gateway.config import Settings
from wonderful_gateway.models.order import Base, Order, OrderNote
from wonderful_gateway.providers.mock_provider import MockPaymentProvider
from wonderful_gateway.providers.wonderful import WonderfulPaymentsProvider

MERCHANT_KEY = "mk_test_4f9a2c7e1b3d5f8a0c2e4f6a8b0d2e4f"
SITE_URL = "https://shop.example.co.uk"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        merchant_key=MERCHANT_KEY,
        api_endpoint="https://api.wonderful-one.test",
        hosted_ui_url="https://wonderful-one.test",
        site_url=SITE_URL,
        currency="GBP",
    )


@pytest_asyncio.fixture
async def db_session():
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def seeded_session(db_session: AsyncSession):
    """Database session pre-loaded with sample orders."""
    orders = [
        Order(id=1042, total=19.99, billing_email="sam.jones@example.co.uk", customer_ip="203.0.113.10",
              customer_user_agent="Mozilla/5.0 (iPhone)", status="pending"),
        Order(id=1043, total=120.00, billing_email="priya.shah@example.co.uk", customer_ip="203.0.113.11",
              customer_user_agent="Mozilla/5.0 (Windows NT 10.0)", status="pending"),
        Order(id=1046, total=250.00, billing_email="owen.price@example.co.uk", customer_ip="203.0.113.14",
              customer_user_agent="Mozilla/5.0 (X11)", status="processing", transaction_id="WOO-Q7X2LM-1046"),
    ]
    for order in orders:
        db_session.add(order)
    await db_session.commit()

    yield db_session


@pytest.fixture
def mock_provider() -> MockPaymentProvider:
    return MockPaymentProvider(status="completed", latency_ms=0)


class RecordingTransport:
    """httpx handler that records requests and replies from a route table."""

    def __init__(self, routes: dict[str, httpx.Response | Exception] | None = None):
        self.routes = routes or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.routes.get(request.url.path)
        if reply is None:
            return httpx.Response(404, json={"message": "not found"})
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest_asyncio.fixture
async def live_provider(transport: RecordingTransport):
    """Live provider wired to an in-process fake of the Wonderful Payments API."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(transport)) as client:
        yield WonderfulPaymentsProvider(
            merchant_key=MERCHANT_KEY,
            endpoint="https://api.wonderful-one.test",
            http_client=client,
        )


async def order_notes(session: AsyncSession, order_id: int) -> list[str]:
    result = await session.execute(
        select(OrderNote.note).where(OrderNote.order_id == order_id).order_by(OrderNote.id.asc())
    )
    return list(result.scalars().all())


@pytest.fixture
def notes_of():
    """Async helper returning an order's notes, oldest first."""
    return order_notes
