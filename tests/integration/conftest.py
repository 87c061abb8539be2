import hashlib
import hmac
import json
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers all tables on SQLModel.metadata
from src.adapter.services.lemon_squeezy import LemonSqueezyPaymentProvider
from src.adapter.services.notification_service import LoggingNotificationService
from src.depends import get_session

WEBHOOK_SECRET = "whsec_integration"

TEST_PACKAGES = {
    "starter": {"name": "Starter", "credits": 50, "price": "4.99", "variant_id": "111", "badge": None},
    "growth": {"name": "Growth", "credits": 200, "price": "14.99", "variant_id": "222", "badge": "Best Value"},
    "pro": {"name": "Pro", "credits": 500, "price": "29.99", "variant_id": "333", "badge": None},
}


class IntegrationConfig:
    DB_URI = "sqlite+aiosqlite://"
    CORS_ORIGINS = []
    CORS_ALLOW_CREDENTIALS = True
    LOG_LEVEL = "INFO"
    ENABLE_LOGGING_MIDDLEWARE = True
    ENABLE_SENTRY = 0
    DSN_SENTRY = ""
    SENTRY_ENVIRONMENT = "test"
    TRIAL_CREDITS = 25
    TRANSACTIONS_MAX_PAGE_SIZE = 100
    OWNER_UNLIMITED = True
    QUOTA_ACTION_TIMEOUT_SECONDS = 5.0
    LEMON_SQUEEZY_API_KEY = "key_test"
    LEMON_SQUEEZY_STORE_ID = "7"
    LEMON_SQUEEZY_WEBHOOK_SECRET = WEBHOOK_SECRET
    LEMON_SQUEEZY_API_URL = "https://api.lemonsqueezy.com"
    CREDIT_PACKAGES = TEST_PACKAGES
    NOTIFICATION_WEBHOOK_URL = None
    REFERRAL_REWARD_TYPE = "ai_access_extension"
    REFERRAL_ACCESS_EXTENSION_DAYS = 365
    REFERRAL_REWARD_CREDITS = 50


def sign(body: bytes) -> str:
    return hmac.new(WEBHOOK_SECRET.encode(), body, hashlib.sha256).hexdigest()


def order_body(event_name: str, order_id: str, user_id=1, variant_id="111", total=499) -> bytes:
    return json.dumps(
        {
            "meta": {"event_name": event_name, "custom_data": {"user_id": str(user_id)}},
            "data": {
                "type": "orders",
                "id": order_id,
                "attributes": {
                    "total": total,
                    "currency": "USD",
                    "first_order_item": {"variant_id": variant_id, "product_id": "9"},
                },
            },
        }
    ).encode()


@pytest_asyncio.fixture(scope="function")
async def engine():
    """In-memory SQLite engine shared by all sessions of one test"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
def payment_provider():
    return LemonSqueezyPaymentProvider.from_config(IntegrationConfig)


@pytest_asyncio.fixture
async def client(session_factory, payment_provider):
    """Create test client with database session override"""
    from src.api.app import create_app

    app = create_app(
        IntegrationConfig,
        payment_provider=payment_provider,
        notification_service=LoggingNotificationService(),
    )

    # Each request gets its own session on the shared in-memory database
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
