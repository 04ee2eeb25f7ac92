# tests/conftest.py
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pos_bridge import models  # noqa: F401  registers all models
from pos_bridge.core.config import Settings
from pos_bridge.database import Base
from pos_bridge.models import Customer, Order, OrderLine, Product, Variant
from pos_bridge.services.entity_store import EntityStore
from pos_bridge.services.sync_log import SyncLog
from tests.mocks.mock_epos import MockEposClient

# In-memory database shared by every connection of the test engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def settings(tmp_path):
    """Provide test settings"""
    return Settings(
        DATABASE_URL=TEST_DATABASE_URL,
        EPOS_API_TOKEN="test-token",
        EPOS_LOG_FILE=str(tmp_path / "logs" / "eposnow.log"),
        EPOS_LOCATION_ID=14340,
        WEBHOOK_SECRET="",
        BASIC_AUTH_USERNAME="admin",
        BASIC_AUTH_PASSWORD="secret",
        FULL_SYNC_SCHEDULE_ENABLED=False,
    )


@pytest.fixture
async def test_engine():
    """Create the test database engine with all tables (function-scoped)."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine):
    """Provide a database session for tests"""
    async_session_local = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session_local() as session:
        yield session
        await session.rollback()


@pytest.fixture
def store(db_session):
    return EntityStore(db_session)


@pytest.fixture
def sync_log(settings):
    log = SyncLog(settings.EPOS_LOG_FILE).open()
    yield log
    log.close()


@pytest.fixture
def read_sync_log(settings):
    """Return the sync log lines written so far"""
    def _read():
        from pathlib import Path
        path = Path(settings.EPOS_LOG_FILE)
        if not path.exists():
            return []
        return path.read_text(encoding="utf-8").splitlines()
    return _read


@pytest.fixture
def mock_epos_client(sync_log):
    """Provide an EposClient answering from queued responses"""
    return MockEposClient(sync_log)


@pytest.fixture
def make_product(db_session):
    """Create a product with variants of the given weights, in that order"""
    async def _make(name="Basmati rice", code="1001", pos_master_id="5001", weights=(1, 2, 5)):
        product = Product(
            name=name,
            code=code,
            pos_master_id=pos_master_id,
            variants=[Variant(weight=weight, position=index) for index, weight in enumerate(weights)]
        )
        db_session.add(product)
        await db_session.commit()
        return product
    return _make


@pytest.fixture
def sample_customer_data():
    """Provide sample customer data for tests"""
    return {
        "public_name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "+44 7700 900123",
        "street": "1 Market Street",
        "post_code": "AB1 2CD",
        "city": "Leeds",
    }


@pytest.fixture
def make_order(db_session, make_product, sample_customer_data):
    """Create an order for one line of the first variant of a new product"""
    async def _make(payment="classic", customer_pos_id=None, with_customer=True, **order_fields):
        product = await make_product()
        customer = None
        if with_customer:
            customer = Customer(**sample_customer_data, pos_id=customer_pos_id)
        order = Order(
            customer=customer,
            payment=payment,
            delivery_name="Courier",
            delivery_cost=order_fields.pop("delivery_cost", 5.0),
            total_cost=order_fields.pop("total_cost", 35.0),
            lines=[OrderLine(variant=product.variants[1], price=10.0, weight=2.0, amount=3)],
            **order_fields
        )
        db_session.add(order)
        await db_session.commit()
        return order
    return _make


@pytest.fixture
def test_client(settings, sync_log):
    """Provide a test client with overridden settings and sync log"""
    from fastapi.testclient import TestClient

    from pos_bridge.core.config import get_settings
    from pos_bridge.dependencies import get_sync_log
    from pos_bridge.main import app

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_sync_log] = lambda: sync_log
    yield TestClient(app)
    app.dependency_overrides.clear()
