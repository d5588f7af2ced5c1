import pytest_asyncio
from decimal import Decimal
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.depends import get_session
import src.domain  # noqa: F401  registers the tables on SQLModel.metadata
from src.domain.price_rule import PriceRule
from src.domain.product import Product
from src.domain.service import Service
from src.domain.species import Species


class IntegrationConfig(ApplicationConfig):
    AUTH_DISABLED = False
    ENABLE_SENTRY = 0
    ENABLE_LOGGING_MIDDLEWARE = False


@pytest_asyncio.fixture(scope="function")
async def engine():
    """Create test database engine on an in-memory SQLite database"""
    engine = create_async_engine(
        ApplicationConfig.TEST_DB_URI,
        echo=False,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Create a new database session for each test"""
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def catalog(db_session):
    """
    Clinic catalog: species Dog (1) and Cat (2), service Consultation (3),
    product Vaccine (9, 25.00) and the consultation price list
    """
    db_session.add_all([
        Species(id=1, name="Dog"),
        Species(id=2, name="Cat"),
        Service(id=3, name="Consultation", is_active=True),
        Product(id=9, name="Vaccine", unit_price=Decimal("25.00"), stock_quantity=100, is_active=True),
    ])
    await db_session.commit()

    db_session.add_all([
        PriceRule(service_id=3, amount=Decimal("45.00"), currency="EUR"),
        PriceRule(
            service_id=3,
            species_id=1,
            weight_min_kg=Decimal("10.10"),
            weight_max_kg=Decimal("25.00"),
            amount=Decimal("240.00"),
            currency="EUR",
        ),
    ])
    await db_session.commit()
    return db_session


@pytest_asyncio.fixture
def staff_headers():
    return {"X-User-Id": "dr-vet", "X-User-Roles": "doctor"}


@pytest_asyncio.fixture
def admin_headers():
    return {"X-User-Id": "admin-1", "X-User-Roles": "admin"}


@pytest_asyncio.fixture
async def client(db_session):
    """Create test client with database session override"""
    from src.api.app import create_app

    app = create_app(IntegrationConfig)

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    # Use ASGITransport for httpx AsyncClient
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
