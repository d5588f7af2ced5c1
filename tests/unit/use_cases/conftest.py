import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from src.domain.invoice_line import ItemType
from src.domain.product import Product
from src.domain.service import Service
from tests.factories import make_line


@pytest.fixture
def mock_catalog_repo():
    """Catalog with one service (3, Consultation) and one product (9, Vaccine, 25.00)"""
    repo = MagicMock()

    async def get_service(service_id):
        if service_id == 3:
            return Service(id=3, name="Consultation", is_active=True)
        return None

    async def get_product(product_id):
        if product_id == 9:
            return Product(id=9, name="Vaccine", unit_price=Decimal("25.00"), stock_quantity=10, is_active=True)
        return None

    repo.get_service = AsyncMock(side_effect=get_service)
    repo.get_product = AsyncMock(side_effect=get_product)
    repo.species_exists = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def mock_invoice_repo():
    """Mock invoice repository; update echoes the invoice with a bumped version"""
    repo = MagicMock()

    async def update(invoice):
        invoice.version += 1
        return invoice

    repo.update = AsyncMock(side_effect=update)
    repo.invoice_number_exists = AsyncMock(return_value=False)
    return repo


@pytest.fixture
def mock_invoice_line_repo():
    repo = MagicMock()
    next_id = iter(range(100, 200))

    async def create(line):
        line.id = next(next_id)
        return line

    repo.create = AsyncMock(side_effect=create)
    repo.update = AsyncMock(side_effect=lambda line: line)
    repo.delete = AsyncMock()
    return repo


@pytest.fixture
def mock_payment_repo():
    repo = MagicMock()
    repo.get_total_paid = AsyncMock(return_value=Decimal("0.00"))
    repo.count_for_invoice = AsyncMock(return_value=0)
    return repo


@pytest.fixture
def existing_lines():
    """2 x Consultation at 10.00 and 1 x Vaccine at 25.00"""
    return [
        make_line(11, ItemType.SERVICE, 3, "2", "10.00", "Consultation"),
        make_line(12, ItemType.PRODUCT, 9, "1", "25.00", "Vaccine"),
    ]
