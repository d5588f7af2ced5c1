"""Integration tests for invoicing and payments against SQLite

Runs the use cases with the SQLAlchemy repositories and unit of work.
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy.exc import IntegrityError

from src.adapter.repositories.catalog_repository import SqlAlchemyCatalogRepository
from src.adapter.repositories.invoice_line_repository import SqlAlchemyInvoiceLineRepository
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.payment_repository import SqlAlchemyPaymentRepository
from src.adapter.repositories.price_rule_repository import SqlAlchemyPriceRuleRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.errors import ConcurrencyConflictError, Conflict
from src.app.use_cases.billing import (
    CreateInvoice,
    CreateInvoiceCommandDTO,
    DeleteInvoice,
    GetInvoice,
    InvoiceLineSpecDTO,
    InvoiceLineSynchronizer,
    ItemResolver,
    RecordPayment,
    RecordPaymentCommandDTO,
    ResolvePrice,
    ResolvePriceQueryDTO,
    ReversePayment,
    UpdateInvoice,
    UpdateInvoiceCommandDTO,
)
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_line import InvoiceLine, ItemType


def synchronizer(session):
    return InvoiceLineSynchronizer(ItemResolver(SqlAlchemyCatalogRepository(session)))


async def create_invoice(session, status=InvoiceStatus.DRAFT, invoice_number=None):
    use_case = CreateInvoice(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceLineRepository(session),
        synchronizer(session),
    )
    return await use_case.execute(
        CreateInvoiceCommandDTO(
            client_id=42,
            invoice_number=invoice_number,
            issue_date=date(2025, 3, 1),
            due_date=date(2025, 3, 31),
            status=status,
            lines=[
                InvoiceLineSpecDTO(item_type=ItemType.SERVICE, item_id=3, quantity=Decimal("2"), unit_price=Decimal("10.00")),
                InvoiceLineSpecDTO(item_type=ItemType.PRODUCT, item_id=9, quantity=Decimal("1"), unit_price=Decimal("25.00")),
            ],
        )
    )


async def record_payment(session, invoice_id, amount):
    use_case = RecordPayment(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyPaymentRepository(session),
    )
    return await use_case.execute(
        RecordPaymentCommandDTO(invoice_id=invoice_id, amount=Decimal(amount), method="card")
    )


async def update_invoice(session, invoice, status, version=None):
    """Resubmit the invoice unchanged apart from status and version"""
    use_case = UpdateInvoice(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceLineRepository(session),
        SqlAlchemyPaymentRepository(session),
        synchronizer(session),
    )
    return await use_case.execute(
        UpdateInvoiceCommandDTO(
            invoice_id=invoice.invoice_id,
            client_id=invoice.client_id,
            invoice_number=invoice.invoice_number,
            issue_date=invoice.issue_date,
            due_date=invoice.due_date,
            status=status,
            version=version,
            lines=[
                InvoiceLineSpecDTO(
                    id=line.line_id,
                    item_type=line.item_type,
                    item_id=line.item_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in invoice.lines
            ],
        )
    )


async def delete_invoice(session, invoice_id):
    use_case = DeleteInvoice(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceLineRepository(session),
        SqlAlchemyPaymentRepository(session),
    )
    return await use_case.execute(invoice_id)


@pytest.mark.asyncio
class TestPriceResolution:
    async def test_dog_and_cat_consultation_prices(self, catalog):
        use_case = ResolvePrice(
            SqlAlchemyCatalogRepository(catalog), SqlAlchemyPriceRuleRepository(catalog)
        )

        dog = await use_case.execute(ResolvePriceQueryDTO(service_id=3, species_id=1, weight_kg=Decimal("15")))
        cat = await use_case.execute(ResolvePriceQueryDTO(service_id=3, species_id=2, weight_kg=Decimal("15")))

        assert dog.value.amount == Decimal("240.00")
        assert cat.value.amount == Decimal("45.00")
        assert dog.value.currency == cat.value.currency == "EUR"


@pytest.mark.asyncio
class TestInvoiceAndPaymentFlow:
    async def test_invoice_total_and_payment_status(self, catalog):
        """Lines 2 x 10.00 + 1 x 25.00 = 45.00; paying 45.00 marks the invoice paid"""
        created = await create_invoice(catalog)

        assert created.is_ok()
        invoice = created.value
        assert invoice.total_amount == Decimal("45.00")
        assert invoice.invoice_number.startswith("INV-")
        assert len(invoice.lines) == 2

        paid = await record_payment(catalog, invoice.invoice_id, "45.00")

        assert paid.value.invoice_status == "paid"
        assert paid.value.amount_paid == Decimal("45.00")

    async def test_overpayment_still_paid(self, catalog):
        invoice = (await create_invoice(catalog, status=InvoiceStatus.SENT)).value

        result = await record_payment(catalog, invoice.invoice_id, "50.00")

        assert result.value.invoice_status == "paid"
        assert result.value.amount_paid == Decimal("50.00")

    async def test_partial_then_top_up(self, catalog):
        invoice = (await create_invoice(catalog)).value

        first = await record_payment(catalog, invoice.invoice_id, "20.00")
        second = await record_payment(catalog, invoice.invoice_id, "30.00")

        assert first.value.invoice_status == "sent"
        assert second.value.invoice_status == "paid"
        assert second.value.amount_paid == Decimal("50.00")

    async def test_reversal_reopens_paid_invoice(self, catalog):
        invoice = (await create_invoice(catalog)).value
        paid = await record_payment(catalog, invoice.invoice_id, "45.00")

        reversal = await ReversePayment(
            SqlAlchemyUnitOfWork(catalog),
            SqlAlchemyInvoiceRepository(catalog),
            SqlAlchemyPaymentRepository(catalog),
        ).execute(paid.value.payment.payment_id)

        assert reversal.value.invoice_status == "sent"
        assert reversal.value.amount_paid == Decimal("0.00")

    async def test_update_synchronizes_lines(self, catalog):
        invoice = (await create_invoice(catalog)).value
        consultation_line = invoice.lines[0]

        result = await UpdateInvoice(
            SqlAlchemyUnitOfWork(catalog),
            SqlAlchemyInvoiceRepository(catalog),
            SqlAlchemyInvoiceLineRepository(catalog),
            SqlAlchemyPaymentRepository(catalog),
            synchronizer(catalog),
        ).execute(
            UpdateInvoiceCommandDTO(
                invoice_id=invoice.invoice_id,
                client_id=42,
                invoice_number=invoice.invoice_number,
                issue_date=invoice.issue_date,
                due_date=invoice.due_date,
                status=InvoiceStatus.SENT,
                version=invoice.version,
                lines=[
                    InvoiceLineSpecDTO(id=consultation_line.line_id, item_type=ItemType.SERVICE, item_id=3, quantity=Decimal("3"), unit_price=Decimal("10.00")),
                    InvoiceLineSpecDTO(item_type=ItemType.PRODUCT, item_id=9, quantity=Decimal("2")),
                ],
            )
        )

        assert result.is_ok()
        updated = result.value
        assert updated.total_amount == Decimal("80.00")
        assert updated.status == "sent"
        assert updated.version == invoice.version + 1
        assert consultation_line.line_id in [line.line_id for line in updated.lines]
        assert len(updated.lines) == 2

        stored = await SqlAlchemyInvoiceLineRepository(catalog).get_by_invoice_id(invoice.invoice_id)
        assert sum(Decimal(line.line_total) for line in stored) == Decimal("80.00")

    async def test_paid_invoice_is_locked(self, catalog):
        invoice = (await create_invoice(catalog)).value
        await record_payment(catalog, invoice.invoice_id, "45.00")

        result = await UpdateInvoice(
            SqlAlchemyUnitOfWork(catalog),
            SqlAlchemyInvoiceRepository(catalog),
            SqlAlchemyInvoiceLineRepository(catalog),
            SqlAlchemyPaymentRepository(catalog),
            synchronizer(catalog),
        ).execute(
            UpdateInvoiceCommandDTO(
                invoice_id=invoice.invoice_id,
                client_id=42,
                invoice_number=invoice.invoice_number,
                issue_date=invoice.issue_date,
                due_date=invoice.due_date,
                status=InvoiceStatus.PAID,
                lines=[
                    InvoiceLineSpecDTO(item_type=ItemType.PRODUCT, item_id=9, quantity=Decimal("1")),
                ],
            )
        )

        assert result.error.code == "INVOICE_LOCKED"
        current = await GetInvoice(
            SqlAlchemyInvoiceRepository(catalog),
            SqlAlchemyInvoiceLineRepository(catalog),
            SqlAlchemyPaymentRepository(catalog),
        ).execute(invoice.invoice_id)
        assert current.value.total_amount == Decimal("45.00")
        assert len(current.value.lines) == 2

    async def test_stale_version_is_rejected(self, catalog):
        invoice = (await create_invoice(catalog)).value
        first = await update_invoice(catalog, invoice, InvoiceStatus.SENT, version=invoice.version)

        stale = await update_invoice(catalog, invoice, InvoiceStatus.VOID, version=invoice.version)

        assert first.is_ok()
        assert isinstance(stale.error, Conflict)
        assert stale.error.code == "STALE_INVOICE"
        stored = await SqlAlchemyInvoiceRepository(catalog).get_by_id(invoice.invoice_id)
        assert stored.status == InvoiceStatus.SENT

    async def test_void_invoice_refuses_payment(self, catalog):
        invoice = (await create_invoice(catalog)).value
        voided = await update_invoice(catalog, invoice, InvoiceStatus.VOID)

        result = await record_payment(catalog, invoice.invoice_id, "45.00")

        assert voided.value.status == "void"
        assert isinstance(result.error, Conflict)
        assert result.error.code == "INVOICE_VOID"
        assert await SqlAlchemyPaymentRepository(catalog).count_for_invoice(invoice.invoice_id) == 0

    async def test_paid_invoice_cannot_be_deleted(self, catalog):
        invoice = (await create_invoice(catalog)).value
        await record_payment(catalog, invoice.invoice_id, "45.00")

        result = await delete_invoice(catalog, invoice.invoice_id)

        assert isinstance(result.error, Conflict)
        assert result.error.code == "INVOICE_PAID"
        assert await SqlAlchemyInvoiceRepository(catalog).get_by_id(invoice.invoice_id) is not None

    async def test_invoice_with_payments_cannot_be_deleted(self, catalog):
        invoice = (await create_invoice(catalog)).value
        await record_payment(catalog, invoice.invoice_id, "20.00")

        result = await delete_invoice(catalog, invoice.invoice_id)

        assert isinstance(result.error, Conflict)
        assert result.error.code == "INVOICE_HAS_PAYMENTS"
        lines = await SqlAlchemyInvoiceLineRepository(catalog).get_by_invoice_id(invoice.invoice_id)
        assert len(lines) == 2

    async def test_unpaid_invoice_is_deleted_with_its_lines(self, catalog):
        invoice = (await create_invoice(catalog)).value

        result = await delete_invoice(catalog, invoice.invoice_id)

        assert result.value == invoice.invoice_id
        assert await SqlAlchemyInvoiceRepository(catalog).get_by_id(invoice.invoice_id) is None
        assert await SqlAlchemyInvoiceLineRepository(catalog).get_by_invoice_id(invoice.invoice_id) == []


@pytest.mark.asyncio
class TestRepositories:
    async def test_guarded_update_rejects_stale_version(self, catalog):
        invoice = (await create_invoice(catalog)).value
        repo = SqlAlchemyInvoiceRepository(catalog)
        stored = await repo.get_by_id(invoice.invoice_id)

        stored.version = invoice.version + 5
        with pytest.raises(ConcurrencyConflictError):
            await repo.update(stored)
        await catalog.rollback()

    async def test_invoice_numbers_increase(self, catalog):
        first = (await create_invoice(catalog)).value
        second = (await create_invoice(catalog)).value

        assert first.invoice_number != second.invoice_number
        assert int(second.invoice_number.rsplit("-", 1)[1]) == int(first.invoice_number.rsplit("-", 1)[1]) + 1

    async def test_manual_number_does_not_break_the_sequence(self, catalog):
        year = datetime.utcnow().year
        first = (await create_invoice(catalog)).value
        manual = await create_invoice(catalog, invoice_number=f"INV-{year}-A1")

        following = [(await create_invoice(catalog)).value for _ in range(2)]

        assert first.invoice_number == f"INV-{year}-000001"
        assert manual.is_ok()
        assert [invoice.invoice_number for invoice in following] == [
            f"INV-{year}-000002",
            f"INV-{year}-000003",
        ]

    async def test_line_with_two_items_is_rejected_by_the_store(self, catalog):
        invoice = (await create_invoice(catalog)).value
        line = InvoiceLine(
            invoice_id=invoice.invoice_id,
            item_type=ItemType.SERVICE,
            service_id=3,
            product_id=9,
            description="Broken",
            quantity=Decimal("1"),
            unit_price=Decimal("1.00"),
            line_total=Decimal("1.00"),
        )
        catalog.add(line)

        with pytest.raises(IntegrityError):
            await catalog.flush()
        await catalog.rollback()
        assert await catalog.get(Invoice, invoice.invoice_id) is not None
