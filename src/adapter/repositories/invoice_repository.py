"""SQLAlchemy Invoice Repository Implementation

Implements invoice persistence using SQLAlchemy async session, with
version-guarded updates for optimistic concurrency.
"""

from typing import Optional, List
from datetime import datetime
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.errors import ConcurrencyConflictError, DuplicateInvoiceNumberError
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.invoice import Invoice, InvoiceStatus


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Features:
    - Row locking via SELECT FOR UPDATE (ignored by SQLite)
    - Version-guarded updates: a write based on a stale read is refused
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice with generated ID
        """
        self.session.add(invoice)
        await self._flush(invoice)
        await self.session.refresh(invoice)
        return invoice

    async def get_by_id(self, invoice_id: int, for_update: bool = False) -> Optional[Invoice]:
        """
        Retrieve invoice by ID

        Args:
            invoice_id: Invoice ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Invoice if found, None otherwise
        """
        statement = select(Invoice).where(Invoice.id == invoice_id)

        if for_update:
            statement = statement.with_for_update()

        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list(
        self,
        client_id: Optional[int] = None,
        status: Optional[InvoiceStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Invoice]:
        """
        Retrieve invoices, newest issue date first

        Args:
            client_id: Optional filter by client
            status: Optional filter by status
            limit: Maximum number of invoices to return
            offset: Offset for pagination

        Returns:
            List of invoices
        """
        statement = select(Invoice)

        if client_id is not None:
            statement = statement.where(Invoice.client_id == client_id)
        if status:
            statement = statement.where(Invoice.status == status)

        statement = statement.order_by(Invoice.issue_date.desc(), Invoice.id.desc())
        statement = statement.limit(limit).offset(offset)

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def invoice_number_exists(
        self, invoice_number: str, exclude_invoice_id: Optional[int] = None
    ) -> bool:
        """
        Check whether another invoice already uses a number

        Args:
            invoice_number: Number to check
            exclude_invoice_id: Invoice to ignore (the one being updated)

        Returns:
            True if the number is taken, False otherwise
        """
        statement = (
            select(func.count())
            .select_from(Invoice)
            .where(Invoice.invoice_number == invoice_number)
        )
        if exclude_invoice_id is not None:
            statement = statement.where(Invoice.id != exclude_invoice_id)

        result = await self.session.execute(statement)
        count = result.scalar_one()
        return count > 0

    async def update(self, invoice: Invoice) -> Invoice:
        """
        Update an existing invoice

        Claims the row with UPDATE ... WHERE version = :read_version before
        flushing the entity. Zero affected rows means another transaction
        committed a change after this one read the invoice.

        Args:
            invoice: Invoice entity with updated values

        Returns:
            Updated Invoice

        Raises:
            ConcurrencyConflictError: the stored version moved on
        """
        read_version = invoice.version
        claim = (
            update(Invoice)
            .where(Invoice.id == invoice.id)
            .where(Invoice.version == read_version)
            .values(version=read_version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(claim)
        if result.rowcount == 0:
            raise ConcurrencyConflictError("Invoice", invoice.id)

        invoice.version = read_version + 1
        invoice.updated_at = datetime.utcnow()
        self.session.add(invoice)
        await self._flush(invoice)
        await self.session.refresh(invoice)
        return invoice

    async def _flush(self, invoice: Invoice) -> None:
        try:
            await self.session.flush()
        except IntegrityError as e:
            if "invoice_number" in str(e.orig):
                raise DuplicateInvoiceNumberError(invoice.invoice_number) from e
            raise

    async def delete(self, invoice: Invoice) -> None:
        await self.session.delete(invoice)
        await self.session.flush()

    async def generate_invoice_number(self, prefix: str = "INV") -> str:
        """
        Generate a unique invoice number

        Format: PREFIX-YYYY-NNNNNN (e.g., INV-2025-000001)

        Returns:
            Unique invoice number string
        """
        year = datetime.utcnow().year
        number_prefix = f"{prefix}-{year}-"

        # Manually entered numbers may share the prefix; only numeric
        # suffixes take part in the sequence
        statement = (
            select(Invoice.invoice_number)
            .where(Invoice.invoice_number.like(f"{number_prefix}%"))
        )
        result = await self.session.execute(statement)
        suffixes = (number[len(number_prefix):] for number in result.scalars().all())
        sequence = max((int(suffix) for suffix in suffixes if suffix.isdecimal()), default=0) + 1

        return f"{number_prefix}{sequence:06d}"
