"""SQLAlchemy Payment Repository Implementation

Implements payment persistence using SQLAlchemy async session.
"""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.money import ZERO, sum_money
from src.domain.payment import Payment


class SqlAlchemyPaymentRepository(PaymentRepository):
    """
    SQLAlchemy implementation of PaymentRepository

    Amounts are summed in Python over Decimal values so that backends
    without a native decimal type (SQLite) do not introduce float error.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, payment: Payment) -> Payment:
        self.session.add(payment)
        await self.session.flush()
        await self.session.refresh(payment)
        return payment

    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        statement = select(Payment).where(Payment.id == payment_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_invoice_id(self, invoice_id: int) -> List[Payment]:
        statement = (
            select(Payment)
            .where(Payment.invoice_id == invoice_id)
            .order_by(Payment.payment_date, Payment.id)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_total_paid(self, invoice_id: int) -> Decimal:
        statement = select(Payment.amount).where(Payment.invoice_id == invoice_id)
        result = await self.session.execute(statement)
        return sum_money(Decimal(amount) for amount in result.scalars().all())

    async def get_totals_paid(self, invoice_ids: Iterable[int]) -> Dict[int, Decimal]:
        invoice_ids = list(invoice_ids)
        totals = {invoice_id: ZERO for invoice_id in invoice_ids}
        if not invoice_ids:
            return totals

        statement = (
            select(Payment.invoice_id, Payment.amount)
            .where(Payment.invoice_id.in_(invoice_ids))
        )
        result = await self.session.execute(statement)
        for invoice_id, amount in result.all():
            totals[invoice_id] = sum_money([totals[invoice_id], Decimal(amount)])
        return totals

    async def count_for_invoice(self, invoice_id: int) -> int:
        statement = (
            select(func.count())
            .select_from(Payment)
            .where(Payment.invoice_id == invoice_id)
        )
        result = await self.session.execute(statement)
        return result.scalar_one()

    async def delete(self, payment: Payment) -> None:
        await self.session.delete(payment)
        await self.session.flush()
