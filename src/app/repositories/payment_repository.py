"""Payment Repository Interface

Defines the contract for payment persistence operations.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from src.domain.payment import Payment


class PaymentRepository(ABC):
    """
    Repository interface for Payment persistence

    Payments are appended or deleted, never updated.
    """

    @abstractmethod
    async def create(self, payment: Payment) -> Payment:
        """
        Create a new payment

        Args:
            payment: Payment entity to persist

        Returns:
            Created Payment with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        pass

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: int) -> List[Payment]:
        """
        Retrieve the payments of an invoice

        Args:
            invoice_id: Invoice ID

        Returns:
            Payments ordered by payment_date
        """
        pass

    @abstractmethod
    async def get_total_paid(self, invoice_id: int) -> Decimal:
        """
        Sum of the invoice's payment amounts

        Returns:
            Decimal("0.00") when the invoice has no payments
        """
        pass

    @abstractmethod
    async def get_totals_paid(self, invoice_ids: Iterable[int]) -> Dict[int, Decimal]:
        """
        Sum of payment amounts for several invoices

        Returns:
            Mapping invoice_id -> amount paid (invoices without payments map to 0.00)
        """
        pass

    @abstractmethod
    async def count_for_invoice(self, invoice_id: int) -> int:
        pass

    @abstractmethod
    async def delete(self, payment: Payment) -> None:
        pass
