"""Invoice Repository Interface

Defines the contract for invoice persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Optional, List
from src.domain.invoice import Invoice, InvoiceStatus


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    Provides access to invoice data for billing operations.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice with generated ID

        Raises:
            DuplicateInvoiceNumberError: the number is already in use
        """
        pass

    @abstractmethod
    async def get_by_id(self, invoice_id: int, for_update: bool = False) -> Optional[Invoice]:
        """
        Retrieve invoice by ID

        Args:
            invoice_id: Invoice ID
            for_update: If True, locks the row where the backend supports it

        Returns:
            Invoice if found, None otherwise
        """
        pass

    @abstractmethod
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
        pass

    @abstractmethod
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
        pass

    @abstractmethod
    async def update(self, invoice: Invoice) -> Invoice:
        """
        Update an existing invoice

        The write only succeeds if the stored version still equals
        invoice.version; the version is then incremented.

        Args:
            invoice: Invoice entity with updated values

        Returns:
            Updated Invoice

        Raises:
            ConcurrencyConflictError: another transaction updated the row first
            DuplicateInvoiceNumberError: the number is taken by another invoice
        """
        pass

    @abstractmethod
    async def delete(self, invoice: Invoice) -> None:
        pass

    @abstractmethod
    async def generate_invoice_number(self, prefix: str = "INV") -> str:
        """
        Generate a unique invoice number

        Format: PREFIX-YYYY-NNNNNN (e.g., INV-2025-000001)

        Returns:
            Unique invoice number string
        """
        pass
