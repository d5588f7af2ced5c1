"""Billing error taxonomy

Use cases return these through libs.result instead of raising. The class
tells the caller how to react; the code tells it what went wrong.
"""

from libs.result import Error


class ValidationFailure(Error):
    """Malformed input; the caller must correct it, never retried"""


class NotFound(Error):
    """A referenced service, product, invoice, payment or price match is missing"""


class Conflict(Error):
    """The current state forbids the operation; retry with fresh state"""


class StorageFailure(Error):
    """The store failed; the unit of work was rolled back"""


class ConcurrencyConflictError(Exception):
    """Raised by repositories when a guarded write lost a race"""

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} {entity_id} was modified by another transaction")
        self.entity = entity
        self.entity_id = entity_id


class DuplicateInvoiceNumberError(Exception):
    """Raised by repositories when the store rejects a reused invoice number"""

    def __init__(self, invoice_number: str):
        super().__init__(f"Invoice number {invoice_number} is already in use")
        self.invoice_number = invoice_number
