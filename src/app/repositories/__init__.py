from .catalog_repository import CatalogRepository
from .price_rule_repository import PriceRuleRepository
from .invoice_repository import InvoiceRepository
from .invoice_line_repository import InvoiceLineRepository
from .payment_repository import PaymentRepository

__all__ = [
    "CatalogRepository",
    "PriceRuleRepository",
    "InvoiceRepository",
    "InvoiceLineRepository",
    "PaymentRepository",
]
