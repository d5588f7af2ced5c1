from .catalog_repository import SqlAlchemyCatalogRepository
from .price_rule_repository import SqlAlchemyPriceRuleRepository
from .invoice_repository import SqlAlchemyInvoiceRepository
from .invoice_line_repository import SqlAlchemyInvoiceLineRepository
from .payment_repository import SqlAlchemyPaymentRepository

__all__ = [
    "SqlAlchemyCatalogRepository",
    "SqlAlchemyPriceRuleRepository",
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyInvoiceLineRepository",
    "SqlAlchemyPaymentRepository",
]
