from .base import BaseModel
from .species import Species
from .service import Service
from .product import Product
from .price_rule import PriceRule
from .invoice import Invoice, InvoiceStatus
from .invoice_line import InvoiceLine, ItemRef, ItemType
from .payment import Payment

__all__ = [
    "BaseModel",
    "Species",
    "Service",
    "Product",
    "PriceRule",
    "Invoice",
    "InvoiceStatus",
    "InvoiceLine",
    "ItemRef",
    "ItemType",
    "Payment",
]
