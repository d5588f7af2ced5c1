"""Billing domain use cases"""
from .item_resolver import ItemResolver, ResolvedLine
from .line_synchronizer import InvoiceLineSynchronizer, LineSyncPlan, LineUpdate
from .resolve_price import ResolvePrice
from .create_price_rule import CreatePriceRule
from .update_price_rule import UpdatePriceRule
from .delete_price_rule import DeletePriceRule
from .list_price_rules import ListPriceRules, GetPriceRule
from .create_invoice import CreateInvoice
from .update_invoice import UpdateInvoice
from .delete_invoice import DeleteInvoice
from .get_invoice import GetInvoice
from .list_invoices import ListInvoices
from .record_payment import RecordPayment
from .reverse_payment import ReversePayment
from .list_payments import ListPayments, GetPayment
from .dtos import (
    CallerContext,
    ResolvePriceQueryDTO,
    PriceQuoteDTO,
    PriceRuleCommandDTO,
    PriceRuleResponseDTO,
    ListPriceRulesResponseDTO,
    InvoiceLineSpecDTO,
    CreateInvoiceCommandDTO,
    UpdateInvoiceCommandDTO,
    InvoiceLineResponseDTO,
    InvoiceResponseDTO,
    InvoiceSummaryDTO,
    ListInvoicesResponseDTO,
    RecordPaymentCommandDTO,
    PaymentResponseDTO,
    PaymentLedgerResponseDTO,
    ListPaymentsResponseDTO,
)

__all__ = [
    "ItemResolver",
    "ResolvedLine",
    "InvoiceLineSynchronizer",
    "LineSyncPlan",
    "LineUpdate",
    "ResolvePrice",
    "CreatePriceRule",
    "UpdatePriceRule",
    "DeletePriceRule",
    "ListPriceRules",
    "GetPriceRule",
    "CreateInvoice",
    "UpdateInvoice",
    "DeleteInvoice",
    "GetInvoice",
    "ListInvoices",
    "RecordPayment",
    "ReversePayment",
    "ListPayments",
    "GetPayment",
    "CallerContext",
    "ResolvePriceQueryDTO",
    "PriceQuoteDTO",
    "PriceRuleCommandDTO",
    "PriceRuleResponseDTO",
    "ListPriceRulesResponseDTO",
    "InvoiceLineSpecDTO",
    "CreateInvoiceCommandDTO",
    "UpdateInvoiceCommandDTO",
    "InvoiceLineResponseDTO",
    "InvoiceResponseDTO",
    "InvoiceSummaryDTO",
    "ListInvoicesResponseDTO",
    "RecordPaymentCommandDTO",
    "PaymentResponseDTO",
    "PaymentLedgerResponseDTO",
    "ListPaymentsResponseDTO",
]
