"""Entity builders shared by unit tests"""

from datetime import date, datetime
from decimal import Decimal
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_line import InvoiceLine, ItemRef


def make_invoice(status=InvoiceStatus.DRAFT, total="45.00", invoice_id=1, version=1):
    return Invoice(
        id=invoice_id,
        client_id=42,
        consultation_id=7,
        invoice_number="INV-2025-000001",
        issue_date=date(2025, 3, 1),
        due_date=date(2025, 3, 31),
        total_amount=Decimal(total),
        status=status,
        version=version,
        created_at=datetime(2025, 3, 1, 9, 0, 0),
        updated_at=datetime(2025, 3, 1, 9, 0, 0),
    )


def make_line(line_id, item_type, item_id, quantity, unit_price, description, invoice_id=1):
    line = InvoiceLine.for_item(
        ItemRef(item_type=item_type, item_id=item_id),
        description=description,
        quantity=Decimal(quantity),
        unit_price=Decimal(unit_price),
        line_total=(Decimal(quantity) * Decimal(unit_price)).quantize(Decimal("0.01")),
        invoice_id=invoice_id,
    )
    line.id = line_id
    return line

