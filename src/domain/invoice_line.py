"""Invoice Line Domain Entity

Tracks individual billable entries within an invoice.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel as ValueObject, ConfigDict, Field as ValueField
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String
from src.domain.base import BaseModel, ID_TYPE


class ItemType(str, Enum):
    """Kinds of billable items"""
    SERVICE = "service"
    PRODUCT = "product"


class ItemRef(ValueObject):
    """
    Reference to exactly one billable item

    Tagged variant replacing the pair of nullable service/product keys:
    the tag says which catalog item_id points into.
    """

    model_config = ConfigDict(frozen=True)

    item_type: ItemType
    item_id: int = ValueField(..., gt=0)

    @property
    def service_id(self) -> Optional[int]:
        return self.item_id if self.item_type == ItemType.SERVICE else None

    @property
    def product_id(self) -> Optional[int]:
        return self.item_id if self.item_type == ItemType.PRODUCT else None


class InvoiceLine(BaseModel, table=True):
    """
    Invoice Line - Individual billable entry within an invoice

    Domain Rules:
    - Each line item belongs to exactly one invoice
    - Exactly one of service_id / product_id is set, matching item_type
    - line_total = quantity * unit_price
    - description is a snapshot of the catalog name
    - Only the line synchronizer creates, updates or deletes lines
    """

    __tablename__ = "invoice_lines"
    __table_args__ = (
        Index('ix_invoice_lines_invoice_id', 'invoice_id'),
        CheckConstraint(
            '(service_id IS NULL) <> (product_id IS NULL)',
            name='invoice_line_single_item',
        ),
        CheckConstraint('quantity > 0', name='invoice_line_quantity_positive'),
        CheckConstraint('unit_price >= 0', name='invoice_line_unit_price_non_negative'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(ID_TYPE, primary_key=True, autoincrement=True),
        description="Unique invoice line identifier (auto-increment)"
    )

    invoice_id: Optional[int] = Field(
        default=None,
        sa_column=Column(ID_TYPE, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Invoice"
    )

    item_type: ItemType = Field(
        description="Kind of item billed (service or product)"
    )

    service_id: Optional[int] = Field(
        default=None,
        sa_column=Column(ID_TYPE, ForeignKey("services.id"), nullable=True),
        description="Billed service (None for product lines)"
    )

    product_id: Optional[int] = Field(
        default=None,
        sa_column=Column(ID_TYPE, ForeignKey("products.id"), nullable=True),
        description="Billed product (None for service lines)"
    )

    description: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Item name captured at billing time"
    )

    quantity: Decimal = Field(
        sa_column=Column(Numeric(10, 2), nullable=False),
        description="Quantity billed (precision: 10,2)"
    )

    unit_price: Decimal = Field(
        sa_column=Column(Numeric(10, 2), nullable=False),
        description="Price per unit (precision: 10,2)"
    )

    line_total: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Line total (quantity * unit_price)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Line item creation timestamp"
    )

    @classmethod
    def for_item(
        cls,
        item: ItemRef,
        description: str,
        quantity: Decimal,
        unit_price: Decimal,
        line_total: Decimal,
        invoice_id: Optional[int] = None,
    ) -> "InvoiceLine":
        line = cls(
            invoice_id=invoice_id,
            item_type=item.item_type,
            description=description,
            quantity=quantity,
            unit_price=unit_price,
            line_total=line_total,
        )
        line.assign_item(item)
        return line

    def assign_item(self, item: ItemRef) -> None:
        """Point the line at an item, keeping tag and keys consistent"""
        self.item_type = item.item_type
        self.service_id = item.service_id
        self.product_id = item.product_id

    @property
    def item_ref(self) -> ItemRef:
        """
        Item reference rebuilt from the stored columns

        Raises:
            ValueError: if the stored columns break the exactly-one-set rule
        """
        item_type = ItemType(self.item_type)
        if item_type == ItemType.SERVICE and self.service_id is not None and self.product_id is None:
            return ItemRef(item_type=item_type, item_id=self.service_id)
        if item_type == ItemType.PRODUCT and self.product_id is not None and self.service_id is None:
            return ItemRef(item_type=item_type, item_id=self.product_id)
        raise ValueError(
            f"Invoice line {self.id} must reference exactly one {item_type.value}"
        )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "invoice_id": 1,
                "item_type": "service",
                "service_id": 3,
                "product_id": None,
                "description": "Consultation",
                "quantity": "2.00",
                "unit_price": "10.00",
                "line_total": "20.00",
                "created_at": "2025-03-01T09:00:00Z"
            }
        }
