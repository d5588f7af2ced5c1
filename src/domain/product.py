"""Product Catalog Entity

Physical item sold at the clinic (medication, food, accessories).
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import Numeric, String, Text
from src.domain.base import BaseModel, ID_TYPE


class Product(BaseModel, table=True):
    """
    Product - Sellable item with a catalog unit price

    Domain Rules:
    - name is unique
    - unit_price is the default price when an invoice line omits one
    """

    __tablename__ = "products"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(ID_TYPE, primary_key=True, autoincrement=True),
        description="Unique product identifier (auto-increment)"
    )

    name: str = Field(
        sa_column=Column(String(100), nullable=False, unique=True),
        description="Product name, copied onto invoice lines"
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Detailed description"
    )

    unit_price: Decimal = Field(
        sa_column=Column(Numeric(10, 2), nullable=False),
        description="Catalog unit price (precision: 10,2)"
    )

    stock_quantity: int = Field(
        default=0,
        description="Units currently in stock"
    )

    is_active: bool = Field(
        default=True,
        description="Whether the product is currently sold"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Creation timestamp"
    )
