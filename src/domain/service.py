"""Service Catalog Entity

Billable medical act (e.g., "Consultation", "Sterilisation").
Owned by the catalog; the billing engine only reads it.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String, Text
from src.domain.base import BaseModel, ID_TYPE


class Service(BaseModel, table=True):
    """
    Service - Billable act priced through PriceRules

    Domain Rules:
    - name is unique
    - Price is never stored on the service; see PriceRule
    """

    __tablename__ = "services"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(ID_TYPE, primary_key=True, autoincrement=True),
        description="Unique service identifier (auto-increment)"
    )

    name: str = Field(
        sa_column=Column(String(100), nullable=False, unique=True),
        description="Service name, copied onto invoice lines"
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Detailed description"
    )

    is_active: bool = Field(
        default=True,
        description="Whether the service is currently offered"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Creation timestamp"
    )
