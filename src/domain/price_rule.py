"""Price Rule Domain Entity

Conditional price for a service, optionally scoped to a species and/or a
weight range.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String
from src.domain.base import BaseModel, ID_TYPE


class PriceRule(BaseModel, table=True):
    """
    Price Rule - Amount applicable to a service in a given context

    Domain Rules:
    - species_id None means the rule applies to every species
    - Missing weight bounds are open ends
    - weight_min_kg <= weight_max_kg when both are set
    - Overlapping rules are allowed; resolution picks one (see pricing.py)
    - Rules are soft-disabled through is_active
    """

    __tablename__ = "price_rules"
    __table_args__ = (
        CheckConstraint('amount >= 0', name='price_rule_amount_non_negative'),
        CheckConstraint(
            'weight_min_kg IS NULL OR weight_max_kg IS NULL OR weight_min_kg <= weight_max_kg',
            name='price_rule_weight_range_ordered',
        ),
        Index('ix_price_rules_service_id', 'service_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(ID_TYPE, primary_key=True, autoincrement=True),
        description="Unique price rule identifier (auto-increment)"
    )

    service_id: int = Field(
        sa_column=Column(ID_TYPE, ForeignKey("services.id"), nullable=False),
        description="Service this rule prices"
    )

    species_id: Optional[int] = Field(
        default=None,
        sa_column=Column(ID_TYPE, ForeignKey("species.id"), nullable=True),
        description="Species scope (None = all species)"
    )

    weight_min_kg: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(6, 2), nullable=True),
        description="Inclusive lower weight bound in kg (None = unbounded)"
    )

    weight_max_kg: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(6, 2), nullable=True),
        description="Inclusive upper weight bound in kg (None = unbounded)"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(10, 2), nullable=False),
        description="Price amount (precision: 10,2)"
    )

    currency: str = Field(
        default="EUR",
        sa_column=Column(String(3), nullable=False),
        description="Currency code (ISO 4217)"
    )

    is_active: bool = Field(
        default=True,
        description="Inactive rules are ignored by price resolution"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Rule creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    def matches(self, species_id: Optional[int], weight_kg: Optional[Decimal]) -> bool:
        """
        Check whether this rule applies to a (species, weight) context

        A species-scoped rule never matches an unknown species and a
        weight-bounded rule never matches an unknown weight.
        """
        if self.species_id is not None and self.species_id != species_id:
            return False
        if self.weight_min_kg is not None:
            if weight_kg is None or Decimal(weight_kg) < Decimal(self.weight_min_kg):
                return False
        if self.weight_max_kg is not None:
            if weight_kg is None or Decimal(weight_kg) > Decimal(self.weight_max_kg):
                return False
        return True

    @property
    def bound_count(self) -> int:
        return (self.weight_min_kg is not None) + (self.weight_max_kg is not None)

    @property
    def weight_span(self) -> Optional[Decimal]:
        if self.bound_count < 2:
            return None
        return Decimal(self.weight_max_kg) - Decimal(self.weight_min_kg)

    def precedence_key(self) -> Tuple:
        """
        Sort key, most specific rule first

        species-specific < universal, then more bounds first, then the
        narrower fully-bounded range, then the lowest id.
        """
        span = self.weight_span
        return (
            0 if self.species_id is not None else 1,
            -self.bound_count,
            span if span is not None else Decimal("Infinity"),
            self.id if self.id is not None else 0,
        )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "service_id": 3,
                "species_id": 1,
                "weight_min_kg": "10.10",
                "weight_max_kg": "25.00",
                "amount": "240.00",
                "currency": "EUR",
                "is_active": True,
                "created_at": "2025-01-01T00:00:00Z",
                "updated_at": "2025-01-01T00:00:00Z"
            }
        }
