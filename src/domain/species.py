"""Species Catalog Entity

Read-only reference data used to scope price rules.
"""

from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String
from src.domain.base import BaseModel, ID_TYPE


class Species(BaseModel, table=True):
    """Animal species (e.g., Dog, Cat)"""

    __tablename__ = "species"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(ID_TYPE, primary_key=True, autoincrement=True),
        description="Unique species identifier (auto-increment)"
    )

    name: str = Field(
        sa_column=Column(String(100), nullable=False, unique=True),
        description="Species name"
    )
