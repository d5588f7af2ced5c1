"""SQLAlchemy Catalog Repository Implementation

Read-only catalog lookups using SQLAlchemy async session.
"""

from typing import Optional
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.catalog_repository import CatalogRepository
from src.domain.product import Product
from src.domain.service import Service
from src.domain.species import Species


class SqlAlchemyCatalogRepository(CatalogRepository):
    """
    SQLAlchemy implementation of CatalogRepository
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_service(self, service_id: int) -> Optional[Service]:
        statement = select(Service).where(Service.id == service_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_product(self, product_id: int) -> Optional[Product]:
        statement = select(Product).where(Product.id == product_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def species_exists(self, species_id: int) -> bool:
        statement = (
            select(func.count())
            .select_from(Species)
            .where(Species.id == species_id)
        )
        result = await self.session.execute(statement)
        return result.scalar_one() > 0
