"""SQLAlchemy Price Rule Repository Implementation

Implements price rule persistence using SQLAlchemy async session.
"""

from datetime import datetime
from typing import Optional, List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.price_rule_repository import PriceRuleRepository
from src.domain.price_rule import PriceRule


class SqlAlchemyPriceRuleRepository(PriceRuleRepository):
    """
    SQLAlchemy implementation of PriceRuleRepository
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, rule: PriceRule) -> PriceRule:
        self.session.add(rule)
        await self.session.flush()
        await self.session.refresh(rule)
        return rule

    async def get_by_id(self, rule_id: int) -> Optional[PriceRule]:
        statement = select(PriceRule).where(PriceRule.id == rule_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_for_service(
        self, service_id: int, active_only: bool = False
    ) -> List[PriceRule]:
        statement = select(PriceRule).where(PriceRule.service_id == service_id)

        if active_only:
            statement = statement.where(PriceRule.is_active.is_(True))

        statement = statement.order_by(
            PriceRule.species_id.is_not(None),
            PriceRule.species_id,
            PriceRule.weight_min_kg,
            PriceRule.id,
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list(
        self,
        service_id: Optional[int] = None,
        active_only: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> List[PriceRule]:
        statement = select(PriceRule)

        if service_id is not None:
            statement = statement.where(PriceRule.service_id == service_id)
        if active_only:
            statement = statement.where(PriceRule.is_active.is_(True))

        statement = statement.order_by(
            PriceRule.service_id,
            PriceRule.species_id.is_not(None),
            PriceRule.species_id,
            PriceRule.weight_min_kg,
            PriceRule.id,
        )
        statement = statement.limit(limit).offset(offset)

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update(self, rule: PriceRule) -> PriceRule:
        rule.updated_at = datetime.utcnow()
        self.session.add(rule)
        await self.session.flush()
        await self.session.refresh(rule)
        return rule

    async def delete(self, rule: PriceRule) -> None:
        await self.session.delete(rule)
        await self.session.flush()
