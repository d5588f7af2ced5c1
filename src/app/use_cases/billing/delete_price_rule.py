"""DeletePriceRule Use Case"""

from typing import Optional
from libs.result import Result, Return
from src.app.errors import NotFound, StorageFailure
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.price_rule_repository import PriceRuleRepository
from .dtos import CallerContext


class DeletePriceRule:
    """
    Use Case: Hard-delete a price rule

    No invoice line references a rule, so removal never breaks history.
    """

    def __init__(self, uow: UnitOfWork, price_rule_repo: PriceRuleRepository):
        self.uow = uow
        self.price_rule_repo = price_rule_repo

    async def execute(self, rule_id: int, caller: Optional[CallerContext] = None) -> Result[int]:
        try:
            rule = await self.price_rule_repo.get_by_id(rule_id)
            if not rule:
                return Return.err(
                    NotFound(
                        code="PRICE_RULE_NOT_FOUND",
                        message=f"Price rule {rule_id} not found",
                    )
                )

            await self.price_rule_repo.delete(rule)
            await self.uow.commit()
            return Return.ok(rule_id)

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                StorageFailure(
                    code="DELETE_PRICE_RULE_FAILED",
                    message="Failed to delete price rule",
                    reason=str(e),
                )
            )
