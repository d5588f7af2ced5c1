"""
List Price Rules Use Case

Retrieves the clinic price list, optionally for a single service.
"""
from typing import Optional
from libs.result import Result, Return
from src.app.errors import NotFound
from src.app.repositories.catalog_repository import CatalogRepository
from src.app.repositories.price_rule_repository import PriceRuleRepository
from .dtos import ListPriceRulesResponseDTO, PriceRuleResponseDTO
from .mappers import to_price_rule_dto


class ListPriceRules:
    """
    Use case: View price rules

    Rules are ordered by service, species (universal first), weight_min_kg, id.
    """

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        price_rule_repo: PriceRuleRepository,
    ):
        self.catalog_repo = catalog_repo
        self.price_rule_repo = price_rule_repo

    async def execute(
        self,
        service_id: Optional[int] = None,
        active_only: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> Result[ListPriceRulesResponseDTO]:
        """
        List price rules with pagination.

        Args:
            service_id: Restrict to one service (must exist)
            active_only: Skip deactivated rules
            limit: Maximum number of rules to return
            offset: Number of rules to skip

        Returns:
            Result[ListPriceRulesResponseDTO]: Paginated rule list
        """
        if service_id is not None and not await self.catalog_repo.get_service(service_id):
            return Return.err(
                NotFound(
                    code="SERVICE_NOT_FOUND",
                    message=f"Service {service_id} not found",
                )
            )

        rules = await self.price_rule_repo.list(
            service_id=service_id,
            active_only=active_only,
            limit=limit,
            offset=offset,
        )

        return Return.ok(
            ListPriceRulesResponseDTO(
                price_rules=[to_price_rule_dto(rule) for rule in rules],
                limit=limit,
                offset=offset,
            )
        )


class GetPriceRule:
    """Use case: View a single price rule"""

    def __init__(self, price_rule_repo: PriceRuleRepository):
        self.price_rule_repo = price_rule_repo

    async def execute(self, rule_id: int) -> Result[PriceRuleResponseDTO]:
        rule = await self.price_rule_repo.get_by_id(rule_id)
        if not rule:
            return Return.err(
                NotFound(
                    code="PRICE_RULE_NOT_FOUND",
                    message=f"Price rule {rule_id} not found",
                )
            )
        return Return.ok(to_price_rule_dto(rule))
