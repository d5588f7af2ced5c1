"""ResolvePrice Use Case

Quotes the amount of a service for a patient context (species, weight).
"""

from decimal import Decimal, InvalidOperation
from libs.result import Result, Return
from src.app.errors import NotFound, StorageFailure, ValidationFailure
from src.app.repositories.catalog_repository import CatalogRepository
from src.app.repositories.price_rule_repository import PriceRuleRepository
from src.domain.pricing import select_price_rule
from .dtos import ResolvePriceQueryDTO, PriceQuoteDTO


class ResolvePrice:
    """
    Use Case: Resolve the applicable price of a service

    Business Rules:
    1. The service must exist in the catalog
    2. Only active rules of the service are considered
    3. The most specific matching rule wins (see src.domain.pricing)
    4. No matching rule is NotFound, never a zero price

    Flow:
    1. Validate query
    2. Check service exists
    3. Load the service's active rules
    4. Select the rule
    5. Return quote
    """

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        price_rule_repo: PriceRuleRepository,
    ):
        self.catalog_repo = catalog_repo
        self.price_rule_repo = price_rule_repo

    async def execute(self, query: ResolvePriceQueryDTO) -> Result[PriceQuoteDTO]:
        """
        Execute price resolution

        Args:
            query: ResolvePriceQueryDTO with service_id and optional species/weight

        Returns:
            Result[PriceQuoteDTO]: Amount and currency of the winning rule, or error
        """
        # Step 1: Validate query
        if query.weight_kg is not None:
            try:
                valid_weight = Decimal(query.weight_kg) >= 0
            except (InvalidOperation, TypeError, ValueError):
                valid_weight = False
            if not valid_weight:
                return Return.err(
                    ValidationFailure(
                        code="INVALID_WEIGHT",
                        message=f"Weight must be a non-negative number of kg, got {query.weight_kg}",
                    )
                )

        try:
            # Step 2: Check service exists
            service = await self.catalog_repo.get_service(query.service_id)
            if not service:
                return Return.err(
                    NotFound(
                        code="SERVICE_NOT_FOUND",
                        message=f"Service {query.service_id} not found",
                    )
                )

            # Step 3: Load the service's active rules
            rules = await self.price_rule_repo.get_for_service(
                query.service_id, active_only=True
            )
        except Exception as e:
            return Return.err(
                StorageFailure(
                    code="RESOLVE_PRICE_FAILED",
                    message="Failed to load price rules",
                    reason=str(e),
                )
            )

        # Step 4: Select the rule
        rule = select_price_rule(rules, query.species_id, query.weight_kg)
        if rule is None:
            return Return.err(
                NotFound(
                    code="PRICE_RULE_NOT_FOUND",
                    message=f"No price rule applies to service {query.service_id}",
                    reason=f"species_id={query.species_id}, weight_kg={query.weight_kg}",
                )
            )

        # Step 5: Return quote
        return Return.ok(
            PriceQuoteDTO(
                service_id=query.service_id,
                price_rule_id=rule.id,
                amount=rule.amount,
                currency=rule.currency,
            )
        )
