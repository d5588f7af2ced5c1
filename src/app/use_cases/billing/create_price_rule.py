"""CreatePriceRule Use Case

Adds a conditional price to a service's price list.
"""

from decimal import Decimal
from typing import Optional
from libs.result import Result, Return
from src.app.errors import NotFound, StorageFailure
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.catalog_repository import CatalogRepository
from src.app.repositories.price_rule_repository import PriceRuleRepository
from src.domain.price_rule import PriceRule
from .dtos import CallerContext, PriceRuleCommandDTO, PriceRuleResponseDTO
from .mappers import to_price_rule_dto
from .price_rule_checks import check_price_rule, normalize_currency


class CreatePriceRule:
    """
    Use Case: Create a price rule

    Business Rules:
    1. amount >= 0; weight bounds within [0, max_weight_kg], min <= max
    2. Currency is a 3-letter code, upper-cased, defaulting to the clinic currency
    3. The service, and the species when given, must exist
    4. Overlapping rules are accepted; resolution breaks ties
    """

    def __init__(
        self,
        uow: UnitOfWork,
        catalog_repo: CatalogRepository,
        price_rule_repo: PriceRuleRepository,
        default_currency: str = "EUR",
        max_weight_kg: Decimal = Decimal("500"),
    ):
        self.uow = uow
        self.catalog_repo = catalog_repo
        self.price_rule_repo = price_rule_repo
        self.default_currency = default_currency
        self.max_weight_kg = Decimal(max_weight_kg)

    async def execute(
        self, command: PriceRuleCommandDTO, caller: Optional[CallerContext] = None
    ) -> Result[PriceRuleResponseDTO]:
        currency = normalize_currency(command.currency, self.default_currency)
        failure = check_price_rule(command, currency, self.max_weight_kg)
        if failure:
            return Return.err(failure)

        try:
            if not await self.catalog_repo.get_service(command.service_id):
                return Return.err(
                    NotFound(
                        code="SERVICE_NOT_FOUND",
                        message=f"Service {command.service_id} not found",
                    )
                )
            if command.species_id is not None and not await self.catalog_repo.species_exists(
                command.species_id
            ):
                return Return.err(
                    NotFound(
                        code="SPECIES_NOT_FOUND",
                        message=f"Species {command.species_id} not found",
                    )
                )

            rule = PriceRule(
                service_id=command.service_id,
                species_id=command.species_id,
                weight_min_kg=command.weight_min_kg,
                weight_max_kg=command.weight_max_kg,
                amount=command.amount,
                currency=currency,
                is_active=command.is_active,
            )
            created_rule = await self.price_rule_repo.create(rule)
            await self.uow.commit()

            return Return.ok(to_price_rule_dto(created_rule))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                StorageFailure(
                    code="CREATE_PRICE_RULE_FAILED",
                    message="Failed to create price rule",
                    reason=str(e),
                )
            )
