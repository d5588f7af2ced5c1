"""UpdatePriceRule Use Case

Replaces every editable field of an existing price rule.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return
from src.app.errors import NotFound, StorageFailure
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.catalog_repository import CatalogRepository
from src.app.repositories.price_rule_repository import PriceRuleRepository
from .dtos import CallerContext, PriceRuleCommandDTO, PriceRuleResponseDTO
from .mappers import to_price_rule_dto
from .price_rule_checks import check_price_rule, normalize_currency


class UpdatePriceRule:
    """
    Use Case: Update a price rule

    Same checks as CreatePriceRule. Catalog references are only looked up
    again when they change. Deactivation is an update with is_active=False.
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
        self, rule_id: int, command: PriceRuleCommandDTO, caller: Optional[CallerContext] = None
    ) -> Result[PriceRuleResponseDTO]:
        currency = normalize_currency(command.currency, self.default_currency)
        failure = check_price_rule(command, currency, self.max_weight_kg)
        if failure:
            return Return.err(failure)

        try:
            rule = await self.price_rule_repo.get_by_id(rule_id)
            if not rule:
                return Return.err(
                    NotFound(
                        code="PRICE_RULE_NOT_FOUND",
                        message=f"Price rule {rule_id} not found",
                    )
                )

            if command.service_id != rule.service_id and not await self.catalog_repo.get_service(
                command.service_id
            ):
                return Return.err(
                    NotFound(
                        code="SERVICE_NOT_FOUND",
                        message=f"Service {command.service_id} not found",
                    )
                )
            if (
                command.species_id is not None
                and command.species_id != rule.species_id
                and not await self.catalog_repo.species_exists(command.species_id)
            ):
                return Return.err(
                    NotFound(
                        code="SPECIES_NOT_FOUND",
                        message=f"Species {command.species_id} not found",
                    )
                )

            rule.service_id = command.service_id
            rule.species_id = command.species_id
            rule.weight_min_kg = command.weight_min_kg
            rule.weight_max_kg = command.weight_max_kg
            rule.amount = command.amount
            rule.currency = currency
            rule.is_active = command.is_active
            rule.updated_at = datetime.utcnow()

            updated_rule = await self.price_rule_repo.update(rule)
            await self.uow.commit()

            return Return.ok(to_price_rule_dto(updated_rule))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                StorageFailure(
                    code="UPDATE_PRICE_RULE_FAILED",
                    message="Failed to update price rule",
                    reason=str(e),
                )
            )
