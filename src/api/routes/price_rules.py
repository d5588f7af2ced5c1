"""Price Rule API Routes

FastAPI routes for the clinic price list and price resolution.
"""

from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.auth import ADMIN_ROLES, STAFF_ROLES, get_caller, require_roles
from src.api.error import ClientError
from src.api.schemas.billing_request import PriceRuleRequestSchema
from src.app.use_cases.billing.dtos import (
    CallerContext,
    ListPriceRulesResponseDTO,
    PriceQuoteDTO,
    PriceRuleCommandDTO,
    PriceRuleResponseDTO,
    ResolvePriceQueryDTO,
)
from src.app.use_cases.billing.create_price_rule import CreatePriceRule
from src.app.use_cases.billing.update_price_rule import UpdatePriceRule
from src.app.use_cases.billing.delete_price_rule import DeletePriceRule
from src.app.use_cases.billing.list_price_rules import GetPriceRule, ListPriceRules
from src.app.use_cases.billing.resolve_price import ResolvePrice
from src.adapter.repositories.catalog_repository import SqlAlchemyCatalogRepository
from src.adapter.repositories.price_rule_repository import SqlAlchemyPriceRuleRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session

router = APIRouter(prefix="/billing/price-rules", tags=["Price Rules"])

NOT_FOUND_EXAMPLE = {
    404: {
        "description": "Price rule or service not found",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "PRICE_RULE_NOT_FOUND",
                        "message": "Price rule 12 not found"
                    }
                }
            }
        }
    }
}


def _to_command(request: PriceRuleRequestSchema) -> PriceRuleCommandDTO:
    return PriceRuleCommandDTO(
        service_id=request.service_id,
        species_id=request.species_id,
        weight_min_kg=request.weight_min_kg,
        weight_max_kg=request.weight_max_kg,
        amount=request.amount,
        currency=request.currency,
        is_active=request.is_active,
    )


@router.get("", response_model=ListPriceRulesResponseDTO)
async def list_price_rules(
    service_id: Optional[int] = Query(default=None, description="Filter by service"),
    active_only: bool = Query(default=False, description="Skip deactivated rules"),
    limit: int = Query(default=ApplicationConfig.DEFAULT_PAGE_SIZE, ge=1, le=ApplicationConfig.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    caller: CallerContext = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    """
    List price rules ordered by service, species (universal first), weight.

    **Returns:**
    - 200: Paginated price rules
    - 404: Service filter references an unknown service
    """
    use_case = ListPriceRules(
        SqlAlchemyCatalogRepository(session), SqlAlchemyPriceRuleRepository(session)
    )
    result = await use_case.execute(
        service_id=service_id, active_only=active_only, limit=limit, offset=offset
    )

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get(
    "/resolve",
    response_model=PriceQuoteDTO,
    responses={
        404: {
            "description": "No applicable price",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "PRICE_RULE_NOT_FOUND",
                            "message": "No price rule applies to service 3"
                        }
                    }
                }
            }
        }
    }
)
async def resolve_price(
    service_id: int = Query(..., description="Service to price"),
    species_id: Optional[int] = Query(default=None, description="Patient species"),
    weight_kg: Optional[Decimal] = Query(default=None, description="Patient weight in kg"),
    caller: CallerContext = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    """
    Resolve the price of a service for a patient.

    The most specific active rule wins: species-specific before universal,
    then more weight bounds, then the narrower range, then the oldest rule.

    **Example:** `GET /billing/price-rules/resolve?service_id=3&species_id=1&weight_kg=15`

    **Returns:**
    - 200: Amount and currency
    - 400: Negative weight
    - 404: Unknown service, or no rule matches
    """
    use_case = ResolvePrice(
        SqlAlchemyCatalogRepository(session), SqlAlchemyPriceRuleRepository(session)
    )
    result = await use_case.execute(
        ResolvePriceQueryDTO(service_id=service_id, species_id=species_id, weight_kg=weight_kg)
    )

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/{rule_id}", response_model=PriceRuleResponseDTO, responses=NOT_FOUND_EXAMPLE)
async def get_price_rule(
    rule_id: int,
    caller: CallerContext = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    use_case = GetPriceRule(SqlAlchemyPriceRuleRepository(session))
    result = await use_case.execute(rule_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "",
    response_model=PriceRuleResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses=NOT_FOUND_EXAMPLE,
)
async def create_price_rule(
    request: PriceRuleRequestSchema,
    caller: CallerContext = Depends(require_roles(*STAFF_ROLES)),
    session: AsyncSession = Depends(get_session),
):
    """
    Add a price rule to a service.

    **Returns:**
    - 201: Rule created
    - 400: Invalid amount, weight range or currency
    - 404: Unknown service or species
    """
    use_case = CreatePriceRule(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyCatalogRepository(session),
        SqlAlchemyPriceRuleRepository(session),
        default_currency=ApplicationConfig.DEFAULT_CURRENCY,
        max_weight_kg=Decimal(str(ApplicationConfig.PRICE_RULE_MAX_WEIGHT_KG)),
    )
    result = await use_case.execute(_to_command(request), caller)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.put("/{rule_id}", response_model=PriceRuleResponseDTO, responses=NOT_FOUND_EXAMPLE)
async def update_price_rule(
    rule_id: int,
    request: PriceRuleRequestSchema,
    caller: CallerContext = Depends(require_roles(*STAFF_ROLES)),
    session: AsyncSession = Depends(get_session),
):
    """
    Replace a price rule. Send `is_active: false` to deactivate it.
    """
    use_case = UpdatePriceRule(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyCatalogRepository(session),
        SqlAlchemyPriceRuleRepository(session),
        default_currency=ApplicationConfig.DEFAULT_CURRENCY,
        max_weight_kg=Decimal(str(ApplicationConfig.PRICE_RULE_MAX_WEIGHT_KG)),
    )
    result = await use_case.execute(rule_id, _to_command(request), caller)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.delete(
    "/{rule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND_EXAMPLE,
)
async def delete_price_rule(
    rule_id: int,
    caller: CallerContext = Depends(require_roles(*ADMIN_ROLES)),
    session: AsyncSession = Depends(get_session),
):
    use_case = DeletePriceRule(
        SqlAlchemyUnitOfWork(session), SqlAlchemyPriceRuleRepository(session)
    )
    result = await use_case.execute(rule_id, caller)

    if result.is_err():
        raise ClientError(result.error)
