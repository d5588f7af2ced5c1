"""Item Resolver

Turns a submitted (item, quantity, price) triple into a billable line:
catalog description, unit price and line total.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional
from pydantic import BaseModel, ValidationError
from libs.result import Result, Return
from src.app.errors import NotFound, ValidationFailure
from src.app.repositories.catalog_repository import CatalogRepository
from src.domain.invoice_line import ItemRef, ItemType
from src.domain.money import has_at_most_two_places, line_total


class ResolvedLine(BaseModel):
    """Line values ready to be written onto an InvoiceLine"""

    item: ItemRef
    description: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal


class ItemResolver:
    """
    Resolve invoice line items against the catalog

    Business Rules:
    1. quantity > 0, at most two decimal places
    2. unit price >= 0, at most two decimal places
    3. Services must exist; the caller's price is trusted (price rules are
       quotes, not enforced at invoicing) and is therefore required
    4. Products must exist; the catalog price applies when none is supplied
    5. line_total = quantity * unit_price, exact Decimal, rounded to cents
    """

    def __init__(self, catalog_repo: CatalogRepository):
        self.catalog_repo = catalog_repo

    async def resolve_line(
        self,
        item_type: ItemType,
        item_id: int,
        quantity: Decimal,
        supplied_unit_price: Optional[Decimal] = None,
    ) -> Result[ResolvedLine]:
        """
        Resolve one line

        Args:
            item_type: service or product
            item_id: Catalog ID of the item
            quantity: Quantity billed
            supplied_unit_price: Caller's unit price, if any

        Returns:
            Result[ResolvedLine]: Resolved values, NotFound or ValidationFailure
        """
        try:
            item = ItemRef(item_type=item_type, item_id=item_id)
        except ValidationError as e:
            return Return.err(
                ValidationFailure(
                    code="INVALID_ITEM",
                    message=f"Invalid item reference {item_type}:{item_id}",
                    reason=str(e),
                )
            )

        quantity_error = self._check_quantity(quantity)
        if quantity_error:
            return Return.err(quantity_error)

        if supplied_unit_price is not None:
            price_error = self._check_unit_price(supplied_unit_price)
            if price_error:
                return Return.err(price_error)

        if item.item_type == ItemType.SERVICE:
            service = await self.catalog_repo.get_service(item.item_id)
            if not service:
                return Return.err(
                    NotFound(
                        code="SERVICE_NOT_FOUND",
                        message=f"Service {item.item_id} not found",
                    )
                )
            if supplied_unit_price is None:
                return Return.err(
                    ValidationFailure(
                        code="UNIT_PRICE_REQUIRED",
                        message=f"A unit price is required for service {item.item_id}",
                    )
                )
            description = service.name
            unit_price = Decimal(supplied_unit_price)
        else:
            product = await self.catalog_repo.get_product(item.item_id)
            if not product:
                return Return.err(
                    NotFound(
                        code="PRODUCT_NOT_FOUND",
                        message=f"Product {item.item_id} not found",
                    )
                )
            description = product.name
            unit_price = Decimal(
                supplied_unit_price if supplied_unit_price is not None else product.unit_price
            )

        quantity = Decimal(quantity)
        return Return.ok(
            ResolvedLine(
                item=item,
                description=description,
                quantity=quantity,
                unit_price=unit_price,
                line_total=line_total(quantity, unit_price),
            )
        )

    def _check_quantity(self, quantity) -> Optional[ValidationFailure]:
        try:
            valid = Decimal(quantity) > 0 and has_at_most_two_places(quantity)
        except (InvalidOperation, TypeError, ValueError):
            valid = False
        if not valid:
            return ValidationFailure(
                code="INVALID_QUANTITY",
                message=f"Quantity must be a positive amount with at most two decimals, got {quantity}",
            )
        return None

    def _check_unit_price(self, unit_price) -> Optional[ValidationFailure]:
        try:
            valid = Decimal(unit_price) >= 0 and has_at_most_two_places(unit_price)
        except (InvalidOperation, TypeError, ValueError):
            valid = False
        if not valid:
            return ValidationFailure(
                code="INVALID_UNIT_PRICE",
                message=f"Unit price must be a non-negative amount with at most two decimals, got {unit_price}",
            )
        return None
