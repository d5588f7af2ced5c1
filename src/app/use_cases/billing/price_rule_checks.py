"""Field checks shared by price rule writes"""

from decimal import Decimal, InvalidOperation
from typing import Optional
from src.app.errors import ValidationFailure
from src.domain.money import has_at_most_two_places
from .dtos import PriceRuleCommandDTO


def _as_decimal(value) -> Optional[Decimal]:
    try:
        value = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    return value if value.is_finite() else None


def normalize_currency(currency: Optional[str], default_currency: str) -> str:
    return (currency or default_currency).strip().upper()


def check_price_rule(
    command: PriceRuleCommandDTO, currency: str, max_weight_kg: Decimal
) -> Optional[ValidationFailure]:
    """
    Validate amount, weight bounds and currency of a rule

    Returns:
        The first ValidationFailure found, or None when the rule is well-formed
    """
    amount = _as_decimal(command.amount)
    if amount is None or amount < 0 or not has_at_most_two_places(amount):
        return ValidationFailure(
            code="INVALID_AMOUNT",
            message=f"Amount must be a non-negative amount with at most two decimals, got {command.amount}",
        )

    bounds = {}
    for name in ("weight_min_kg", "weight_max_kg"):
        raw = getattr(command, name)
        if raw is None:
            continue
        value = _as_decimal(raw)
        if value is None or value < 0 or value > Decimal(max_weight_kg):
            return ValidationFailure(
                code="INVALID_WEIGHT_RANGE",
                message=f"{name} must be between 0 and {max_weight_kg} kg, got {raw}",
            )
        bounds[name] = value

    if len(bounds) == 2 and bounds["weight_min_kg"] > bounds["weight_max_kg"]:
        return ValidationFailure(
            code="INVALID_WEIGHT_RANGE",
            message="weight_min_kg must not exceed weight_max_kg",
            reason=f"{bounds['weight_min_kg']} > {bounds['weight_max_kg']}",
        )

    if len(currency) != 3 or not currency.isalpha():
        return ValidationFailure(
            code="INVALID_CURRENCY",
            message=f"Currency must be a 3-letter ISO 4217 code, got {currency!r}",
        )

    return None
