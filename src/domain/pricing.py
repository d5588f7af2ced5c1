"""Price rule selection

Pure function over a rule set: same rules and arguments, same answer.
"""

from decimal import Decimal
from typing import Iterable, Optional
from src.domain.price_rule import PriceRule


def select_price_rule(
    rules: Iterable[PriceRule],
    species_id: Optional[int] = None,
    weight_kg: Optional[Decimal] = None,
) -> Optional[PriceRule]:
    """
    Pick the single applicable rule

    Args:
        rules: Candidate rules for one service
        species_id: Patient species, if known
        weight_kg: Patient weight in kg, if known

    Returns:
        The most specific active matching rule, or None when nothing matches
    """
    candidates = [
        rule for rule in rules
        if rule.is_active and rule.matches(species_id, weight_kg)
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda rule: rule.precedence_key())
