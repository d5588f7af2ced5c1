"""Price Rule Repository Interface

Defines the contract for price rule persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Optional, List
from src.domain.price_rule import PriceRule


class PriceRuleRepository(ABC):
    """
    Repository interface for PriceRule persistence
    """

    @abstractmethod
    async def create(self, rule: PriceRule) -> PriceRule:
        """
        Create a new price rule

        Args:
            rule: PriceRule entity to persist

        Returns:
            Created PriceRule with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, rule_id: int) -> Optional[PriceRule]:
        pass

    @abstractmethod
    async def get_for_service(
        self, service_id: int, active_only: bool = False
    ) -> List[PriceRule]:
        """
        Retrieve the rules of one service

        Args:
            service_id: Service ID
            active_only: Skip rules with is_active=False

        Returns:
            Rules ordered by species (universal first), weight_min_kg, id
        """
        pass

    @abstractmethod
    async def list(
        self,
        service_id: Optional[int] = None,
        active_only: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> List[PriceRule]:
        pass

    @abstractmethod
    async def update(self, rule: PriceRule) -> PriceRule:
        pass

    @abstractmethod
    async def delete(self, rule: PriceRule) -> None:
        pass
