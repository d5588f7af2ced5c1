"""Catalog Repository Interface

Read-only lookups into the service, product and species catalogs.
"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.service import Service
from src.domain.product import Product


class CatalogRepository(ABC):
    """
    Repository interface for catalog lookups

    The billing engine never writes catalog records.
    """

    @abstractmethod
    async def get_service(self, service_id: int) -> Optional[Service]:
        """
        Retrieve a service by ID

        Args:
            service_id: Service ID

        Returns:
            Service if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_product(self, product_id: int) -> Optional[Product]:
        """
        Retrieve a product by ID

        Args:
            product_id: Product ID

        Returns:
            Product if found, None otherwise
        """
        pass

    @abstractmethod
    async def species_exists(self, species_id: int) -> bool:
        pass
