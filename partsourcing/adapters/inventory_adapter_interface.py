"""
Inventory Adapter Interface

Abstract interface for the local parts inventory store.
This allows easy switching between the in-memory mock and MongoDB.
The sourcing engine only ever reads through this interface.
"""
from abc import ABC, abstractmethod
from typing import List

from partsourcing.models.inventory import FluidType
from partsourcing.schemas.sourcing import InventoryItem


class InventoryAdapterInterface(ABC):
    """Abstract interface for inventory adapters"""

    @abstractmethod
    async def search_by_description(
        self,
        term: str,
        in_stock_only: bool = True,
        limit: int = 20
    ) -> List[InventoryItem]:
        """
        Case-insensitive substring search on the part description.

        Args:
            term: Text that must appear in the description
            in_stock_only: Only return rows with quantity available
            limit: Maximum rows returned
        """
        pass

    @abstractmethod
    async def find_spec_verified(
        self,
        fluid_type: FluidType,
        keyword: str
    ) -> List[InventoryItem]:
        """
        In-stock items whose fluid specification is verified and whose
        declared fluid type or description matches the request.

        Returned items carry their `fluidSpec`.
        """
        pass

    @abstractmethod
    async def find_by_part_numbers(self, part_numbers: List[str]) -> List[InventoryItem]:
        """In-stock items whose part number equals one of `part_numbers`"""
        pass
