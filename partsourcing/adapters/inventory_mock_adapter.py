"""
Mock Inventory Adapter

In-memory implementation of the inventory store.
Ships a small stock of sample parts for development; tests pass their own.
"""
from typing import List, Optional

from partsourcing.adapters.inventory_adapter_interface import InventoryAdapterInterface
from partsourcing.models.inventory import FluidType
from partsourcing.schemas.sourcing import FluidSpec, InventoryItem


class InventoryMockAdapter(InventoryAdapterInterface):
    """Mock adapter for the local inventory"""

    SAMPLE_INVENTORY: List[InventoryItem] = [
        InventoryItem(
            id="inv-001",
            partNumber="MOB-0W20-5QT",
            description="Mobil 1 Full Synthetic Engine Oil 0W-20 5qt",
            vendor="Mobil",
            cost=27.50,
            price=42.99,
            quantityAvailable=12,
            location="Main",
            binLocation="A-01",
            fluidSpec=FluidSpec(
                fluidType=FluidType.ENGINE_OIL.value,
                viscosity="0W-20",
                apiServiceClass="SP",
                ilsacClass="GF-6A",
                oemApprovals=["GM-DEXOS1-G3"],
                confidenceScore=0.95,
                isVerified=True,
            ),
        ),
        InventoryItem(
            id="inv-002",
            partNumber="VAL-5W30-5QT",
            description="Valvoline MaxLife Engine Oil 5W-30 5qt",
            vendor="Valvoline",
            cost=19.25,
            price=32.99,
            quantityAvailable=8,
            location="Main",
            binLocation="A-02",
            fluidSpec=FluidSpec(
                fluidType=FluidType.ENGINE_OIL.value,
                viscosity="5W-30",
                apiServiceClass="SP",
                confidenceScore=0.9,
                isVerified=True,
            ),
        ),
        InventoryItem(
            id="inv-003",
            partNumber="PRS-DOT3-32",
            description="Prestone DOT 3 Brake Fluid 32oz",
            vendor="Prestone",
            cost=6.10,
            price=11.99,
            quantityAvailable=5,
            location="Main",
            binLocation="B-04",
        ),
        InventoryItem(
            id="inv-004",
            partNumber="PH3614",
            description="Oil Filter - Spin On",
            vendor="Fram",
            cost=4.25,
            price=9.99,
            quantityAvailable=20,
            location="Main",
            binLocation="C-11",
        ),
    ]

    def __init__(self, items: Optional[List[InventoryItem]] = None):
        self.items = list(self.SAMPLE_INVENTORY if items is None else items)

    async def search_by_description(
        self,
        term: str,
        in_stock_only: bool = True,
        limit: int = 20
    ) -> List[InventoryItem]:
        needle = term.lower().strip()
        if not needle:
            return []

        results = [
            item for item in self.items
            if needle in item.description.lower()
            and (not in_stock_only or item.quantityAvailable > 0)
        ]
        return results[:limit]

    async def find_spec_verified(
        self,
        fluid_type: FluidType,
        keyword: str
    ) -> List[InventoryItem]:
        keyword = keyword.lower()
        results = []
        for item in self.items:
            spec = item.fluidSpec
            if spec is None or not spec.isVerified or item.quantityAvailable <= 0:
                continue
            if spec.fluidType == FluidType(fluid_type).value or keyword in item.description.lower():
                results.append(item)
        return results

    async def find_by_part_numbers(self, part_numbers: List[str]) -> List[InventoryItem]:
        wanted = set(part_numbers)
        return [
            item for item in self.items
            if item.partNumber in wanted and item.quantityAvailable > 0
        ]
