"""
MongoDB Inventory Adapter

Reads `parts_inventory` and joins `fluid_specifications` (keyed by inventory
id) through Beanie. Requires init_db() to have run.
"""
import logging
import re
from typing import Dict, List, Optional

from beanie import PydanticObjectId
from beanie.operators import In, RegEx

from partsourcing.adapters.inventory_adapter_interface import InventoryAdapterInterface
from partsourcing.models.inventory import FluidSpecification, FluidType, InventoryPart
from partsourcing.schemas.sourcing import FluidSpec, InventoryItem

logger = logging.getLogger(__name__)


def _to_fluid_spec(spec: FluidSpecification) -> FluidSpec:
    return FluidSpec(
        fluidType=spec.fluid_type.value if spec.fluid_type else None,
        viscosity=spec.viscosity,
        apiServiceClass=spec.api_service_class,
        aceaClass=spec.acea_class,
        ilsacClass=spec.ilsac_class,
        oemApprovals=list(spec.oem_approvals or []),
        confidenceScore=spec.confidence_score or 0.0,
        isVerified=spec.is_verified,
    )


def _to_item(part: InventoryPart, spec: Optional[FluidSpecification] = None) -> InventoryItem:
    return InventoryItem(
        id=str(part.id),
        partNumber=part.part_number,
        description=part.description,
        vendor=part.vendor or "In-House",
        cost=part.cost or 0.0,
        price=part.price or 0.0,
        quantityAvailable=part.quantity_available or 0,
        location=part.location or "",
        binLocation=part.bin_location,
        fluidSpec=_to_fluid_spec(spec) if spec is not None else None,
    )


class InventoryMongoAdapter(InventoryAdapterInterface):
    """Inventory adapter backed by MongoDB (Beanie)"""

    async def search_by_description(
        self,
        term: str,
        in_stock_only: bool = True,
        limit: int = 20
    ) -> List[InventoryItem]:
        if not term or not term.strip():
            return []

        conditions = [RegEx(InventoryPart.description, re.escape(term.strip()), options="i")]
        if in_stock_only:
            conditions.append(InventoryPart.quantity_available > 0)

        parts = await InventoryPart.find(*conditions).limit(limit).to_list()
        return [_to_item(part) for part in parts]

    async def find_spec_verified(
        self,
        fluid_type: FluidType,
        keyword: str
    ) -> List[InventoryItem]:
        specs = await FluidSpecification.find(FluidSpecification.is_verified == True).to_list()  # noqa: E712
        spec_by_id: Dict[str, FluidSpecification] = {s.inventory_id: s for s in specs}

        object_ids = [PydanticObjectId(i) for i in spec_by_id if PydanticObjectId.is_valid(i)]
        if not object_ids:
            return []

        parts = await InventoryPart.find(
            In(InventoryPart.id, object_ids),
            InventoryPart.quantity_available > 0,
        ).to_list()

        keyword = keyword.lower()
        results = []
        for part in parts:
            spec = spec_by_id[str(part.id)]
            if spec.fluid_type == FluidType(fluid_type) or keyword in part.description.lower():
                results.append(_to_item(part, spec))

        logger.info(f"INVENTORY: {len(results)} verified {FluidType(fluid_type).value} candidates")
        return results

    async def find_by_part_numbers(self, part_numbers: List[str]) -> List[InventoryItem]:
        if not part_numbers:
            return []

        parts = await InventoryPart.find(
            In(InventoryPart.part_number, list(part_numbers)),
            InventoryPart.quantity_available > 0,
        ).to_list()
        return [_to_item(part) for part in parts]
