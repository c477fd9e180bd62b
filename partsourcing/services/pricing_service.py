"""
Pricing Service

Prices a list of generic part descriptions for a vehicle. Each part is
sourced from the marketplace in manual mode and then ranked against local
inventory by the matching service. Parts are priced concurrently.
"""
import asyncio
import logging
from typing import List, Optional

from partsourcing.core.errors import PartsSourcingError
from partsourcing.schemas.sourcing import (
    PartOffer,
    PartRequest,
    PartWithPricing,
    SearchMode,
    VehicleInfoSchema,
)
from partsourcing.services.matching_service import MatchingService
from partsourcing.services.sourcing_service import SourcingService

logger = logging.getLogger(__name__)


def pricing_source(part: PartWithPricing) -> str:
    if not part.pricingOptions:
        return "none"
    return "inventory" if part.pricingOptions[0].isInventory else "partstech"


class PricingService:

    def __init__(self, sourcing: SourcingService, matching: MatchingService):
        self.sourcing = sourcing
        self.matching = matching

    async def _find_offers(self, vin: Optional[str], description: str) -> List[PartOffer]:
        """Marketplace offers for one part; a failed search just means no offers"""
        if not vin:
            return []
        try:
            result = await self.sourcing.run(vin, description, SearchMode.MANUAL)
        except PartsSourcingError as e:
            logger.warning(f'PRICING: Marketplace search failed for "{description}": {e}')
            return []
        return result.offers

    async def price_part(self, vehicle: VehicleInfoSchema, part: PartRequest) -> PartWithPricing:
        offers = await self._find_offers(vehicle.vin, part.description)
        options = await self.matching.build_pricing_options(part.description, offers, vehicle.make)

        priced = PartWithPricing(**part.model_dump(), pricingOptions=options)
        priced.source = pricing_source(priced)
        return priced

    async def price_parts(self, vehicle: VehicleInfoSchema, parts: List[PartRequest]) -> List[PartWithPricing]:
        logger.info(f"PRICING: Pricing {len(parts)} parts for {vehicle.year} {vehicle.make} {vehicle.model}")
        return list(await asyncio.gather(*[self.price_part(vehicle, part) for part in parts]))
