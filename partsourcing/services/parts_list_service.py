"""
Parts List Service

Drafts a generic parts list ("oil filter", "engine oil 0w20 synthetic") for
a set of services using the AI completion adapter, then prices every part.
"""
import asyncio
import logging
from typing import List, Tuple

from pydantic import ValidationError

from partsourcing.adapters.completion_adapter_interface import (
    CompletionAdapterInterface,
    parse_json_reply,
)
from partsourcing.core.errors import PartsListGenerationError
from partsourcing.schemas.sourcing import (
    PartRequest,
    ServiceItemSchema,
    ServiceWithParts,
    VehicleInfoSchema,
)
from partsourcing.services.pricing_service import PricingService

logger = logging.getLogger(__name__)


class PartsListService:

    def __init__(self, completion: CompletionAdapterInterface, pricing: PricingService):
        self.completion = completion
        self.pricing = pricing

    def build_prompt(self, vehicle: VehicleInfoSchema, services: List[ServiceItemSchema]) -> str:
        vehicle_line = f"{vehicle.year or ''} {vehicle.make or ''} {vehicle.model or ''}".strip()
        if vehicle.engine:
            vehicle_line += f" {vehicle.engine}"

        service_lines = "\n".join(
            f"{i}. {s.serviceName}{': ' + s.serviceDescription if s.serviceDescription else ''}"
            for i, s in enumerate(services, start=1)
        )

        return f"""You are an expert automotive service writer.

VEHICLE: {vehicle_line}

SERVICES TO PERFORM:
{service_lines}

For each service, list the parts needed. Use GENERIC descriptions (NOT brand names or part numbers).

Return JSON in this EXACT format:
{{
  "services": [
    {{
      "serviceName": "Engine oil change",
      "parts": [
        {{"description": "oil filter", "quantity": 1, "unit": "each", "notes": "Standard spin-on filter"}},
        {{"description": "engine oil 0w20 synthetic", "quantity": 5, "unit": "quarts", "notes": "Use manufacturer recommended grade"}}
      ]
    }}
  ]
}}

IMPORTANT RULES:
1. Use GENERIC descriptions only (e.g., "oil filter" NOT "Fram PH3614")
2. Include quantities and units (each, quarts, gallons, etc.)
3. Include common consumables (gaskets, clips, o-rings, fasteners)
4. Be specific about fluid specs (0W-20, DOT 3, ATF+4, etc.)
5. Return ONLY valid JSON, no markdown, no explanation
"""

    async def draft(self, vehicle: VehicleInfoSchema, services: List[ServiceItemSchema]) -> List[Tuple[str, List[PartRequest]]]:
        """
        Ask the AI for the parts each service needs.

        Raises:
            PartsListGenerationError: Reply is not the expected JSON shape
        """
        reply = await self.completion.complete(self.build_prompt(vehicle, services))

        try:
            data = parse_json_reply(reply)
            drafted = [
                (service["serviceName"], [PartRequest(**part) for part in service.get("parts") or []])
                for service in data["services"]
            ]
        except (AttributeError, ValueError, KeyError, TypeError, ValidationError) as e:
            logger.error(f"PARTS LIST: Failed to parse AI response: {(reply or '')[:500]}")
            raise PartsListGenerationError(f"Failed to parse AI response: {e}", raw_response=reply or "")

        logger.info(f"PARTS LIST: Generated parts for {len(drafted)} services")
        return drafted

    async def generate(self, vehicle: VehicleInfoSchema, services: List[ServiceItemSchema]) -> List[ServiceWithParts]:
        drafted = await self.draft(vehicle, services)

        async def _price(name: str, parts: List[PartRequest]) -> ServiceWithParts:
            return ServiceWithParts(serviceName=name, parts=await self.pricing.price_parts(vehicle, parts))

        return list(await asyncio.gather(*[_price(name, parts) for name, parts in drafted]))
