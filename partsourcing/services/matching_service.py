"""
Matching Service - Local Inventory Matching & Ranking

Turns one requested part (a generic description such as "engine oil 0w20")
plus the vendor offers found for it into a ranked list of pricing options:

1. Spec-matched inventory (verified fluid specs; OEM-approved first)
2. AI-matched inventory (only when nothing was spec-matched)
3. Inventory rows whose part number equals a vendor offer's part number
4. Vendor offers not already stocked: at most 1 same-make, the rest from
   other brands, capped at 4 vendor offers in total

An empty result is valid and means the part needs manual pricing.
"""
import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from partsourcing.adapters.completion_adapter_interface import (
    CompletionAdapterInterface,
    parse_json_reply,
)
from partsourcing.adapters.inventory_adapter_interface import InventoryAdapterInterface
from partsourcing.models.inventory import FluidType
from partsourcing.schemas.sourcing import InventoryItem, PartOffer, PricingOption

logger = logging.getLogger(__name__)

MAX_VENDOR_OPTIONS = 4
MAX_SAME_MAKE_OPTIONS = 1
MAX_AI_VENDOR_OFFERS = 5
MAX_AI_INVENTORY_CANDIDATES = 20

SOURCE_SPEC_MATCHED = "spec-matched-inventory"
SOURCE_AI_MATCHED = "ai-inventory-match-legacy"
SOURCE_INVENTORY = "inventory"
SOURCE_PARTSTECH = "partstech"


@dataclass(frozen=True)
class FluidKeyword:
    keyword: str
    fluid_type: FluidType
    search_term: str  # used by the broad inventory fallback
    needs_grade: bool = False


# Most specific first: "gear oil" must win over "oil". Bare "oil" only counts
# with a grade token ("0w20 oil"), so "oil pan gasket" is not a fluid.
FLUID_KEYWORDS: List[FluidKeyword] = [
    FluidKeyword("transmission fluid", FluidType.TRANSMISSION_FLUID, "transmission"),
    FluidKeyword("atf", FluidType.TRANSMISSION_FLUID, "atf"),
    FluidKeyword("brake fluid", FluidType.BRAKE_FLUID, "brake fluid"),
    FluidKeyword("power steering fluid", FluidType.POWER_STEERING_FLUID, "power steering"),
    FluidKeyword("differential fluid", FluidType.GEAR_OIL, "gear"),
    FluidKeyword("differential oil", FluidType.GEAR_OIL, "gear"),
    FluidKeyword("gear oil", FluidType.GEAR_OIL, "gear"),
    FluidKeyword("coolant", FluidType.COOLANT, "coolant"),
    FluidKeyword("antifreeze", FluidType.COOLANT, "coolant"),
    FluidKeyword("engine oil", FluidType.ENGINE_OIL, "oil"),
    FluidKeyword("motor oil", FluidType.ENGINE_OIL, "oil"),
    FluidKeyword("oil", FluidType.ENGINE_OIL, "oil", needs_grade=True),
]

VISCOSITY_PATTERNS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"\b(\d{1,2})\s*w\s*-?\s*(\d{2})\b", re.IGNORECASE), "{0}W-{1}"),
    (re.compile(r"\bdot\s*-?\s*(\d(?:\.\d)?)\b", re.IGNORECASE), "DOT {0}"),
    (re.compile(r"\batf(?:\s*\+\s*(\d))?", re.IGNORECASE), "ATF"),
]

# Vehicle make -> OEM approval code prefixes
OEM_APPROVAL_PREFIXES: Dict[str, List[str]] = {
    "chevrolet": ["GM-DEXOS"],
    "gmc": ["GM-DEXOS"],
    "buick": ["GM-DEXOS"],
    "cadillac": ["GM-DEXOS"],
    "gm": ["GM-DEXOS"],
    "ford": ["FORD-"],
    "lincoln": ["FORD-"],
    "mercury": ["FORD-"],
    "honda": ["HONDA-"],
    "acura": ["HONDA-"],
    "toyota": ["TOYOTA-"],
    "lexus": ["TOYOTA-"],
    "nissan": ["NISSAN-"],
    "infiniti": ["NISSAN-"],
    "chrysler": ["CHRYSLER-"],
    "dodge": ["CHRYSLER-"],
    "jeep": ["CHRYSLER-"],
    "ram": ["CHRYSLER-"],
    "bmw": ["BMW-"],
    "mini": ["BMW-"],
    "mercedes-benz": ["MB-"],
    "mercedes": ["MB-"],
    "volkswagen": ["VW-"],
    "audi": ["VW-"],
    "porsche": ["VW-", "PORSCHE-"],
}


def classify_fluid(description: str) -> Optional[FluidKeyword]:
    """
    Return the fluid keyword a description refers to, or None.

    Anything mentioning "filter" is never a fluid ("oil filter" is not oil).
    """
    text = (description or "").lower()
    if "filter" in text:
        return None
    for entry in FLUID_KEYWORDS:
        if not re.search(rf"\b{re.escape(entry.keyword)}\b", text):
            continue
        if entry.needs_grade and extract_viscosity(text) is None:
            continue
        return entry
    return None


def extract_viscosity(description: str) -> Optional[str]:
    """Pull a grade token such as "0W-20", "DOT 4" or "ATF+4" out of a description"""
    for pattern, template in VISCOSITY_PATTERNS:
        match = pattern.search(description or "")
        if not match:
            continue
        if template == "ATF":
            return f"ATF+{match.group(1)}" if match.group(1) else "ATF"
        return template.format(*(g.upper() for g in match.groups()))
    return None


def _normalize_grade(value: str) -> str:
    return re.sub(r"[\s\-]", "", value.upper())


def _contains_grade(outer: str, inner: str) -> bool:
    # "5W40" must not match inside "15W40"
    return re.search(rf"(?<!\d){re.escape(inner)}(?!\d)", outer) is not None


def viscosity_matches(requested: str, recorded: Optional[str]) -> bool:
    """Substring match in either direction, ignoring case, spaces and dashes"""
    if not recorded:
        return False
    wanted, have = _normalize_grade(requested), _normalize_grade(recorded)
    if not wanted or not have:
        return False
    return _contains_grade(have, wanted) or _contains_grade(wanted, have)


def oem_prefixes_for_make(make: Optional[str]) -> List[str]:
    make = (make or "").strip().lower()
    if not make:
        return []
    if make in OEM_APPROVAL_PREFIXES:
        return OEM_APPROVAL_PREFIXES[make]
    for key, prefixes in OEM_APPROVAL_PREFIXES.items():
        if make.startswith(key + " "):
            return prefixes
    return []


def matched_oem_approvals(approvals: List[str], prefixes: List[str]) -> List[str]:
    return [
        code for code in approvals
        if any(code.upper().startswith(prefix.upper()) for prefix in prefixes)
    ]


def inventory_option(item: InventoryItem, source: str, match_reason: Optional[str] = None) -> PricingOption:
    return PricingOption(
        partNumber=item.partNumber,
        description=item.description,
        brand=item.vendor,
        vendor=item.vendor,
        cost=item.cost,
        retailPrice=item.price,
        inStock=item.quantityAvailable > 0,
        quantity=item.quantityAvailable,
        isInventory=True,
        location=item.location,
        binLocation=item.binLocation,
        source=source,
        matchReason=match_reason,
    )


def offer_option(offer: PartOffer) -> PricingOption:
    cost = offer.price or 0.0
    retail = offer.listPrice or offer.retailPrice or (cost * 1.4 if cost else 0.0)
    return PricingOption(
        partNumber=offer.partNumber,
        description=offer.description,
        brand=offer.brand,
        vendor=offer.vendorName,
        cost=cost,
        retailPrice=retail,
        inStock=offer.quantityAvailable > 0,
        quantity=offer.quantityAvailable,
        isInventory=False,
        location=offer.storeLocation,
        images=offer.images,
        source=SOURCE_PARTSTECH,
    )


class MatchingService:
    """Ranks inventory and vendor offers for one requested part"""

    def __init__(
        self,
        inventory: InventoryAdapterInterface,
        completion: CompletionAdapterInterface,
        preferred_vendor: str = "",
    ):
        self.inventory = inventory
        self.completion = completion
        self.preferred_vendor = preferred_vendor

    async def build_pricing_options(
        self,
        part_description: str,
        offers: List[PartOffer],
        vehicle_make: Optional[str] = None,
    ) -> List[PricingOption]:
        """
        Produce the ranked options for one part.

        Inventory options are unlimited and always come first; vendor offers
        are capped at MAX_VENDOR_OPTIONS.
        """
        fluid = classify_fluid(part_description)
        offer_part_numbers = sorted({o.partNumber for o in offers if o.partNumber})

        if fluid is not None:
            spec_options, part_number_items = await asyncio.gather(
                self.find_spec_matched(part_description, fluid, vehicle_make),
                self.inventory.find_by_part_numbers(offer_part_numbers),
            )
        else:
            spec_options = []
            part_number_items = await self.inventory.find_by_part_numbers(offer_part_numbers)

        ai_options: List[PricingOption] = []
        if fluid is not None and not spec_options:
            ai_options = await self.find_ai_matched(part_description, fluid, offers)

        part_number_options = [
            inventory_option(item, SOURCE_INVENTORY, "Exact part number match with vendor catalog")
            for item in part_number_items
        ]

        options: List[PricingOption] = []
        stocked = set()
        for option in spec_options + ai_options + part_number_options:
            key = option.partNumber.upper()
            if key in stocked:
                continue
            stocked.add(key)
            options.append(option)

        inventory_count = len(options)
        vendor_candidates = [o for o in offers if o.partNumber.upper() not in stocked]
        options.extend(offer_option(o) for o in self.select_vendor_offers(vendor_candidates, vehicle_make))

        logger.info(
            f'MATCHING: "{part_description}" -> {len(options)} options ({inventory_count} inventory)'
        )
        return options

    async def find_spec_matched(
        self,
        part_description: str,
        fluid: FluidKeyword,
        vehicle_make: Optional[str],
    ) -> List[PricingOption]:
        """Verified-spec inventory, filtered by grade and ranked OEM first"""
        candidates = await self.inventory.find_spec_verified(fluid.fluid_type, fluid.keyword)

        grade = extract_viscosity(part_description)
        if grade:
            candidates = [
                item for item in candidates
                if viscosity_matches(grade, item.fluidSpec.viscosity if item.fluidSpec else None)
            ]

        prefixes = oem_prefixes_for_make(vehicle_make)
        scored = []
        for item in candidates:
            spec = item.fluidSpec
            approvals = matched_oem_approvals(spec.oemApprovals, prefixes) if spec else []
            scored.append((item, approvals))

        scored.sort(key=lambda pair: (
            not pair[1],
            -(pair[0].fluidSpec.confidenceScore if pair[0].fluidSpec else 0.0),
            pair[0].price,
        ))

        options = []
        for item, approvals in scored:
            spec = item.fluidSpec
            reasons = []
            if grade and spec.viscosity:
                reasons.append(f"Viscosity {spec.viscosity} matches {grade}")
            if approvals:
                reasons.append(f"OEM approved: {', '.join(approvals)}")
            reasons.append(f"Verified {fluid.fluid_type.value.replace('_', ' ')} spec "
                           f"({int(round(spec.confidenceScore * 100))}% confidence)")

            option = inventory_option(item, SOURCE_SPEC_MATCHED, "; ".join(reasons))
            options.append(option.model_copy(update={
                "isSpecMatched": True,
                "hasOemMatch": bool(approvals),
                "matchedOemApprovals": approvals,
                "viscosity": spec.viscosity,
                "apiClass": spec.apiServiceClass,
                "aceaClass": spec.aceaClass,
                "confidenceScore": spec.confidenceScore,
            }))

        if options:
            logger.info(f"MATCHING: {len(options)} spec-matched inventory items ({grade or 'any grade'})")
        return options

    async def find_ai_matched(
        self,
        part_description: str,
        fluid: FluidKeyword,
        offers: List[PartOffer],
    ) -> List[PricingOption]:
        """
        Broad description search for stock that was never spec-scanned,
        with the AI choosing the single best candidate (if any).
        """
        candidates = await self.inventory.search_by_description(
            fluid.search_term, in_stock_only=True, limit=MAX_AI_INVENTORY_CANDIDATES * 2
        )
        candidates = [
            item for item in candidates
            if "filter" not in item.description.lower() and item.quantityAvailable > 0
        ][:MAX_AI_INVENTORY_CANDIDATES]

        if not candidates:
            return []

        prompt = self.build_ai_match_prompt(part_description, offers[:MAX_AI_VENDOR_OFFERS], candidates)
        try:
            reply = await self.completion.complete(prompt)
        except Exception as e:
            logger.warning(f"MATCHING: AI inventory match failed: {e}")
            return []

        selection = self.parse_ai_selection(reply, len(candidates))
        if selection is None:
            return []

        index, reason = selection
        item = candidates[index]
        logger.info(f"MATCHING: AI selected inventory item {item.partNumber}")
        return [inventory_option(item, SOURCE_AI_MATCHED, reason)]

    def build_ai_match_prompt(
        self,
        part_description: str,
        offers: List[PartOffer],
        candidates: List[InventoryItem],
    ) -> str:
        offer_lines = "\n".join(
            f"- {o.brand} {o.partNumber}: {o.description or ''}" for o in offers
        ) or "- (none)"
        candidate_lines = "\n".join(
            f"{i}. {item.partNumber} - {item.description} ({item.vendor}, qty {item.quantityAvailable})"
            for i, item in enumerate(candidates, start=1)
        )
        return f"""You are an automotive parts specialist matching shop inventory to a required fluid.

PART NEEDED: {part_description}

VENDOR CATALOG OFFERS (for reference):
{offer_lines}

SHOP INVENTORY CANDIDATES:
{candidate_lines}

Decide whether one of the inventory candidates meets the required specification
(viscosity/grade, fluid type). Only select an item if it is a correct substitute.

Return ONLY valid JSON, no markdown:
{{"useInventory": true or false, "selectedInventoryIndex": <1-based index or null>, "reason": "<short reason>"}}
"""

    @staticmethod
    def parse_ai_selection(reply: str, candidate_count: int) -> Optional[Tuple[int, str]]:
        """
        Return (0-based index, reason) or None.
        Anything malformed counts as "no match".
        """
        try:
            data = parse_json_reply(reply)
        except ValueError:
            logger.warning("MATCHING: AI reply was not valid JSON, ignoring")
            return None

        if not isinstance(data, dict) or data.get("useInventory") is not True:
            return None

        index = data.get("selectedInventoryIndex")
        if isinstance(index, bool) or not isinstance(index, int):
            return None
        if not 1 <= index <= candidate_count:
            return None

        reason = data.get("reason")
        return index - 1, reason if isinstance(reason, str) and reason else "Selected by AI inventory match"

    def select_vendor_offers(self, offers: List[PartOffer], vehicle_make: Optional[str]) -> List[PartOffer]:
        """At most 1 same-make offer, others (preferred vendor first, then cheapest) fill to the cap"""
        make = (vehicle_make or "").strip().lower()

        same_make: List[PartOffer] = []
        other: List[PartOffer] = []
        for offer in offers:
            if make and (make in offer.brand.lower() or make in offer.vendorName.lower()):
                same_make.append(offer)
            else:
                other.append(offer)

        preferred = self.preferred_vendor.strip().lower()
        other.sort(key=lambda o: (
            not (preferred and preferred in o.vendorName.lower()),
            o.price if o.price is not None else float("inf"),
        ))

        selected = same_make[:MAX_SAME_MAKE_OPTIONS]
        selected += other[:MAX_VENDOR_OPTIONS - len(selected)]
        return selected
