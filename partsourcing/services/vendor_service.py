"""
Vendor Service - Multi-Vendor Fan-Out Search

This service handles:
1. Parallel product search across every configured PartsTech vendor account
2. Per-vendor failure isolation (a failing vendor contributes no offers)
3. Offer normalisation and grouping by vendor
4. Presentation-mode filtering
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from partsourcing.adapters.partstech_graphql_client import PartsTechGraphQLClient
from partsourcing.adapters.partstech_queries import GET_PRODUCTS
from partsourcing.core.errors import SessionExpiredError
from partsourcing.schemas.sourcing import PartOffer, SearchMode, VendorGroup

logger = logging.getLogger(__name__)


@dataclass
class VendorFailure:
    vendor_account_id: str
    error: Exception


@dataclass
class FanOutResult:
    """Union of all vendor offers plus the vendors that failed"""
    offers: List[PartOffer] = field(default_factory=list)
    failures: List[VendorFailure] = field(default_factory=list)


def normalize_product(raw: Dict, account_id: str, vendor_name: str) -> PartOffer:
    """Map one raw GetProducts product onto a PartOffer"""
    availability = raw.get("availability") or {}
    quantity = availability.get("quantity") or 0
    brand = raw.get("brand") or {}

    store_location = None
    if availability.get("name"):
        store_location = availability["name"]
        if availability.get("address"):
            store_location = f"{store_location} - {availability['address']}"

    return PartOffer(
        partNumber=raw.get("partNumber") or "",
        partNumberId=raw.get("partNumberId"),
        brand=brand.get("name") or "Unknown",
        description=raw.get("title"),
        price=raw.get("price"),
        listPrice=raw.get("listPrice"),
        customerPrice=raw.get("customerPrice"),
        retailPrice=raw.get("listPrice"),
        coreCharge=raw.get("coreCharge"),
        quantityAvailable=quantity,
        stockStatus=f"In Stock ({quantity})" if quantity > 0 else "Not Available",
        storeLocation=store_location,
        availabilityType=availability.get("type"),
        stocked=raw.get("stocked"),
        sponsorType=raw.get("sponsorType"),
        attributes=raw.get("attributes") or [],
        images=raw.get("images") or [],
        vendorAccountId=account_id,
        vendorName=vendor_name,
    )


def apply_mode(offers: List[PartOffer], mode: SearchMode) -> List[PartOffer]:
    """
    Filter offers for presentation.

    manual: drop anything with zero availability.
    ai: pass everything through, backorderable items included.
    """
    if SearchMode(mode) == SearchMode.MANUAL:
        return [offer for offer in offers if offer.quantityAvailable > 0]
    return list(offers)


def group_offers_by_vendor(
    offers: List[PartOffer],
    vendor_names: Optional[Dict[str, str]] = None,
) -> List[VendorGroup]:
    """Group offers by vendor account, in order of first appearance"""
    vendor_names = vendor_names or {}
    groups: Dict[str, VendorGroup] = {}

    for offer in offers:
        account_id = offer.vendorAccountId
        if account_id not in groups:
            groups[account_id] = VendorGroup(
                vendor=vendor_names.get(account_id) or offer.vendorName or f"Vendor {account_id}",
                vendorAccountId=account_id,
                parts=[],
            )
        groups[account_id].parts.append(offer)

    return list(groups.values())


class VendorService:
    """Fans product searches out across the vendor roster"""

    def __init__(self, client: PartsTechGraphQLClient, vendor_accounts: Dict[str, str]):
        self.client = client
        self.vendor_accounts = dict(vendor_accounts)

    def vendor_name(self, account_id: str) -> str:
        return self.vendor_accounts.get(account_id) or f"Vendor {account_id}"

    async def search_vendor(
        self,
        account_id: str,
        vehicle_id: str,
        vin: str,
        part_type_ids: List[str],
        cookies: str,
    ) -> List[PartOffer]:
        """Search one vendor account; errors propagate to the caller"""
        variables = {
            "searchInput": {
                "partTypeAttribute": {
                    "accountId": account_id,
                    "partTypeIds": part_type_ids,
                    "vehicleId": vehicle_id,
                    "vin": vin,
                }
            }
        }
        data = await self.client.execute(GET_PRODUCTS, variables, "GetProducts", cookies)

        products = (data.get("products") or {}).get("products") or []
        name = self.vendor_name(account_id)
        return [normalize_product(p, account_id, name) for p in products]

    async def _search_isolated(self, account_id: str, *args) -> Union[List[PartOffer], Exception]:
        try:
            return await self.search_vendor(account_id, *args)
        except Exception as e:
            logger.warning(f"FAN-OUT: Vendor {account_id} search failed: {e}")
            return e

    async def search_vendors(
        self,
        vehicle_id: str,
        vin: str,
        part_type_ids: List[str],
        cookies: str,
    ) -> FanOutResult:
        """
        Search every vendor concurrently and wait for all of them.

        A vendor that fails contributes nothing and is recorded in `failures`.
        Only when *every* vendor failed with an expired session is
        SessionExpiredError raised, so the request-level retry can run.
        """
        account_ids = list(self.vendor_accounts)
        logger.info(f"FAN-OUT: Searching {len(account_ids)} vendors in parallel...")

        results = await asyncio.gather(*[
            self._search_isolated(account_id, vehicle_id, vin, part_type_ids, cookies)
            for account_id in account_ids
        ])

        outcome = FanOutResult()
        for account_id, result in zip(account_ids, results):
            if isinstance(result, Exception):
                outcome.failures.append(VendorFailure(account_id, result))
            else:
                outcome.offers.extend(result)

        if account_ids and len(outcome.failures) == len(account_ids) and all(
            isinstance(f.error, SessionExpiredError) for f in outcome.failures
        ):
            raise SessionExpiredError("Session expired for every vendor account")

        if outcome.failures:
            logger.warning(
                f"FAN-OUT: {len(outcome.failures)} of {len(account_ids)} vendors failed"
            )
        logger.info(f"FAN-OUT: Found {len(outcome.offers)} total parts across all vendors")
        return outcome

    async def search_all(
        self,
        vehicle_id: str,
        vin: str,
        part_type_ids: List[str],
        cookies: str,
    ) -> List[PartOffer]:
        """Flattened union of all vendor offers"""
        outcome = await self.search_vendors(vehicle_id, vin, part_type_ids, cookies)
        return outcome.offers
