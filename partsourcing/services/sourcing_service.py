"""
Sourcing Service - Multi-Vendor Parts Search

Orchestrates one sourcing request:
session -> VIN decode -> part type lookup -> vendor fan-out -> mode filter

An expired session anywhere in the pipeline invalidates the cached session
and re-runs the whole pipeline once. A second expiry is returned to the
caller as a failure.
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from partsourcing.adapters.partstech_session import PartsTechSessionManager
from partsourcing.core.errors import (
    ErrorCode,
    PartsSourcingError,
    PartTypeNotFoundError,
    SessionExpiredError,
)
from partsourcing.schemas.sourcing import PartOffer, PartType, SearchMode, VehicleIdentity
from partsourcing.services.part_type_service import PartTypeService
from partsourcing.services.vendor_service import (
    VendorFailure,
    VendorService,
    apply_mode,
    group_offers_by_vendor,
)
from partsourcing.services.vin_decoder_service import VINDecoderService

logger = logging.getLogger(__name__)

MAX_SESSION_RETRIES = 1


@dataclass
class SourcingResult:
    vehicle: VehicleIdentity
    part_type: PartType
    mode: SearchMode
    offers: List[PartOffer] = field(default_factory=list)
    failures: List[VendorFailure] = field(default_factory=list)


class SourcingService:
    """Runs the full resolve -> fan-out pipeline for a VIN and search term"""

    def __init__(
        self,
        session: PartsTechSessionManager,
        vin_decoder: VINDecoderService,
        part_types: PartTypeService,
        vendors: VendorService,
        timeout_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session = session
        self.vin_decoder = vin_decoder
        self.part_types = part_types
        self.vendors = vendors
        self.timeout_seconds = timeout_seconds
        self.clock = clock

    async def run(self, vin: str, search_term: str, mode: SearchMode = SearchMode.MANUAL) -> SourcingResult:
        """
        Run the pipeline, retrying once on an expired session.

        Raises:
            PartsSourcingError: Any fatal failure (including a second expiry)
        """
        attempt = 0
        while True:
            try:
                return await self._run_once(vin, search_term, SearchMode(mode))
            except SessionExpiredError:
                if attempt >= MAX_SESSION_RETRIES:
                    logger.error("PARTSTECH SESSION: Session expired again after refresh, giving up")
                    raise
                attempt += 1
                logger.warning(f"PARTSTECH SESSION: Session expired, retrying with a fresh session "
                               f"(attempt {attempt + 1})")
                self.session.invalidate()

    async def _run_once(self, vin: str, search_term: str, mode: SearchMode) -> SourcingResult:
        cookies = await self.session.ensure_session()

        vehicle = await self.vin_decoder.resolve(vin, cookies)

        part_type = await self.part_types.resolve(search_term, cookies)
        if part_type is None:
            raise PartTypeNotFoundError(f"Could not find part type for search term: {search_term}")

        outcome = await self.vendors.search_vendors(vehicle.id, vin, [part_type.id], cookies)

        return SourcingResult(
            vehicle=vehicle,
            part_type=part_type,
            mode=mode,
            offers=apply_mode(outcome.offers, mode),
            failures=outcome.failures,
        )

    async def search(self, vin: str, search_term: str, mode: SearchMode = SearchMode.MANUAL) -> Dict[str, Any]:
        """
        Caller-facing search. Never raises for sourcing failures.

        Returns:
            {"success": True, "vehicle", "vendors", "totalVendors", "totalParts", ...}
            or {"success": False, "error": {"code", "message"}, ...}
        """
        start_time = self.clock()
        logger.info(f'SOURCING: VIN {vin}, search "{search_term}", mode {SearchMode(mode).value}')

        try:
            result = await self.run(vin, search_term, mode)
        except PartsSourcingError as e:
            duration = self.clock() - start_time
            error = e.to_dict()
            if duration > self.timeout_seconds:
                error = {
                    "code": ErrorCode.TIMEOUT.value,
                    "message": f"Search timed out after {duration:.1f}s: {e.message}",
                }
            logger.error(f"SOURCING: Search failed [{error['code']}] {error['message']}")
            return {
                "success": False,
                "error": error,
                "duration": round(duration, 2),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }

        vendors = group_offers_by_vendor(result.offers, self.vendors.vendor_accounts)
        duration = self.clock() - start_time
        logger.info(f"SOURCING: {len(result.offers)} parts from {len(vendors)} vendors in {duration:.2f}s")

        return {
            "success": True,
            "vehicle": result.vehicle.model_dump(),
            "searchTerm": search_term,
            "partType": result.part_type.model_dump(),
            "mode": result.mode.value,
            "vendors": [group.model_dump() for group in vendors],
            "totalVendors": len(vendors),
            "totalParts": len(result.offers),
            "failedVendors": len(result.failures),
            "duration": round(duration, 2),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
