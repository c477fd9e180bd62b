"""
VIN Decoder Service - PartsTech Vehicle Lookup

Resolves a VIN into the vehicle identity the PartsTech catalog uses for
product searches. The first vehicle returned is used; the catalog query has
no disambiguation step.
"""
import logging
from typing import Dict

from partsourcing.adapters.partstech_graphql_client import PartsTechGraphQLClient
from partsourcing.adapters.partstech_queries import GET_VEHICLES_BY_VIN
from partsourcing.core.errors import (
    PartsSourcingError,
    SessionExpiredError,
    VinInvalidError,
    VinNotFoundError,
)
from partsourcing.schemas.sourcing import VehicleIdentity

logger = logging.getLogger(__name__)


class VINDecoderService:
    """Service for decoding VINs through the PartsTech catalog"""

    def __init__(self, client: PartsTechGraphQLClient):
        self.client = client

    async def resolve(self, vin: str, cookies: str) -> VehicleIdentity:
        """
        Decode VIN into a catalog vehicle.

        Args:
            vin: Vehicle Identification Number, passed through unchanged
            cookies: Session cookie string

        Returns:
            VehicleIdentity whose `vin` equals the input

        Raises:
            VinNotFoundError: Catalog returned no vehicles
            VinInvalidError: The decode call itself failed
            SessionExpiredError: Propagated so the request can be retried
        """
        logger.info(f"PARTSTECH VIN: Decoding {vin}")

        try:
            data = await self.client.execute(
                GET_VEHICLES_BY_VIN, {"vin": vin}, "GetVehiclesByPlateVin", cookies
            )
        except SessionExpiredError:
            raise
        except PartsSourcingError as e:
            raise VinInvalidError(f"VIN decode failed: {e.message}") from e

        vehicles = data.get("vehicles") or []
        if not vehicles:
            raise VinNotFoundError(f"No vehicle found for VIN: {vin}")

        if len(vehicles) > 1:
            logger.info(f"PARTSTECH VIN: {len(vehicles)} vehicles returned, using the first")

        try:
            vehicle = self._parse_vehicle(vin, vehicles[0])
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise VinInvalidError(f"VIN decode failed: {e}") from e

        logger.info(f"PARTSTECH VIN: Vehicle found: {vehicle.year} {vehicle.make} {vehicle.model}")
        return vehicle

    def _parse_vehicle(self, vin: str, raw: Dict) -> VehicleIdentity:
        """
        PartsTech returns nested name objects:
        {"id": 1, "year": 2003, "make": {"name": "Honda"}, "model": {...}, "engine": {...}}
        """
        engine = raw.get("engine") or {}
        return VehicleIdentity(
            id=raw["id"],
            vin=vin,
            year=raw.get("year"),
            make=raw["make"]["name"],
            model=raw["model"]["name"],
            engine=engine.get("name"),
        )
