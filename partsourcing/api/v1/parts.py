"""
Parts API Routes

Endpoints for multi-vendor sourcing and pricing:
- POST /search - Search every vendor for a part
- POST /pricing - Ranked pricing options for generic part descriptions
- POST /generate - AI-drafted parts list for services, priced
- GET/DELETE /session - Marketplace session status / invalidation
"""
import time
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status

from partsourcing.adapters.partstech_session import PartsTechSessionManager
from partsourcing.core.dependencies import (
    get_parts_list_service,
    get_pricing_service,
    get_session_manager,
    get_sourcing_service,
)
from partsourcing.core.errors import PartsListGenerationError
from partsourcing.schemas.sourcing import (
    GeneratePartsRequest,
    PartsPricingRequest,
    PartsSearchRequest,
)
from partsourcing.services.parts_list_service import PartsListService
from partsourcing.services.pricing_service import PricingService
from partsourcing.services.sourcing_service import SourcingService

router = APIRouter()


@router.post(
    "/search",
    summary="Search all vendors for a part",
    description="Decodes the VIN, maps the search term to a part type and queries every configured vendor account in parallel."
)
async def search_parts(
    request: PartsSearchRequest,
    sourcing: SourcingService = Depends(get_sourcing_service),
) -> Dict:
    """
    Multi-vendor parts search.

    **Modes:**
    - `manual`: only parts available now
    - `ai`: every offer, backorderable included

    **Returns:** `success: true` with vendors grouped, or `success: false`
    with an `error` of `{code, message}`.
    """
    return await sourcing.search(request.vin, request.searchTerm, request.mode)


@router.post(
    "/pricing",
    summary="Price generic parts",
    description="Ranks local inventory and vendor offers for each requested part."
)
async def price_parts(
    request: PartsPricingRequest,
    pricing: PricingService = Depends(get_pricing_service),
) -> Dict:
    start_time = time.time()
    parts = await pricing.price_parts(request.vehicle, request.parts)
    return {
        "vehicle": request.vehicle.model_dump(),
        "parts": [part.model_dump() for part in parts],
        "duration": round(time.time() - start_time, 2),
    }


@router.post(
    "/generate",
    summary="Generate a priced parts list for services",
    description="Drafts generic parts for each service with AI, then prices them."
)
async def generate_parts_list(
    request: GeneratePartsRequest,
    parts_list: PartsListService = Depends(get_parts_list_service),
) -> Dict:
    start_time = time.time()
    try:
        services = await parts_list.generate(request.vehicle, request.services)
    except PartsListGenerationError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e)
        )

    return {
        "success": True,
        "services": [service.model_dump() for service in services],
        "duration": round(time.time() - start_time, 2),
    }


def _session_status(session: PartsTechSessionManager) -> Dict:
    expires_at = session.expires_at
    return {
        "active": session.is_active,
        "expiresAt": expires_at.isoformat() if expires_at else None,
    }


@router.get("/session", summary="Marketplace session status")
async def get_session_status(
    session: PartsTechSessionManager = Depends(get_session_manager),
) -> Dict:
    return _session_status(session)


@router.delete("/session", summary="Invalidate the marketplace session")
async def invalidate_session(
    session: PartsTechSessionManager = Depends(get_session_manager),
) -> Dict:
    session.invalidate()
    return _session_status(session)
