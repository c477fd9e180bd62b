"""
Service wiring - Factory Pattern

Builds the adapters and services selected by configuration. Each getter
returns a process-wide singleton and doubles as a FastAPI dependency, so
routes can be tested with `app.dependency_overrides`.
"""
from functools import lru_cache

from partsourcing.adapters.completion_adapter_interface import CompletionAdapterInterface
from partsourcing.adapters.completion_mock_adapter import CompletionMockAdapter
from partsourcing.adapters.inventory_adapter_interface import InventoryAdapterInterface
from partsourcing.adapters.inventory_mock_adapter import InventoryMockAdapter
from partsourcing.adapters.partstech_graphql_client import PartsTechGraphQLClient
from partsourcing.adapters.partstech_session import PartsTechSessionManager
from partsourcing.core.config import settings
from partsourcing.services.matching_service import MatchingService
from partsourcing.services.part_type_service import PartTypeService
from partsourcing.services.parts_list_service import PartsListService
from partsourcing.services.pricing_service import PricingService
from partsourcing.services.sourcing_service import SourcingService
from partsourcing.services.vendor_service import VendorService
from partsourcing.services.vin_decoder_service import VINDecoderService


@lru_cache
def get_session_manager() -> PartsTechSessionManager:
    return PartsTechSessionManager.from_settings()


@lru_cache
def get_graphql_client() -> PartsTechGraphQLClient:
    return PartsTechGraphQLClient.from_settings()


@lru_cache
def get_inventory_adapter() -> InventoryAdapterInterface:
    """
    Returns:
        Inventory adapter instance based on configuration
    """
    adapter_type = settings.INVENTORY_ADAPTER_TYPE

    if adapter_type == "mock":
        return InventoryMockAdapter()
    elif adapter_type == "mongo":
        from partsourcing.adapters.inventory_mongo_adapter import InventoryMongoAdapter
        return InventoryMongoAdapter()
    else:
        raise ValueError(f"Unknown inventory adapter type: {adapter_type}")


@lru_cache
def get_completion_adapter() -> CompletionAdapterInterface:
    """Gemini when selected and a key is configured, otherwise the mock"""
    if settings.AI_ADAPTER_TYPE == "gemini" and settings.GOOGLE_AI_API_KEY:
        from partsourcing.adapters.gemini_completion_adapter import GeminiCompletionAdapter
        return GeminiCompletionAdapter(settings.GOOGLE_AI_API_KEY, settings.GEMINI_MODEL)
    return CompletionMockAdapter()


@lru_cache
def get_sourcing_service() -> SourcingService:
    client = get_graphql_client()
    return SourcingService(
        session=get_session_manager(),
        vin_decoder=VINDecoderService(client),
        part_types=PartTypeService(client),
        vendors=VendorService(client, settings.PARTSTECH_VENDOR_ACCOUNTS),
        timeout_seconds=settings.SEARCH_TIMEOUT_SECONDS,
    )


@lru_cache
def get_matching_service() -> MatchingService:
    return MatchingService(
        inventory=get_inventory_adapter(),
        completion=get_completion_adapter(),
        preferred_vendor=settings.PREFERRED_VENDOR,
    )


@lru_cache
def get_pricing_service() -> PricingService:
    return PricingService(get_sourcing_service(), get_matching_service())


@lru_cache
def get_parts_list_service() -> PartsListService:
    return PartsListService(get_completion_adapter(), get_pricing_service())
