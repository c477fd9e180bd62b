"""
Test configuration and fixtures for the parts sourcing test suite.

Provides:
- A scripted PartsTech GraphQL endpoint served through httpx.MockTransport
- A session manager whose browser login is replaced by a counter
- Factory functions for raw marketplace products and inventory rows
- Fully wired services over the in-memory inventory adapter
"""
import asyncio
import json
import time
from typing import Dict, List, Optional

import httpx
import pytest

from partsourcing.adapters.completion_adapter_interface import CompletionAdapterInterface
from partsourcing.adapters.inventory_mock_adapter import InventoryMockAdapter
from partsourcing.adapters.partstech_graphql_client import PartsTechGraphQLClient
from partsourcing.adapters.partstech_session import PartsTechSessionManager
from partsourcing.schemas.sourcing import FluidSpec, InventoryItem, PartOffer
from partsourcing.services.matching_service import MatchingService
from partsourcing.services.part_type_service import PartTypeService
from partsourcing.services.sourcing_service import SourcingService
from partsourcing.services.vendor_service import VendorService
from partsourcing.services.vin_decoder_service import VINDecoderService


TEST_VIN = "1HGCM82633A004352"

VENDOR_ACCOUNTS = {
    "1": "PartsTech Catalog",
    "70468": "O'Reilly Auto Parts",
    "139607": "Vendor 2",
}

LOGIN_COOKIES = [
    {"name": "sid-prod", "value": "abc123"},
    {"name": "_ga", "value": "GA1.2.3"},
]


# ---------------------------------------------------------------------------
# Marketplace fakes
# ---------------------------------------------------------------------------

def make_product(
    part_number: str,
    quantity: int = 3,
    price: float = 10.0,
    brand: str = "Fram",
    title: str = "Oil Filter",
    list_price: Optional[float] = None,
) -> Dict:
    """Raw GetProducts product, shaped like the marketplace sends it."""
    return {
        "partNumber": part_number,
        "partNumberId": f"{part_number}-id",
        "title": title,
        "brand": {"id": 1, "name": brand},
        "price": price,
        "listPrice": list_price,
        "customerPrice": None,
        "coreCharge": 0,
        "availability": {
            "quantity": quantity,
            "name": "Store 12",
            "address": "100 Main St",
            "type": "MAIN",
        },
        "attributes": [{"name": "Thread Size", "values": ["3/4-16"]}],
        "images": [{"preview": "p.jpg", "medium": "m.jpg", "full": "f.jpg"}],
        "stocked": True,
        "sponsorType": None,
    }


class FakeMarketplace:
    """Scripted PartsTech GraphQL endpoint."""

    def __init__(self):
        self.vehicles: List[Dict] = [{
            "id": 301455,
            "year": 2003,
            "make": {"id": 2, "name": "Honda"},
            "model": {"id": 9, "name": "Accord"},
            "engine": {"id": 4, "name": "3.0L V6"},
        }]
        self.typeahead: Dict[str, List[Dict]] = {
            "oil filter": [{"id": "1", "item": {"__typename": "PartType", "id": 5340, "name": "Oil Filter"}}],
        }
        # account id -> list of raw products, or an httpx.Response to return instead
        self.products: Dict[str, object] = {}
        self.unauthorized_remaining = 0
        self.fail_with: Optional[int] = None  # HTTP status for every request
        self.graphql_errors: Dict[str, str] = {}  # operation -> error message
        self.calls: List[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        operation = payload["operationName"]
        variables = payload["variables"]
        self.calls.append(operation)

        if self.fail_with is not None:
            return httpx.Response(self.fail_with)

        if self.unauthorized_remaining > 0:
            self.unauthorized_remaining -= 1
            return httpx.Response(401)

        if operation in self.graphql_errors:
            return httpx.Response(200, json={"data": None, "errors": [{"message": self.graphql_errors[operation]}]})

        if operation == "GetVehiclesByPlateVin":
            return httpx.Response(200, json={"data": {"vehicles": self.vehicles}})

        if operation == "GetTypeahead":
            suggestions = self.typeahead.get(variables["search"], [])
            return httpx.Response(200, json={"data": {"typeahead": suggestions}})

        if operation == "GetProducts":
            account_id = variables["searchInput"]["partTypeAttribute"]["accountId"]
            result = self.products.get(account_id, [])
            if isinstance(result, httpx.Response):
                return result
            return httpx.Response(200, json={"data": {"products": {"products": result}}})

        return httpx.Response(400, json={"errors": [{"message": f"Unknown operation {operation}"}]})


class StubLoginSessionManager(PartsTechSessionManager):
    """Session manager whose browser login only counts calls."""

    def __init__(self, cookies=None, clock=time.time, login_delay: float = 0):
        super().__init__(username="service@shop.test", password="secret", clock=clock)
        self.cookies = LOGIN_COOKIES if cookies is None else cookies
        self.login_delay = login_delay
        self.login_count = 0

    async def _perform_login(self):
        self.login_count += 1
        if self.login_delay:
            await asyncio.sleep(self.login_delay)
        return list(self.cookies)


class ScriptedCompletion(CompletionAdapterInterface):
    """AI adapter that replays canned replies and records prompts."""

    def __init__(self, *replies: str):
        self.replies = list(replies)
        self.prompts: List[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise AssertionError("Unexpected AI call")
        return self.replies.pop(0)


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def make_offer(
    part_number: str,
    vendor_name: str = "Vendor 2",
    brand: str = "Fram",
    price: float = 10.0,
    quantity: int = 2,
    account_id: str = "139607",
) -> PartOffer:
    return PartOffer(
        partNumber=part_number,
        brand=brand,
        description=f"{brand} {part_number}",
        price=price,
        quantityAvailable=quantity,
        vendorAccountId=account_id,
        vendorName=vendor_name,
    )


def make_fluid_item(
    part_number: str,
    description: str,
    viscosity: Optional[str],
    oem_approvals: Optional[List[str]] = None,
    confidence: float = 0.9,
    price: float = 40.0,
    fluid_type: str = "engine_oil",
    quantity: int = 6,
) -> InventoryItem:
    return InventoryItem(
        id=f"inv-{part_number}",
        partNumber=part_number,
        description=description,
        vendor="In-House",
        cost=price / 2,
        price=price,
        quantityAvailable=quantity,
        location="Main",
        fluidSpec=FluidSpec(
            fluidType=fluid_type,
            viscosity=viscosity,
            oemApprovals=oem_approvals or [],
            confidenceScore=confidence,
            isVerified=True,
        ),
    )


# ---------------------------------------------------------------------------
# Service fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def marketplace():
    return FakeMarketplace()


@pytest.fixture
def graphql_client(marketplace):
    return PartsTechGraphQLClient(
        endpoint="https://partstech.test/graphql",
        transport=httpx.MockTransport(marketplace.handler),
    )


@pytest.fixture
def session_manager():
    return StubLoginSessionManager()


@pytest.fixture
def vendor_service(graphql_client):
    return VendorService(graphql_client, VENDOR_ACCOUNTS)


@pytest.fixture
def sourcing_service(session_manager, graphql_client, vendor_service):
    return SourcingService(
        session=session_manager,
        vin_decoder=VINDecoderService(graphql_client),
        part_types=PartTypeService(graphql_client),
        vendors=vendor_service,
        timeout_seconds=60.0,
    )


@pytest.fixture
def inventory():
    return InventoryMockAdapter(items=[])


@pytest.fixture
def completion():
    return ScriptedCompletion()


@pytest.fixture
def matching_service(inventory, completion):
    return MatchingService(inventory, completion, preferred_vendor="O'Reilly")
