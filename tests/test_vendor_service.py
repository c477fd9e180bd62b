"""
Tests for the vendor fan-out, offer normalisation, grouping and the mode
filter.
"""
import httpx
import pytest

from partsourcing.core.errors import SessionExpiredError
from partsourcing.schemas.sourcing import SearchMode
from partsourcing.services.vendor_service import (
    apply_mode,
    group_offers_by_vendor,
    normalize_product,
)
from tests.conftest import TEST_VIN, VENDOR_ACCOUNTS, make_offer, make_product


class TestNormalizeProduct:

    def test_maps_marketplace_fields(self):
        offer = normalize_product(make_product("PH3614", quantity=4, price=6.5, list_price=9.99), "70468", "O'Reilly Auto Parts")

        assert offer.partNumber == "PH3614"
        assert offer.brand == "Fram"
        assert offer.description == "Oil Filter"
        assert offer.price == 6.5
        assert offer.listPrice == 9.99
        assert offer.quantityAvailable == 4
        assert offer.stockStatus == "In Stock (4)"
        assert offer.storeLocation == "Store 12 - 100 Main St"
        assert offer.availabilityType == "MAIN"
        assert offer.vendorAccountId == "70468"
        assert offer.vendorName == "O'Reilly Auto Parts"
        assert offer.images[0].full == "f.jpg"

    def test_missing_availability_and_brand(self):
        raw = {"partNumber": "X1", "title": "Thing", "price": 1.0}

        offer = normalize_product(raw, "1", "PartsTech Catalog")

        assert offer.quantityAvailable == 0
        assert offer.stockStatus == "Not Available"
        assert offer.storeLocation is None
        assert offer.brand == "Unknown"


class TestModeFilter:

    def offers(self):
        return [
            make_offer("A", quantity=3),
            make_offer("B", quantity=0),
            make_offer("C", quantity=1),
        ]

    def test_manual_drops_unavailable(self):
        assert [o.partNumber for o in apply_mode(self.offers(), SearchMode.MANUAL)] == ["A", "C"]

    def test_manual_is_idempotent(self):
        once = apply_mode(self.offers(), SearchMode.MANUAL)
        assert apply_mode(once, SearchMode.MANUAL) == once

    def test_ai_is_identity(self):
        offers = self.offers()
        assert apply_mode(offers, SearchMode.AI) == offers

    def test_accepts_plain_strings(self):
        assert len(apply_mode(self.offers(), "manual")) == 2


class TestGrouping:

    def test_groups_in_first_appearance_order(self):
        offers = [
            make_offer("A", account_id="70468", vendor_name="O'Reilly Auto Parts"),
            make_offer("B", account_id="1", vendor_name="PartsTech Catalog"),
            make_offer("C", account_id="70468", vendor_name="O'Reilly Auto Parts"),
        ]

        groups = group_offers_by_vendor(offers, VENDOR_ACCOUNTS)

        assert [g.vendorAccountId for g in groups] == ["70468", "1"]
        assert [p.partNumber for p in groups[0].parts] == ["A", "C"]

    def test_unknown_account_gets_placeholder_name(self):
        groups = group_offers_by_vendor([make_offer("A", account_id="555", vendor_name="")], {})
        assert groups[0].vendor == "Vendor 555"


class TestFanOut:

    async def test_failing_vendor_is_isolated(self, vendor_service, marketplace):
        marketplace.products = {
            "1": [make_product("A1"), make_product("A2")],
            "70468": httpx.Response(500),
            "139607": [make_product("C1")],
        }

        outcome = await vendor_service.search_vendors("301455", TEST_VIN, ["5340"], "sid-prod=abc")

        assert sorted(o.partNumber for o in outcome.offers) == ["A1", "A2", "C1"]
        assert [f.vendor_account_id for f in outcome.failures] == ["70468"]

    async def test_every_vendor_is_queried(self, vendor_service, marketplace):
        await vendor_service.search_all("301455", TEST_VIN, ["5340"], "sid-prod=abc")
        assert marketplace.calls.count("GetProducts") == len(VENDOR_ACCOUNTS)

    async def test_offers_tagged_with_vendor(self, vendor_service, marketplace):
        marketplace.products = {"70468": [make_product("B1")]}

        offers = await vendor_service.search_all("301455", TEST_VIN, ["5340"], "sid-prod=abc")

        assert offers[0].vendorAccountId == "70468"
        assert offers[0].vendorName == "O'Reilly Auto Parts"

    async def test_all_vendors_failing_yields_empty_union(self, vendor_service, marketplace):
        marketplace.fail_with = 502

        outcome = await vendor_service.search_vendors("301455", TEST_VIN, ["5340"], "sid-prod=abc")

        assert outcome.offers == []
        assert len(outcome.failures) == len(VENDOR_ACCOUNTS)

    async def test_all_vendors_expired_raises(self, vendor_service, marketplace):
        marketplace.unauthorized_remaining = len(VENDOR_ACCOUNTS)

        with pytest.raises(SessionExpiredError):
            await vendor_service.search_vendors("301455", TEST_VIN, ["5340"], "sid-prod=abc")

    async def test_partial_expiry_is_swallowed(self, vendor_service, marketplace):
        marketplace.products = {
            "1": httpx.Response(401),
            "70468": [make_product("B1")],
            "139607": httpx.Response(403),
        }

        outcome = await vendor_service.search_vendors("301455", TEST_VIN, ["5340"], "sid-prod=abc")

        assert [o.partNumber for o in outcome.offers] == ["B1"]
        assert len(outcome.failures) == 2
