"""
Tests for the end-to-end sourcing pipeline: response shape, error codes and
the single session retry.
"""
import json

import httpx
import pytest

from partsourcing.core.errors import AuthFailedError, SessionExpiredError
from partsourcing.schemas.sourcing import SearchMode
from tests.conftest import TEST_VIN, FakeClock, make_product


class TestSearchSuccess:

    async def test_two_of_three_vendors_answer(self, sourcing_service, marketplace):
        """Vendors returning 2/0/1 offers (the empty one erroring)."""
        marketplace.products = {
            "1": [make_product("A1"), make_product("A2")],
            "70468": httpx.Response(500),
            "139607": [make_product("C1")],
        }

        response = await sourcing_service.search(TEST_VIN, "oil filter", SearchMode.MANUAL)

        assert response["success"] is True
        assert response["totalVendors"] == 2
        assert response["totalParts"] == 3
        assert response["failedVendors"] == 1
        assert response["vehicle"]["vin"] == TEST_VIN
        assert response["partType"] == {"id": "5340", "name": "Oil Filter"}
        assert response["mode"] == "manual"
        assert [v["vendor"] for v in response["vendors"]] == ["PartsTech Catalog", "Vendor 2"]
        assert "duration" in response and "timestamp" in response

    async def test_manual_mode_hides_unavailable(self, sourcing_service, marketplace):
        marketplace.products = {"1": [make_product("A1", quantity=0), make_product("A2", quantity=2)]}

        response = await sourcing_service.search(TEST_VIN, "oil filter", SearchMode.MANUAL)

        assert response["totalParts"] == 1
        assert response["vendors"][0]["parts"][0]["partNumber"] == "A2"

    async def test_ai_mode_keeps_backorders(self, sourcing_service, marketplace):
        marketplace.products = {"1": [make_product("A1", quantity=0), make_product("A2", quantity=2)]}

        response = await sourcing_service.search(TEST_VIN, "oil filter", SearchMode.AI)

        assert response["totalParts"] == 2

    async def test_no_offers_is_still_success(self, sourcing_service):
        response = await sourcing_service.search(TEST_VIN, "oil filter")

        assert response["success"] is True
        assert response["totalVendors"] == 0
        assert response["vendors"] == []

    async def test_two_searches_share_one_login(self, sourcing_service, session_manager):
        await sourcing_service.search(TEST_VIN, "oil filter")
        await sourcing_service.search(TEST_VIN, "oil filter")

        assert session_manager.login_count == 1


class TestSearchFailures:

    async def test_unknown_search_term(self, sourcing_service):
        response = await sourcing_service.search(TEST_VIN, "flux capacitor")

        assert response["success"] is False
        assert response["error"]["code"] == "PART_TYPE_NOT_FOUND"
        assert "flux capacitor" in response["error"]["message"]
        assert "duration" in response

    async def test_unknown_vin(self, sourcing_service, marketplace):
        marketplace.vehicles = []

        response = await sourcing_service.search(TEST_VIN, "oil filter")

        assert response["error"]["code"] == "VIN_NOT_FOUND"

    async def test_graphql_error_is_not_retried(self, sourcing_service, marketplace, session_manager):
        marketplace.graphql_errors["GetTypeahead"] = "Unknown argument search"

        response = await sourcing_service.search(TEST_VIN, "oil filter")

        assert response["error"] == {"code": "SEARCH_FAILED", "message": "Unknown argument search"}
        assert session_manager.login_count == 1

    async def test_vendor_graphql_errors_are_swallowed(self, sourcing_service, marketplace):
        marketplace.graphql_errors["GetProducts"] = "bad query"

        response = await sourcing_service.search(TEST_VIN, "oil filter")

        assert response["success"] is True
        assert response["failedVendors"] == 3
        assert response["totalParts"] == 0

    async def test_login_failure(self, sourcing_service, session_manager):
        async def fail():
            raise AuthFailedError("Login failed - essential cookies not found")

        session_manager._perform_login = fail

        response = await sourcing_service.search(TEST_VIN, "oil filter")

        assert response["error"]["code"] == "AUTH_FAILED"
        assert session_manager.login_count == 0

    async def test_slow_failure_is_reported_as_timeout(self, sourcing_service, marketplace):
        clock = FakeClock()
        sourcing_service.clock = clock
        marketplace.vehicles = []

        original_resolve = sourcing_service.vin_decoder.resolve

        async def slow_resolve(vin, cookies):
            clock.advance(61)
            return await original_resolve(vin, cookies)

        sourcing_service.vin_decoder.resolve = slow_resolve

        response = await sourcing_service.search(TEST_VIN, "oil filter")

        assert response["error"]["code"] == "TIMEOUT"
        assert "No vehicle found" in response["error"]["message"]


    async def test_malformed_typeahead_is_structured_part_type_miss(self, sourcing_service, marketplace):
        marketplace.typeahead["oil filter"] = [{"item": {"__typename": "PartTypeGroup", "partTypes": "oops"}}]

        response = await sourcing_service.search(TEST_VIN, "oil filter")

        assert response["success"] is False
        assert response["error"]["code"] == "PART_TYPE_NOT_FOUND"

    async def test_list_shaped_body_is_structured_error(self, sourcing_service, marketplace):
        original = marketplace.handler

        def handler(request):
            if json.loads(request.content)["operationName"] == "GetTypeahead":
                return httpx.Response(200, json=[{"message": "weird"}])
            return original(request)

        sourcing_service.part_types.client._transport = httpx.MockTransport(handler)

        response = await sourcing_service.search(TEST_VIN, "oil filter")

        assert response["success"] is False
        assert response["error"]["code"] == "NETWORK_ERROR"

    async def test_list_shaped_vendor_body_counts_as_vendor_failure(self, sourcing_service, marketplace):
        marketplace.products = {
            "1": [make_product("A1")],
            "70468": httpx.Response(200, json=[{"message": "weird"}]),
        }

        response = await sourcing_service.search(TEST_VIN, "oil filter")

        assert response["success"] is True
        assert response["totalParts"] == 1
        assert response["failedVendors"] == 1


class TestSessionRetry:

    async def test_single_expiry_is_retried(self, sourcing_service, marketplace, session_manager):
        marketplace.unauthorized_remaining = 1
        marketplace.products = {"1": [make_product("A1")]}

        response = await sourcing_service.search(TEST_VIN, "oil filter")

        assert response["success"] is True
        assert response["totalParts"] == 1
        assert session_manager.login_count == 2

    async def test_retry_is_bounded(self, sourcing_service, marketplace, session_manager):
        """Every query expiring yields one re-run, then a fatal error."""
        marketplace.unauthorized_remaining = 10_000

        response = await sourcing_service.search(TEST_VIN, "oil filter")

        assert response["success"] is False
        assert response["error"]["code"] == "SESSION_EXPIRED"
        assert session_manager.login_count == 2
        assert marketplace.calls == ["GetVehiclesByPlateVin", "GetVehiclesByPlateVin"]

    async def test_all_vendors_expired_triggers_retry(self, sourcing_service, marketplace, session_manager):
        # VIN decode and typeahead succeed, then all three vendor calls expire once
        state = {"expired": 0}

        def handler(request):
            operation = json.loads(request.content)["operationName"]
            if operation == "GetProducts" and state["expired"] < 3:
                state["expired"] += 1
                return httpx.Response(401)
            return marketplace.handler(request)

        sourcing_service.vendors.client._transport = httpx.MockTransport(handler)
        marketplace.products = {"1": [make_product("A1")]}

        response = await sourcing_service.search(TEST_VIN, "oil filter")

        assert response["success"] is True
        assert response["totalParts"] == 1
        assert session_manager.login_count == 2

    async def test_run_raises_after_second_expiry(self, sourcing_service, marketplace):
        marketplace.unauthorized_remaining = 10_000

        with pytest.raises(SessionExpiredError):
            await sourcing_service.run(TEST_VIN, "oil filter")
