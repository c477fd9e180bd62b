"""
Tests for the GraphQL client's failure classification.
"""
import json

import httpx
import pytest

from partsourcing.adapters.partstech_graphql_client import PartsTechGraphQLClient
from partsourcing.core.errors import (
    ErrorCode,
    NetworkError,
    SearchFailedError,
    SessionExpiredError,
)


def client_for(handler) -> PartsTechGraphQLClient:
    return PartsTechGraphQLClient(
        endpoint="https://partstech.test/graphql",
        transport=httpx.MockTransport(handler),
    )


async def run(handler):
    return await client_for(handler).execute("query Q { x }", {"a": 1}, "Q", "sid-prod=abc")


class TestExecute:

    async def test_returns_data_object(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            seen["cookie"] = request.headers["Cookie"]
            return httpx.Response(200, json={"data": {"x": 42}})

        data = await run(handler)

        assert data == {"x": 42}
        assert seen["body"] == {"query": "query Q { x }", "variables": {"a": 1}, "operationName": "Q"}
        assert seen["cookie"] == "sid-prod=abc"

    async def test_null_data_becomes_empty_dict(self):
        assert await run(lambda request: httpx.Response(200, json={"data": None})) == {}

    @pytest.mark.parametrize("status_code", [401, 403])
    async def test_auth_statuses_mean_session_expired(self, status_code):
        with pytest.raises(SessionExpiredError) as exc_info:
            await run(lambda request: httpx.Response(status_code))
        assert exc_info.value.code == ErrorCode.SESSION_EXPIRED

    @pytest.mark.parametrize("status_code", [400, 404, 500, 502])
    async def test_other_statuses_are_network_errors(self, status_code):
        with pytest.raises(NetworkError) as exc_info:
            await run(lambda request: httpx.Response(status_code))
        assert str(status_code) in exc_info.value.message

    async def test_transport_failure_is_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NetworkError):
            await run(handler)

    async def test_non_json_body_is_network_error(self):
        with pytest.raises(NetworkError):
            await run(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

    async def test_embedded_errors_are_search_failures(self):
        body = {"data": None, "errors": [{"message": "Unknown argument vin"}, {"message": "second"}]}

        with pytest.raises(SearchFailedError) as exc_info:
            await run(lambda request: httpx.Response(200, json=body))

        assert exc_info.value.message == "Unknown argument vin"
        assert exc_info.value.code == ErrorCode.SEARCH_FAILED
        assert len(exc_info.value.graphql_errors) == 2

    @pytest.mark.parametrize("body", [
        [{"message": "weird"}],
        "ok",
        {"data": ["not", "an", "object"]},
    ])
    async def test_non_object_payload_is_network_error(self, body):
        with pytest.raises(NetworkError) as exc_info:
            await run(lambda request: httpx.Response(200, json=body))
        assert exc_info.value.code == ErrorCode.NETWORK_ERROR

    async def test_non_list_errors_field_is_search_failure(self):
        body = {"data": None, "errors": {"message": "Rate limited"}}

        with pytest.raises(SearchFailedError) as exc_info:
            await run(lambda request: httpx.Response(200, json=body))

        assert exc_info.value.message == "Rate limited"
