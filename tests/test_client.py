"""
Unit tests for the LinkedIn HTTP client (linkedin_mcp/client.py).

Covers the headers every call must carry, the three-way response body
decoding (empty / JSON / raw text) and the verbatim error reporting for
non-2xx statuses.
"""

import json

import httpx
import pytest

from linkedin_mcp.client import BodyKind, LinkedInClient, UpstreamResult, api_headers
from linkedin_mcp.credentials import Credential
from linkedin_mcp.errors import UpstreamError

CREDENTIAL = Credential(access_token="abc123")


class TestHeaders:
    def test_api_headers(self):
        assert api_headers("abc123", "202503") == {
            "Authorization": "Bearer abc123",
            "Content-Type": "application/json",
            "X-Restli-Protocol-Version": "2.0.0",
            "LinkedIn-Version": "202503",
        }

    async def test_every_call_sends_auth_and_version_headers(self, linkedin_api, linkedin_client):
        linkedin_api.respond("GET", "/v2/userinfo", json_body={"sub": "x"})

        await linkedin_client.call("GET", "/v2/userinfo", CREDENTIAL)

        headers = linkedin_api.last_request.headers
        assert headers["authorization"] == "Bearer abc123"
        assert headers["x-restli-protocol-version"] == "2.0.0"
        assert headers["linkedin-version"] == "202503"
        assert headers["content-type"] == "application/json"

    async def test_api_version_override(self, linkedin_api):
        client = LinkedInClient(api_version="202601", transport=httpx.MockTransport(linkedin_api.handle))
        linkedin_api.respond("GET", "/v2/userinfo", json_body={})

        await client.call("GET", "/v2/userinfo", CREDENTIAL)

        assert linkedin_api.last_request.headers["linkedin-version"] == "202601"


class TestDecoding:
    async def test_json_body(self, linkedin_api, linkedin_client):
        linkedin_api.respond("GET", "/rest/posts", json_body={"elements": [{"id": "1"}]})

        result = await linkedin_client.call("GET", "/rest/posts", CREDENTIAL)

        assert result.kind is BodyKind.JSON
        assert result.data == {"elements": [{"id": "1"}]}
        assert result.elements() == [{"id": "1"}]

    async def test_empty_body_keeps_status_and_headers(self, linkedin_api, linkedin_client):
        linkedin_api.respond("POST", "/rest/posts", status=201, headers={"X-RestLi-Id": "urn:li:share:42"})

        result = await linkedin_client.call("POST", "/rest/posts", CREDENTIAL, body={"commentary": "hi"})

        assert result.kind is BodyKind.EMPTY
        assert result.status == 201
        assert result.headers["x-restli-id"] == "urn:li:share:42"
        assert result.created_id() == "urn:li:share:42"
        assert result.payload()["_status"] == 201

    async def test_non_json_body_is_wrapped_as_raw(self, linkedin_api, linkedin_client):
        linkedin_api.respond("GET", "/rest/posts", text="<html>ok</html>")

        result = await linkedin_client.call("GET", "/rest/posts", CREDENTIAL)

        assert result.kind is BodyKind.RAW
        assert result.payload() == {"_raw": "<html>ok</html>"}
        assert result.elements() == []

    async def test_json_body_is_sent(self, linkedin_api, linkedin_client):
        linkedin_api.respond("POST", "/rest/posts", status=201)

        await linkedin_client.call("POST", "/rest/posts", CREDENTIAL, body={"commentary": "hi"})

        assert json.loads(linkedin_api.last_request.content) == {"commentary": "hi"}

    def test_created_id_falls_back_to_location_then_literal(self):
        assert UpstreamResult(status=201, headers={"location": "/posts/7"}).created_id() == "/posts/7"
        assert UpstreamResult(status=201).created_id() == "created"


class TestFailures:
    async def test_non_success_status_raises_with_raw_body(self, linkedin_api, linkedin_client):
        linkedin_api.respond("GET", "/v2/userinfo", status=401, text="unauthorized")

        with pytest.raises(UpstreamError) as exc_info:
            await linkedin_client.call("GET", "/v2/userinfo", CREDENTIAL)

        assert exc_info.value.status == 401
        assert exc_info.value.body == "unauthorized"
        assert str(exc_info.value) == "LinkedIn API 401: unauthorized"

    async def test_json_error_body_is_not_reparsed(self, linkedin_api, linkedin_client):
        body = {"status": 422, "message": "commentary too long"}
        linkedin_api.respond("POST", "/rest/posts", status=422, json_body=body)

        with pytest.raises(UpstreamError) as exc_info:
            await linkedin_client.call("POST", "/rest/posts", CREDENTIAL, body={})

        assert isinstance(exc_info.value.body, str)
        assert json.loads(exc_info.value.body) == body

    async def test_transport_errors_propagate(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = LinkedInClient(api_version="202503", transport=httpx.MockTransport(refuse))

        with pytest.raises(httpx.ConnectError):
            await client.call("GET", "/v2/userinfo", CREDENTIAL)
