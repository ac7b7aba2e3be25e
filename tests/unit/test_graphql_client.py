"""Tests for GraphQLClient.

Verifies:
- execute() returns the "data" portion of a successful response.
- Variables are included in the payload only when provided.
- GraphQL-level errors raise GraphQLError, with NOT_FOUND detection.
- Non-200 status and transport failures raise UpstreamAPIError.
- mutate() wraps its input as the ``$input`` variable.
"""

import json

import httpx
import pytest

from projects_mcp.connectors.exceptions import GraphQLError, UpstreamAPIError
from projects_mcp.connectors.graphql import GraphQLClient

from tests.fakes import GRAPHQL_URL

pytestmark = pytest.mark.asyncio


@pytest.fixture
def client(http_client):
    return GraphQLClient(endpoint=GRAPHQL_URL, http_client=http_client)


class TestGraphQLClientExecute:
    """Tests for GraphQLClient.execute()."""

    async def test_execute_success(self, client, fake_github):
        fake_github.add_graphql({"viewer": {"login": "octo"}})

        result = await client.execute("query { viewer { login } }")

        assert result == {"viewer": {"login": "octo"}}
        assert len(fake_github.calls("POST", "/graphql")) == 1

    async def test_execute_with_variables(self, client, fake_github):
        fake_github.add_graphql({"repository": {"issue": {"id": "I_1"}}})

        await client.execute("query($n: Int!) { x }", variables={"n": 7})

        payload = fake_github.graphql_payloads()[0]
        assert payload["variables"] == {"n": 7}
        assert "query" in payload

    async def test_no_variables_omitted_from_payload(self, client, fake_github):
        fake_github.add_graphql({"ok": True})

        await client.execute("query { ok }")

        assert "variables" not in fake_github.graphql_payloads()[0]

    async def test_graphql_error(self, client, fake_github):
        fake_github.add_graphql(
            None,
            errors=[
                {"type": "NOT_FOUND", "message": "Could not resolve to a Repository with the name 'acme/nope'."},
            ],
        )

        with pytest.raises(GraphQLError, match="GraphQL error") as exc_info:
            await client.execute("query { x }")

        assert exc_info.value.is_not_found is True
        assert exc_info.value.status_code == 200

    async def test_graphql_error_other_type(self, client, fake_github):
        fake_github.add_graphql(None, errors=[{"type": "FORBIDDEN", "message": "nope"}])

        with pytest.raises(GraphQLError) as exc_info:
            await client.execute("query { x }")

        assert exc_info.value.is_not_found is False

    async def test_empty_data(self, client, fake_github):
        fake_github.add("POST", "/graphql", json_body={"something_else": True})

        assert await client.execute("query { x }") == {}

    async def test_http_error_status(self, client, fake_github):
        fake_github.add("POST", "/graphql", status_code=502, text="bad gateway")

        with pytest.raises(UpstreamAPIError) as exc_info:
            await client.execute("query { x }")

        assert exc_info.value.status_code == 502
        assert exc_info.value.response_body == "bad gateway"

    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = GraphQLClient(endpoint=GRAPHQL_URL, http_client=http)
            with pytest.raises(UpstreamAPIError, match="GraphQL request failed"):
                await client.execute("query { x }")


class TestGraphQLClientMutate:
    """Tests for GraphQLClient.mutate()."""

    async def test_mutate_wraps_input(self, client, fake_github):
        fake_github.add_graphql({"addProjectV2ItemById": {"item": {"id": "PVTI_1"}}})

        data = await client.mutate("mutation($input: X!) { y }", {"projectId": "P", "contentId": "C"})

        assert data["addProjectV2ItemById"]["item"]["id"] == "PVTI_1"
        sent = json.loads(fake_github.calls()[0].content)
        assert sent["variables"] == {"input": {"projectId": "P", "contentId": "C"}}
