"""Tests for the MCP server binding."""

import json

import pytest

from projects_mcp.connectors.projects import ProjectsConnector
from projects_mcp.server import ProjectsMCPServer

pytestmark = pytest.mark.asyncio


@pytest.fixture
def server(http_client, test_settings):
    return ProjectsMCPServer(ProjectsConnector(http_client=http_client, settings=test_settings))


class TestProjectsMCPServer:
    """Tests for list_tools / call_tool."""

    async def test_list_tools(self, server):
        tools = await server.list_tools()

        assert len(tools) == 5
        assert "assign_issue_to_org_project" in {t.name for t in tools}

    async def test_call_tool_wraps_payload(self, server, fake_github):
        fake_github.add("DELETE", "/orgs/acme/projectsV2/1/items/5", status_code=204)

        content = await server.call_tool(
            "projects_write",
            {"method": "delete_project_item", "owner": "acme", "owner_type": "org", "project_number": 1, "item_id": 5},
        )

        assert len(content) == 1
        assert content[0].type == "text"
        assert json.loads(content[0].text) == {"message": "project item successfully deleted"}

    async def test_unknown_tool(self, server, fake_github):
        content = await server.call_tool("projects_archive", {})

        payload = json.loads(content[0].text)
        assert payload == {"error": "unknown tool: projects_archive", "error_type": "ProjectsValidationError"}
        assert fake_github.requests == []
