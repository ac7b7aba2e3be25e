"""Test configuration and fixtures."""

import os
from unittest.mock import AsyncMock

# Set test environment variables BEFORE importing the package
os.environ["ENVIRONMENT"] = "test"

import httpx
import pytest
import pytest_asyncio

from projects_mcp.config import Settings
from projects_mcp.connectors.graphql import GraphQLClient
from projects_mcp.connectors.rest import ProjectsRestClient

from .fakes import API_URL, GRAPHQL_URL, FakeGitHub


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest_asyncio.fixture
async def http_client(fake_github):
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_github.handler))
    yield client
    await client.aclose()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        github_api_url=API_URL,
        github_graphql_url=GRAPHQL_URL,
        github_token="test-token",
    )


@pytest.fixture
def mock_rest():
    return AsyncMock(spec=ProjectsRestClient)


@pytest.fixture
def mock_graphql():
    return AsyncMock(spec=GraphQLClient)
