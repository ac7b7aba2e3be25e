"""Tests for FieldOptionResolver."""

import pytest

from projects_mcp.connectors.exceptions import (
    FieldNotFoundError,
    OptionNotFoundError,
    UpstreamAPIError,
)
from projects_mcp.projects.field_options import FieldOptionResolver
from projects_mcp.projects.models import OwnerKind, ProjectScope

from tests.fakes import PRIORITY_SIZE_FIELDS, rest_response

pytestmark = pytest.mark.asyncio

SCOPE = ProjectScope(owner="acme", project_number=1, owner_kind=OwnerKind.ORG)


@pytest.fixture
def resolver(mock_rest):
    mock_rest.list_project_fields.return_value = rest_response(200, PRIORITY_SIZE_FIELDS)
    return FieldOptionResolver(mock_rest)


class TestResolve:
    """Tests for resolve()."""

    async def test_resolves_option_and_field(self, resolver, mock_rest):
        assert await resolver.resolve(SCOPE, "Priority", "High") == ("opt1", 42)

        kind, owner, number, pagination = mock_rest.list_project_fields.await_args.args
        assert (kind, owner, number) == (OwnerKind.ORG, "acme", 1)
        assert pagination.per_page == 100

    async def test_second_field(self, resolver):
        assert await resolver.resolve(SCOPE, "Size", "Large") == ("s3", 43)

    async def test_unknown_option_names_field_and_option(self, resolver):
        with pytest.raises(OptionNotFoundError) as exc_info:
            await resolver.resolve(SCOPE, "Priority", "Medium")

        message = str(exc_info.value)
        assert "Medium" in message
        assert "Priority" in message

    async def test_unknown_field(self, resolver):
        with pytest.raises(FieldNotFoundError, match='field "Status" not found'):
            await resolver.resolve(SCOPE, "Status", "Done")

    async def test_names_are_case_sensitive(self, resolver):
        with pytest.raises(FieldNotFoundError):
            await resolver.resolve(SCOPE, "priority", "High")

    async def test_lists_fields_on_every_call(self, resolver, mock_rest):
        await resolver.resolve(SCOPE, "Priority", "High")
        await resolver.resolve(SCOPE, "Priority", "High")

        assert mock_rest.list_project_fields.await_count == 2

    async def test_listing_failure_surfaces(self, mock_rest):
        mock_rest.list_project_fields.return_value = rest_response(500, text="boom")

        with pytest.raises(UpstreamAPIError) as exc_info:
            await FieldOptionResolver(mock_rest).resolve(SCOPE, "Priority", "High")

        assert exc_info.value.status_code == 500

    async def test_configured_page_size(self, mock_rest):
        mock_rest.list_project_fields.return_value = rest_response(200, PRIORITY_SIZE_FIELDS)

        await FieldOptionResolver(mock_rest, page_size=20).resolve(SCOPE, "Size", "Small")

        assert mock_rest.list_project_fields.await_args.args[3].per_page == 20
