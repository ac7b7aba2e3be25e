"""GitHub Projects v2 connector.

Exposes the project resolution and coordination logic as MCP tools. Each
invocation builds its own clients and resolvers; nothing is shared between
invocations except the pooled HTTP client.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from mcp import types

from ..config import Settings, get_settings
from ..observability.logging import clear_log_context, set_log_context
from ..projects.catalog import ProjectCatalogReader
from ..projects.field_options import FieldOptionResolver
from ..projects.models import ContentKind, FieldUpdate, OwnerKind, ProjectScope
from ..projects.mutations import ItemMutationCoordinator
from ..projects.node_identity import NodeIdentityResolver
from ..projects.owner_scope import OwnerScopeResolver
from .exceptions import MarshalError, ProjectsError, ProjectsValidationError
from .graphql import GraphQLClient
from .pagination import MAX_PROJECTS_PER_PAGE, PaginationOptions
from .params import (
    optional_int_list,
    optional_per_page,
    optional_str,
    required_int,
    required_str,
)
from .rest import ProjectsRestClient

logger = logging.getLogger(__name__)

LIST_METHODS = ("list_projects", "list_project_fields", "list_project_items")
GET_METHODS = ("get_project", "get_project_field", "get_project_item")
WRITE_METHODS = ("add_project_item", "update_project_item", "delete_project_item")

_OWNER_TYPE_SCHEMA = {
    "type": "string",
    "enum": ["user", "org"],
    "description": "Owner type (user or org). If not provided, will be automatically detected.",
}
_OWNER_SCHEMA = {
    "type": "string",
    "description": "The owner (user or organization login). The name is not case sensitive.",
}
_PROJECT_NUMBER_SCHEMA = {"type": "number", "description": "The project's number."}
_FIELDS_SCHEMA = {
    "type": "array",
    "items": {"type": "string"},
    "description": (
        'Field IDs to include for project items (e.g. ["102589", "985201"]). '
        "Without this, only titles are returned."
    ),
}


@dataclass
class _Services:
    """Per-invocation wiring of clients and resolvers."""

    scopes: OwnerScopeResolver
    catalog: ProjectCatalogReader
    coordinator: ItemMutationCoordinator


class ProjectsConnector:
    """Projects v2 connector exposing list/get/write and tagging tools."""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
    ):
        self._http_client = http_client
        self._settings = settings

    @property
    def name(self) -> str:
        return "projects"

    @property
    def display_name(self) -> str:
        return "GitHub Projects"

    @property
    def description(self) -> str:
        return "List, inspect and modify GitHub Projects (v2) for users and organizations"

    # -- wiring --------------------------------------------------------------

    def _services(self) -> _Services:
        settings = self._settings or get_settings()
        rest = ProjectsRestClient(http_client=self._http_client, base_url=settings.github_api_url)
        graphql = GraphQLClient(endpoint=settings.github_graphql_url, http_client=self._http_client)
        catalog = ProjectCatalogReader(rest)
        coordinator = ItemMutationCoordinator(
            rest,
            graphql,
            NodeIdentityResolver(graphql),
            FieldOptionResolver(rest, page_size=settings.field_resolution_page_size),
            catalog,
            scan_max_pages=settings.item_scan_max_pages,
            scan_page_size=settings.item_scan_page_size,
        )
        return _Services(scopes=OwnerScopeResolver(rest), catalog=catalog, coordinator=coordinator)

    # -- tools ---------------------------------------------------------------

    async def get_tools(self) -> List[types.Tool]:
        """Get available Projects tools."""
        return [
            types.Tool(
                name="projects_list",
                description=(
                    "Tools for listing GitHub Projects resources. List projects for a user or "
                    "organization, or list project fields and items for a specific project."
                ),
                annotations=types.ToolAnnotations(
                    title="List GitHub Projects resources", readOnlyHint=True
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "method": {
                            "type": "string",
                            "enum": list(LIST_METHODS),
                            "description": "The action to perform",
                        },
                        "owner_type": {
                            **_OWNER_TYPE_SCHEMA,
                            "description": "Owner type (user or org). If not provided, will automatically try both.",
                        },
                        "owner": _OWNER_SCHEMA,
                        "project_number": {
                            "type": "number",
                            "description": "The project's number. Required for 'list_project_fields' and 'list_project_items'.",
                        },
                        "query": {
                            "type": "string",
                            "description": (
                                "Filter/query string. For list_projects: filter by title text and state "
                                '(e.g. "roadmap is:open"). For list_project_items: GitHub\'s project filtering syntax.'
                            ),
                        },
                        "fields": _FIELDS_SCHEMA,
                        "per_page": {
                            "type": "number",
                            "description": f"Results per page (max {MAX_PROJECTS_PER_PAGE})",
                        },
                        "after": {
                            "type": "string",
                            "description": "Forward pagination cursor from previous pageInfo.nextCursor.",
                        },
                        "before": {
                            "type": "string",
                            "description": "Backward pagination cursor from previous pageInfo.prevCursor.",
                        },
                    },
                    "required": ["method", "owner"],
                },
            ),
            types.Tool(
                name="projects_get",
                description="Get details about individual projects, project fields, and project items by their IDs.",
                annotations=types.ToolAnnotations(
                    title="Get details of GitHub Projects resources", readOnlyHint=True
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "method": {
                            "type": "string",
                            "enum": list(GET_METHODS),
                            "description": "The method to execute",
                        },
                        "owner_type": _OWNER_TYPE_SCHEMA,
                        "owner": _OWNER_SCHEMA,
                        "project_number": _PROJECT_NUMBER_SCHEMA,
                        "field_id": {
                            "type": "number",
                            "description": "The field's ID. Required for 'get_project_field'.",
                        },
                        "item_id": {
                            "type": "number",
                            "description": "The item's ID. Required for 'get_project_item'.",
                        },
                        "fields": _FIELDS_SCHEMA,
                    },
                    "required": ["method", "owner", "project_number"],
                },
            ),
            types.Tool(
                name="projects_write",
                description="Add, update, or delete project items in a GitHub Project.",
                annotations=types.ToolAnnotations(
                    title="Modify GitHub Project items", readOnlyHint=False, destructiveHint=True
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "method": {
                            "type": "string",
                            "enum": list(WRITE_METHODS),
                            "description": "The method to execute",
                        },
                        "owner_type": _OWNER_TYPE_SCHEMA,
                        "owner": _OWNER_SCHEMA,
                        "project_number": _PROJECT_NUMBER_SCHEMA,
                        "item_id": {
                            "type": "number",
                            "description": "The project item ID. Required for 'update_project_item' and 'delete_project_item'.",
                        },
                        "item_type": {
                            "type": "string",
                            "enum": ["issue", "pull_request"],
                            "description": "The item's type. Required for 'add_project_item'.",
                        },
                        "item_owner": {
                            "type": "string",
                            "description": "Owner of the repository containing the issue or pull request.",
                        },
                        "item_repo": {
                            "type": "string",
                            "description": "Name of the repository containing the issue or pull request.",
                        },
                        "issue_number": {
                            "type": "number",
                            "description": "The issue number (when item_type is 'issue').",
                        },
                        "pull_request_number": {
                            "type": "number",
                            "description": "The pull request number (when item_type is 'pull_request').",
                        },
                        "updated_field": {
                            "type": "object",
                            "description": (
                                "ID of the project field to update and its new value; set value to null to clear. "
                                'Example: {"id": 123456, "value": "New Value"}. Required for \'update_project_item\'.'
                            ),
                        },
                    },
                    "required": ["method", "owner", "project_number"],
                },
            ),
            types.Tool(
                name="assign_issue_to_org_project",
                description=(
                    "Assign an issue to an organization's GitHub Project. Optionally set Priority and Size "
                    'single-select fields by option name (e.g. "High", "Large").'
                ),
                annotations=types.ToolAnnotations(
                    title="Assign issue to org project", readOnlyHint=False, destructiveHint=True
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "org": {"type": "string", "description": "Organization login (owner of the project)."},
                        "project_number": _PROJECT_NUMBER_SCHEMA,
                        "item_owner": {"type": "string", "description": "Owner of the repository containing the issue."},
                        "item_repo": {"type": "string", "description": "Repository name containing the issue."},
                        "issue_number": {"type": "number", "description": "The issue number."},
                        "priority": {
                            "type": "string",
                            "description": "Optional. Must match an option name in the project's Priority field.",
                        },
                        "size": {
                            "type": "string",
                            "description": "Optional. Must match an option name in the project's Size field.",
                        },
                    },
                    "required": ["org", "project_number", "item_owner", "item_repo", "issue_number"],
                },
            ),
            types.Tool(
                name="update_project_item_field_by_name",
                description="Set a project item's single-select field (e.g. Priority, Size) by field name and option name.",
                annotations=types.ToolAnnotations(
                    title="Set project item field by name", readOnlyHint=False, destructiveHint=True
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "owner": {"type": "string", "description": "Project owner (user or org login)."},
                        "owner_type": _OWNER_TYPE_SCHEMA,
                        "project_number": _PROJECT_NUMBER_SCHEMA,
                        "item_id": {
                            "type": "number",
                            "description": "The numeric project item ID (from list_project_items or get_project_item).",
                        },
                        "field_name": {"type": "string", "description": "Field name (e.g. Priority, Size)."},
                        "option_name": {
                            "type": "string",
                            "description": "Option name (e.g. High, Large). Must match an option in the field.",
                        },
                    },
                    "required": ["owner", "project_number", "item_id", "field_name", "option_name"],
                },
            ),
        ]

    async def execute_tool(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        """Execute a Projects tool and return a JSON payload.

        Failures come back as ``{"error": ...}`` payloads. ``MarshalError`` is the
        exception: it signals a defect and propagates to the caller.
        """
        arguments = arguments or {}
        set_log_context(
            tool=tool_name,
            owner=arguments.get("owner") or arguments.get("org"),
            request_id=uuid.uuid4().hex[:12],
        )
        try:
            if tool_name == "projects_list":
                result = await self._projects_list(arguments)
            elif tool_name == "projects_get":
                result = await self._projects_get(arguments)
            elif tool_name == "projects_write":
                result = await self._projects_write(arguments)
            elif tool_name == "assign_issue_to_org_project":
                result = await self._assign_issue_to_org_project(arguments)
            elif tool_name == "update_project_item_field_by_name":
                result = await self._update_project_item_field_by_name(arguments)
            else:
                raise ProjectsValidationError(f"unknown tool: {tool_name}")
            return _marshal(result)

        except MarshalError:
            raise
        except ProjectsError as e:
            logger.warning("Projects tool '%s' failed: %s", tool_name, e.message)
            return _marshal(e.to_payload())
        finally:
            clear_log_context()

    # -- tool implementations ------------------------------------------------

    async def _projects_list(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        method = required_str(arguments, "method")
        owner = required_str(arguments, "owner")
        owner_kind = _optional_owner_kind(arguments)
        pagination = PaginationOptions.from_request(
            optional_per_page(arguments),
            optional_str(arguments, "after"),
            optional_str(arguments, "before"),
        )
        services = self._services()

        if method == "list_projects":
            projects = await services.catalog.list_projects(
                owner, owner_kind, pagination, optional_str(arguments, "query")
            )
            return projects.to_payload()

        if method == "list_project_fields":
            scope = ProjectScope(
                owner=owner,
                project_number=required_int(arguments, "project_number"),
                owner_kind=owner_kind,
            )
            scope = await services.scopes.ensure(scope)
            return await services.catalog.list_project_fields(scope, pagination)

        if method == "list_project_items":
            scope = ProjectScope(
                owner=owner,
                project_number=required_int(arguments, "project_number"),
                owner_kind=owner_kind,
            )
            query = optional_str(arguments, "query")
            field_ids = optional_int_list(arguments, "fields")
            scope = await services.scopes.ensure(scope)
            return await services.catalog.list_project_items(scope, pagination, query, field_ids)

        raise ProjectsValidationError(f"unknown method: {method}")

    async def _projects_get(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        method = required_str(arguments, "method")
        scope = _scope_from_arguments(arguments)

        if method == "get_project":
            services = self._services()
            scope = await services.scopes.ensure(scope)
            project = await services.catalog.get_project(scope)
            return project.to_payload()

        if method == "get_project_field":
            field_id = required_int(arguments, "field_id")
            services = self._services()
            scope = await services.scopes.ensure(scope)
            return await services.catalog.get_project_field(scope, field_id)

        if method == "get_project_item":
            item_id = required_int(arguments, "item_id")
            field_ids = optional_int_list(arguments, "fields")
            services = self._services()
            scope = await services.scopes.ensure(scope)
            return await services.catalog.get_project_item(scope, item_id, field_ids)

        raise ProjectsValidationError(f"unknown method: {method}")

    async def _projects_write(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        method = required_str(arguments, "method")
        scope = _scope_from_arguments(arguments)

        if method == "add_project_item":
            kind, number = _item_type_and_number(arguments)
            item_owner = required_str(arguments, "item_owner")
            item_repo = required_str(arguments, "item_repo")
            services = self._services()
            scope = await services.scopes.ensure(scope)
            added = await services.coordinator.add_item(scope, item_owner, item_repo, number, kind)
            return added.model_dump()

        if method == "update_project_item":
            item_id = required_int(arguments, "item_id")
            if "updated_field" not in arguments:
                raise ProjectsValidationError("missing required parameter: updated_field")
            update = FieldUpdate.from_arguments(arguments["updated_field"])
            services = self._services()
            scope = await services.scopes.ensure(scope)
            return await services.coordinator.update_item(scope, item_id, update)

        if method == "delete_project_item":
            item_id = required_int(arguments, "item_id")
            services = self._services()
            scope = await services.scopes.ensure(scope)
            message = await services.coordinator.delete_item(scope, item_id)
            return {"message": message}

        raise ProjectsValidationError(f"unknown method: {method}")

    async def _assign_issue_to_org_project(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        org = required_str(arguments, "org")
        project_number = required_int(arguments, "project_number")
        item_owner = required_str(arguments, "item_owner")
        item_repo = required_str(arguments, "item_repo")
        issue_number = required_int(arguments, "issue_number")
        priority = optional_str(arguments, "priority")
        size = optional_str(arguments, "size")

        result = await self._services().coordinator.assign_and_tag(
            org, project_number, item_owner, item_repo, issue_number, priority, size
        )
        return result.model_dump()

    async def _update_project_item_field_by_name(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        scope = _scope_from_arguments(arguments)
        item_id = required_int(arguments, "item_id")
        field_name = required_str(arguments, "field_name")
        option_name = required_str(arguments, "option_name")

        services = self._services()
        scope = await services.scopes.ensure(scope)
        message = await services.coordinator.set_field_by_name(scope, item_id, field_name, option_name)
        return {"message": message}


def _optional_owner_kind(arguments: Dict[str, Any]) -> Optional[OwnerKind]:
    owner_type = optional_str(arguments, "owner_type")
    if owner_type is None:
        return None
    try:
        return OwnerKind(owner_type)
    except ValueError:
        raise ProjectsValidationError("owner_type must be either 'user' or 'org'") from None


def _scope_from_arguments(arguments: Dict[str, Any]) -> ProjectScope:
    return ProjectScope(
        owner=required_str(arguments, "owner"),
        project_number=required_int(arguments, "project_number"),
        owner_kind=_optional_owner_kind(arguments),
    )


def _item_type_and_number(arguments: Dict[str, Any]):
    item_type = required_str(arguments, "item_type")
    if item_type == "issue":
        try:
            return ContentKind.ISSUE, required_int(arguments, "issue_number")
        except ProjectsValidationError:
            raise ProjectsValidationError("issue_number is required when item_type is 'issue'") from None
    if item_type == "pull_request":
        try:
            return ContentKind.PULL_REQUEST, required_int(arguments, "pull_request_number")
        except ProjectsValidationError:
            raise ProjectsValidationError(
                "pull_request_number is required when item_type is 'pull_request'"
            ) from None
    raise ProjectsValidationError("item_type must be either 'issue' or 'pull_request'")


def _marshal(payload: Any) -> str:
    try:
        return json.dumps(payload, indent=2)
    except (TypeError, ValueError) as exc:
        raise MarshalError(f"failed to marshal response: {exc}") from exc
