"""Item writes and the multi-step workflows built on them.

Steps run strictly in sequence since each depends on the previous result.
Workflows are not transactional: when a step fails after an earlier step
already changed the project, ``PartialWorkflowError`` reports the failed step
together with the effects that remain applied.
"""

import logging
from typing import Any, Dict, List, Optional

from ..connectors.exceptions import (
    ItemNotLocatedError,
    PartialWorkflowError,
    ProjectsError,
    UpstreamAPIError,
)
from ..connectors.graphql import GraphQLClient
from ..connectors.pagination import PaginationOptions
from ..connectors.rest import ProjectsRestClient
from .catalog import ProjectCatalogReader
from .field_options import FieldOptionResolver
from .models import (
    AddItemResult,
    AssignResult,
    ContentKind,
    FieldUpdate,
    OwnerKind,
    ProjectScope,
)
from .node_identity import NodeIdentityResolver

logger = logging.getLogger(__name__)

PROJECT_UPDATE_FAILED = "failed to update a project item"
PROJECT_ADD_FAILED = "failed to add a project item"
PROJECT_DELETE_FAILED = "failed to delete a project item"

DEFAULT_SCAN_MAX_PAGES = 5
DEFAULT_SCAN_PAGE_SIZE = 50

_ADD_ITEM_MUTATION = """
mutation($input: AddProjectV2ItemByIdInput!) {
  addProjectV2ItemById(input: $input) {
    item { id }
  }
}
"""

# Single-select fields set by assign_and_tag, in order.
TAG_FIELDS = ("Priority", "Size")


class ItemMutationCoordinator:
    """Add, update and delete project items; compose the tagging workflows."""

    def __init__(
        self,
        rest: ProjectsRestClient,
        graphql: GraphQLClient,
        nodes: NodeIdentityResolver,
        field_options: FieldOptionResolver,
        catalog: ProjectCatalogReader,
        scan_max_pages: int = DEFAULT_SCAN_MAX_PAGES,
        scan_page_size: int = DEFAULT_SCAN_PAGE_SIZE,
    ):
        self._rest = rest
        self._graphql = graphql
        self._nodes = nodes
        self._field_options = field_options
        self._catalog = catalog
        self.scan_max_pages = scan_max_pages
        self.scan_page_size = scan_page_size

    # -- single-step operations ---------------------------------------------

    async def add_item(
        self,
        scope: ProjectScope,
        item_owner: str,
        item_repo: str,
        number: int,
        kind: ContentKind,
    ) -> AddItemResult:
        """Add an issue or pull request to the project.

        The returned ``id`` is the new item's node ID. The numeric item ID used
        by get/update/delete is not part of the creation response.
        """
        content_id = await self._nodes.resolve_content_id(item_owner, item_repo, number, kind)
        project_id = await self._nodes.resolve_project_id(scope)

        try:
            data = await self._graphql.mutate(
                _ADD_ITEM_MUTATION, {"projectId": project_id, "contentId": content_id}
            )
        except UpstreamAPIError as exc:
            raise UpstreamAPIError(
                f"{PROJECT_ADD_FAILED}: {exc.message}",
                status_code=exc.status_code,
                response_body=exc.response_body,
            ) from exc

        item_id = ((data.get("addProjectV2ItemById") or {}).get("item") or {}).get("id")
        if not item_id:
            raise UpstreamAPIError(
                f"{PROJECT_ADD_FAILED}: response did not include the created item",
                response_body=str(data),
            )

        logger.info(
            "Added %s %s/%s#%d to project %s/%d",
            kind.value,
            item_owner,
            item_repo,
            number,
            scope.owner,
            scope.project_number,
        )
        return AddItemResult(
            id=item_id,
            message=(
                f"Successfully added {kind.value} {item_owner}/{item_repo}#{number} "
                f"to project {scope.owner}/{scope.project_number}"
            ),
        )

    async def update_item(
        self, scope: ProjectScope, item_id: int, update: FieldUpdate
    ) -> Dict[str, Any]:
        """Write exactly one field value; ``update.value=None`` clears the field."""
        response = await self._rest.update_project_item(
            scope.kind, scope.owner, scope.project_number, item_id, update.to_payload()
        )
        response.expect(200, PROJECT_UPDATE_FAILED)
        return response.data or {}

    async def delete_item(self, scope: ProjectScope, item_id: int) -> str:
        """Delete an item. Only 204 No Content counts as success."""
        response = await self._rest.delete_project_item(
            scope.kind, scope.owner, scope.project_number, item_id
        )
        response.expect(204, PROJECT_DELETE_FAILED)
        return "project item successfully deleted"

    async def set_field_by_name(
        self,
        scope: ProjectScope,
        item_id: int,
        field_name: str,
        option_name: str,
    ) -> str:
        """Set a single-select field by names. The field type is not checked here."""
        option_id, field_id = await self._field_options.resolve(scope, field_name, option_name)
        await self.update_item(scope, item_id, FieldUpdate(field_id=field_id, value=option_id))
        return f"Set {field_name} to {option_name}"

    # -- workflows -----------------------------------------------------------

    async def find_item_id(
        self, scope: ProjectScope, repo_owner: str, repo_name: str, issue_number: int
    ) -> int:
        """Numeric item ID of an issue, scanning at most ``scan_max_pages`` pages."""
        pagination = PaginationOptions(per_page=self.scan_page_size)
        for page in range(self.scan_max_pages):
            items, page_info = await self._catalog.list_project_items_page(scope, pagination)
            for item in items:
                if item.matches_issue(repo_owner, repo_name, issue_number):
                    logger.debug(
                        "Located %s/%s#%d as item %d on page %d",
                        repo_owner, repo_name, issue_number, item.id, page + 1,
                    )
                    return item.id
            if not page_info.nextCursor:
                break
            pagination = PaginationOptions(per_page=self.scan_page_size, after=page_info.nextCursor)

        raise ItemNotLocatedError(repo_owner, repo_name, issue_number)

    async def assign_and_tag(
        self,
        org: str,
        project_number: int,
        item_owner: str,
        item_repo: str,
        issue_number: int,
        priority: Optional[str] = None,
        size: Optional[str] = None,
    ) -> AssignResult:
        """Add an issue to an org project, then set Priority and/or Size by name.

        A failed add fails the whole workflow. Any later failure raises
        ``PartialWorkflowError``; field updates already written stay written.
        """
        scope = ProjectScope(owner=org, project_number=project_number, owner_kind=OwnerKind.ORG)
        added = await self.add_item(scope, item_owner, item_repo, issue_number, ContentKind.ISSUE)
        applied: List[str] = [f"added issue {item_owner}/{item_repo}#{issue_number} (node {added.id})"]

        try:
            item_id = await self.find_item_id(scope, item_owner, item_repo, issue_number)
        except ProjectsError as exc:
            raise PartialWorkflowError("find project item id", applied, exc) from exc

        result = AssignResult(
            item_id=item_id,
            message=f"Added issue {item_owner}/{item_repo}#{issue_number} to project {org}/{project_number}",
        )

        values = {"Priority": priority, "Size": size}
        for field_name in TAG_FIELDS:
            option_name = values[field_name]
            if not option_name:
                continue
            try:
                option_id, field_id = await self._field_options.resolve(scope, field_name, option_name)
            except ProjectsError as exc:
                raise PartialWorkflowError(field_name, applied, exc) from exc
            try:
                await self.update_item(scope, item_id, FieldUpdate(field_id=field_id, value=option_id))
            except ProjectsError as exc:
                raise PartialWorkflowError(f"set {field_name}", applied, exc) from exc

            update = f"{field_name}={option_name}"
            applied.append(update)
            result.updates.append(update)
            logger.info("Set %s on item %d", update, item_id)

        return result
