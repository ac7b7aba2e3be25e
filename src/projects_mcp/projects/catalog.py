"""Read access to projects, fields and items for a resolved (or unspecified) scope."""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..connectors.exceptions import OwnerNotResolvedError, UpstreamAPIError
from ..connectors.pagination import PageInfo, PaginationOptions
from ..connectors.rest import ProjectsRestClient, as_list
from .models import MinimalProject, OwnerKind, ProjectItem, ProjectList, ProjectScope

logger = logging.getLogger(__name__)

DUAL_SCOPE_NOTE = (
    "Results include both user and org projects. Each project includes 'owner_type' field. "
    "Pagination is limited when owner_type is not specified - specify 'owner_type' for full "
    "pagination support."
)


class ProjectCatalogReader:
    """Dispatches reads to the user- or org-shaped endpoint of the REST plane."""

    def __init__(self, rest: ProjectsRestClient):
        self._rest = rest

    # -- projects ------------------------------------------------------------

    async def list_projects(
        self,
        owner: str,
        owner_kind: Optional[OwnerKind],
        pagination: PaginationOptions,
        query: Optional[str] = None,
    ) -> ProjectList:
        """List projects for one scope, or for both when ``owner_kind`` is None."""
        if owner_kind is None:
            return await self._list_projects_from_both(owner, pagination, query)

        response = await self._rest.list_projects(owner_kind, owner, pagination, query)
        response.expect(200, "failed to list projects")
        return ProjectList(
            projects=[MinimalProject.from_api(p, owner_kind) for p in as_list(response.data)],
            page_info=PageInfo.from_cursor(response.cursor),
        )

    async def _list_projects_from_both(
        self,
        owner: str,
        pagination: PaginationOptions,
        query: Optional[str],
    ) -> ProjectList:
        # Two independent cursor spaces: results are tagged and concatenated,
        # page info stays per scope.
        result = ProjectList(note=DUAL_SCOPE_NOTE)
        for kind in (OwnerKind.USER, OwnerKind.ORG):
            try:
                response = await self._rest.list_projects(kind, owner, pagination, query)
                if not response.ok:
                    logger.debug(
                        "Listing %s projects for %s returned HTTP %d", kind.value, owner, response.status_code
                    )
                    continue
                projects = as_list(response.data)
            except UpstreamAPIError as exc:
                logger.debug("Listing %s projects for %s failed: %s", kind.value, owner, exc)
                continue

            result.projects.extend(MinimalProject.from_api(p, kind) for p in projects)
            result.page_info_by_owner_type[kind] = PageInfo.from_cursor(response.cursor)

        if not result.page_info_by_owner_type:
            raise OwnerNotResolvedError(
                owner,
                message=f"failed to list projects for owner '{owner}': not found as user or organization",
            )
        return result

    async def get_project(self, scope: ProjectScope) -> MinimalProject:
        response = await self._rest.get_project(scope.kind, scope.owner, scope.project_number)
        response.expect(200, "failed to get project")
        return MinimalProject.from_api(response.data or {}, scope.kind)

    # -- fields --------------------------------------------------------------

    async def list_project_fields(
        self, scope: ProjectScope, pagination: PaginationOptions
    ) -> Dict[str, Any]:
        response = await self._rest.list_project_fields(
            scope.kind, scope.owner, scope.project_number, pagination
        )
        response.expect(200, "failed to list project fields")
        return {
            "fields": as_list(response.data),
            "pageInfo": PageInfo.from_cursor(response.cursor).to_payload(),
        }

    async def get_project_field(self, scope: ProjectScope, field_id: int) -> Dict[str, Any]:
        response = await self._rest.get_project_field(
            scope.kind, scope.owner, scope.project_number, field_id
        )
        response.expect(200, "failed to get project field")
        return response.data or {}

    # -- items ---------------------------------------------------------------

    async def list_project_items(
        self,
        scope: ProjectScope,
        pagination: PaginationOptions,
        query: Optional[str] = None,
        field_ids: Optional[Sequence[int]] = None,
    ) -> Dict[str, Any]:
        items, page_info = await self._list_items_raw(scope, pagination, query, field_ids)
        return {"items": items, "pageInfo": page_info.to_payload()}

    async def list_project_items_page(
        self,
        scope: ProjectScope,
        pagination: PaginationOptions,
    ) -> Tuple[List[ProjectItem], PageInfo]:
        """One page of items as typed projections, for callers that search them."""
        items, page_info = await self._list_items_raw(scope, pagination, None, None)
        return [ProjectItem.from_api(i) for i in items], page_info

    async def _list_items_raw(
        self,
        scope: ProjectScope,
        pagination: PaginationOptions,
        query: Optional[str],
        field_ids: Optional[Sequence[int]],
    ) -> Tuple[List[Dict[str, Any]], PageInfo]:
        response = await self._rest.list_project_items(
            scope.kind, scope.owner, scope.project_number, pagination, query, field_ids
        )
        response.expect(200, "failed to list project items")
        return as_list(response.data), PageInfo.from_cursor(response.cursor)

    async def get_project_item(
        self,
        scope: ProjectScope,
        item_id: int,
        field_ids: Optional[Sequence[int]] = None,
    ) -> Dict[str, Any]:
        response = await self._rest.get_project_item(
            scope.kind, scope.owner, scope.project_number, item_id, field_ids
        )
        response.expect(200, "failed to get project item")
        return response.data or {}
