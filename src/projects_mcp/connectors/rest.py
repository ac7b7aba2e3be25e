"""REST client for the GitHub Projects v2 object API.

Every endpoint exists twice, once under ``/users/{login}`` and once under
``/orgs/{login}``; callers pick the variant with an ``OwnerKind``. Responses
are returned whatever their status; callers apply their own success criteria.
Transport failures raise ``UpstreamAPIError``.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import get_settings
from .exceptions import UpstreamAPIError
from .http_client import get_http_client
from .pagination import PageCursor, PaginationOptions, parse_link_cursors

logger = logging.getLogger(__name__)


@dataclass
class RestResponse:
    """Fully-read REST response; the underlying stream is already closed.

    The body is decoded on first access to ``data``; ``expect()`` never decodes it.
    """

    status_code: int
    text: str = ""
    cursor: PageCursor = field(default_factory=PageCursor)
    url: str = ""
    _decoded: Any = field(default=None, init=False, repr=False)
    _loaded: bool = field(default=False, init=False, repr=False)

    @property
    def data(self) -> Any:
        """JSON body of a 2xx response; None for other statuses or an empty body."""
        if not self._loaded:
            self._decoded = self._decode()
            self._loaded = True
        return self._decoded

    def _decode(self) -> Any:
        if not self.text or not 200 <= self.status_code < 300:
            return None
        try:
            return json.loads(self.text)
        except ValueError as exc:
            raise UpstreamAPIError(
                f"invalid JSON in response from {self.url}",
                status_code=self.status_code,
                response_body=self.text,
            ) from exc

    @property
    def ok(self) -> bool:
        return self.status_code == 200

    def expect(self, status_code: int, message: str) -> "RestResponse":
        """Return self if the status matches exactly, else raise with status and body."""
        if self.status_code != status_code:
            logger.warning("%s: HTTP %d", message, self.status_code)
            raise UpstreamAPIError(
                f"{message}: unexpected status {self.status_code}",
                status_code=self.status_code,
                response_body=self.text,
            )
        return self


class ProjectsRestClient:
    """Thin async wrapper over the user/org Projects v2 REST endpoints."""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
    ):
        self._http_client = http_client
        self.base_url = (base_url or get_settings().github_api_url).rstrip("/")

    # -- plumbing ------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        return self._http_client or get_http_client()

    def _projects_path(self, owner_kind, owner: str) -> str:
        prefix = "orgs" if _kind_value(owner_kind) == "org" else "users"
        return f"{self.base_url}/{prefix}/{owner}/projectsV2"

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> RestResponse:
        request_kwargs: Dict[str, Any] = {}
        if params:
            request_kwargs["params"] = params
        if json_body is not None:
            request_kwargs["json"] = json_body

        try:
            async with self._client().stream(method, url, **request_kwargs) as response:
                await response.aread()
                text = response.text
                status = response.status_code
                link = response.headers.get("Link")
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, type(exc).__name__)
            raise UpstreamAPIError(f"request to {url} failed: {exc}") from exc

        logger.debug("%s %s -> %d", method, url, status)
        return RestResponse(
            status_code=status,
            text=text,
            cursor=parse_link_cursors(link),
            url=url,
        )

    # -- projects ------------------------------------------------------------

    async def list_projects(
        self,
        owner_kind,
        owner: str,
        pagination: PaginationOptions,
        query: Optional[str] = None,
    ) -> RestResponse:
        params = pagination.to_params()
        if query:
            params["q"] = query
        return await self._request("GET", self._projects_path(owner_kind, owner), params=params)

    async def get_project(self, owner_kind, owner: str, project_number: int) -> RestResponse:
        url = f"{self._projects_path(owner_kind, owner)}/{project_number}"
        return await self._request("GET", url)

    # -- fields --------------------------------------------------------------

    async def list_project_fields(
        self,
        owner_kind,
        owner: str,
        project_number: int,
        pagination: PaginationOptions,
    ) -> RestResponse:
        url = f"{self._projects_path(owner_kind, owner)}/{project_number}/fields"
        return await self._request("GET", url, params=pagination.to_params())

    async def get_project_field(
        self, owner_kind, owner: str, project_number: int, field_id: int
    ) -> RestResponse:
        url = f"{self._projects_path(owner_kind, owner)}/{project_number}/fields/{field_id}"
        return await self._request("GET", url)

    # -- items ---------------------------------------------------------------

    async def list_project_items(
        self,
        owner_kind,
        owner: str,
        project_number: int,
        pagination: PaginationOptions,
        query: Optional[str] = None,
        field_ids: Optional[Sequence[int]] = None,
    ) -> RestResponse:
        url = f"{self._projects_path(owner_kind, owner)}/{project_number}/items"
        params = pagination.to_params()
        if query:
            params["q"] = query
        if field_ids:
            params["fields"] = _join_ids(field_ids)
        return await self._request("GET", url, params=params)

    async def get_project_item(
        self,
        owner_kind,
        owner: str,
        project_number: int,
        item_id: int,
        field_ids: Optional[Sequence[int]] = None,
    ) -> RestResponse:
        url = f"{self._projects_path(owner_kind, owner)}/{project_number}/items/{item_id}"
        params = {"fields": _join_ids(field_ids)} if field_ids else None
        return await self._request("GET", url, params=params)

    async def update_project_item(
        self,
        owner_kind,
        owner: str,
        project_number: int,
        item_id: int,
        payload: Dict[str, Any],
    ) -> RestResponse:
        url = f"{self._projects_path(owner_kind, owner)}/{project_number}/items/{item_id}"
        return await self._request("PATCH", url, json_body=payload)

    async def delete_project_item(
        self, owner_kind, owner: str, project_number: int, item_id: int
    ) -> RestResponse:
        url = f"{self._projects_path(owner_kind, owner)}/{project_number}/items/{item_id}"
        return await self._request("DELETE", url)


def _kind_value(owner_kind) -> str:
    return getattr(owner_kind, "value", owner_kind)


def _join_ids(ids: Sequence[int]) -> str:
    return ",".join(str(i) for i in ids)


def as_list(data: Any) -> List[Dict[str, Any]]:
    """Coerce a list-endpoint body to a list of objects."""
    if isinstance(data, list):
        return [d for d in data if isinstance(d, dict)]
    return []
