"""Test doubles for the GitHub REST and GraphQL planes."""

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx

from projects_mcp.connectors.pagination import PageCursor
from projects_mcp.connectors.rest import RestResponse

API_URL = "https://api.github.test"
GRAPHQL_URL = "https://api.github.test/graphql"


def rest_response(
    status_code: int = 200,
    data: Any = None,
    after: Optional[str] = None,
    before: Optional[str] = None,
    text: Optional[str] = None,
) -> RestResponse:
    """Build an already-read RestResponse for AsyncMock-based tests."""
    if text is None:
        text = json.dumps(data) if data is not None else ""
    return RestResponse(
        status_code=status_code,
        text=text,
        cursor=PageCursor(after=after, before=before),
    )


def link_header(path: str, after: Optional[str] = None, before: Optional[str] = None) -> str:
    links = []
    if after:
        links.append(f'<{API_URL}{path}?per_page=50&after={after}>; rel="next"')
    if before:
        links.append(f'<{API_URL}{path}?per_page=50&before={before}>; rel="prev"')
    return ", ".join(links)


def issue_item(item_id: int, number: int, owner: str = "acme", repo: str = "widgets") -> Dict[str, Any]:
    """A REST project item pointing at issue owner/repo#number."""
    return {
        "id": item_id,
        "node_id": f"PVTI_{item_id}",
        "content_type": "Issue",
        "content": {
            "number": number,
            "repository_url": f"https://api.github.com/repos/{owner}/{repo}",
        },
    }


PRIORITY_SIZE_FIELDS = [
    {"id": 1, "name": "Title", "data_type": "title"},
    {
        "id": 42,
        "name": "Priority",
        "data_type": "single_select",
        "options": [
            {"id": "opt1", "name": {"raw": "High", "html": "High"}},
            {"id": "opt2", "name": {"raw": "Low", "html": "Low"}},
        ],
    },
    {
        "id": 43,
        "name": "Size",
        "data_type": "single_select",
        "options": [
            {"id": "s1", "name": {"raw": "Small", "html": "Small"}},
            {"id": "s3", "name": {"raw": "Large", "html": "Large"}},
        ],
    },
]


class FakeGitHub:
    """In-memory GitHub served through httpx.MockTransport.

    Responses are queued per (method, path); the last queued response for a
    route is reused once the queue is drained. Unknown routes answer 404.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        status_code: int = 200,
        json_body: Any = None,
        text: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> "FakeGitHub":
        if text is not None:
            response = httpx.Response(status_code, text=text, headers=headers)
        elif json_body is not None:
            response = httpx.Response(status_code, json=json_body, headers=headers)
        else:
            response = httpx.Response(status_code, headers=headers)
        self.routes.setdefault((method, path), []).append(response)
        return self

    def add_graphql(self, data: Any = None, errors: Optional[list] = None) -> "FakeGitHub":
        body: Dict[str, Any] = {"data": data}
        if errors:
            body["errors"] = errors
        return self.add("POST", "/graphql", json_body=body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": "Not Found"})
        if len(queue) > 1:
            return queue.pop(0)
        return queue[0]

    def calls(self, method: Optional[str] = None, path: Optional[str] = None) -> List[httpx.Request]:
        return [
            r
            for r in self.requests
            if (method is None or r.method == method) and (path is None or r.url.path == path)
        ]

    def graphql_payloads(self) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.calls("POST", "/graphql")]
