"""Bridges numbered addressing (owner/repo#n, owner/project n) to GraphQL node IDs.

Only item creation needs these IDs. Nothing is cached; node IDs are looked up
each time they are needed.
"""

import logging

from ..connectors.exceptions import (
    ContentNotFoundError,
    GraphQLError,
    ProjectNotFoundError,
    ProjectsValidationError,
)
from ..connectors.graphql import GraphQLClient
from .models import ContentKind, OwnerKind, ProjectScope

logger = logging.getLogger(__name__)

_ISSUE_NODE_QUERY = """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    issue(number: $number) { id }
  }
}
"""

_PULL_REQUEST_NODE_QUERY = """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) { id }
  }
}
"""

_USER_PROJECT_NODE_QUERY = """
query($owner: String!, $projectNumber: Int!) {
  user(login: $owner) {
    projectV2(number: $projectNumber) { id }
  }
}
"""

_ORG_PROJECT_NODE_QUERY = """
query($owner: String!, $projectNumber: Int!) {
  organization(login: $owner) {
    projectV2(number: $projectNumber) { id }
  }
}
"""


class NodeIdentityResolver:
    """Resolves content and project node IDs with one GraphQL lookup each."""

    def __init__(self, graphql: GraphQLClient):
        self._graphql = graphql

    async def resolve_content_id(
        self,
        repo_owner: str,
        repo_name: str,
        number: int,
        kind: ContentKind,
    ) -> str:
        """Node ID of issue or pull request ``repo_owner/repo_name#number``."""
        if kind == ContentKind.ISSUE:
            query, connection = _ISSUE_NODE_QUERY, "issue"
        elif kind == ContentKind.PULL_REQUEST:
            query, connection = _PULL_REQUEST_NODE_QUERY, "pullRequest"
        else:
            raise ProjectsValidationError("item_type must be either 'issue' or 'pull_request'")

        variables = {"owner": repo_owner, "repo": repo_name, "number": number}
        try:
            data = await self._graphql.query(query, variables)
        except GraphQLError as exc:
            if exc.is_not_found:
                raise ContentNotFoundError(repo_owner, repo_name, number, kind.value, exc.message) from exc
            raise

        node = ((data.get("repository") or {}).get(connection) or {}).get("id")
        if not node:
            raise ContentNotFoundError(repo_owner, repo_name, number, kind.value)

        logger.debug("Resolved %s %s/%s#%d to %s", kind.value, repo_owner, repo_name, number, node)
        return node

    async def resolve_project_id(self, scope: ProjectScope) -> str:
        """Node ID of the project, looked up under the scope's owner kind."""
        if scope.kind == OwnerKind.ORG:
            query, root = _ORG_PROJECT_NODE_QUERY, "organization"
        else:
            query, root = _USER_PROJECT_NODE_QUERY, "user"

        variables = {"owner": scope.owner, "projectNumber": scope.project_number}
        try:
            data = await self._graphql.query(query, variables)
        except GraphQLError as exc:
            if exc.is_not_found:
                raise ProjectNotFoundError(scope.owner, scope.project_number) from exc
            raise

        node = ((data.get(root) or {}).get("projectV2") or {}).get("id")
        if not node:
            raise ProjectNotFoundError(scope.owner, scope.project_number)
        return node
