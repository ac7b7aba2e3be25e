"""Owner-kind detection by probing the user and org project endpoints."""

import logging

from ..connectors.exceptions import OwnerNotResolvedError, UpstreamAPIError
from ..connectors.rest import ProjectsRestClient
from .models import OwnerKind, ProjectScope

logger = logging.getLogger(__name__)

# User scope first.
PROBE_ORDER = (OwnerKind.USER, OwnerKind.ORG)


class OwnerScopeResolver:
    """Decide whether ``owner`` is a user or an org for a given project.

    Each scope is probed at most once, in ``PROBE_ORDER``. A transport error
    or a non-200 status on a probe falls through to the next one; only when
    every probe failed is ``OwnerNotResolvedError`` raised.
    """

    def __init__(self, rest: ProjectsRestClient):
        self._rest = rest

    async def resolve(self, owner: str, project_number: int) -> OwnerKind:
        for kind in PROBE_ORDER:
            try:
                response = await self._rest.get_project(kind, owner, project_number)
            except UpstreamAPIError as exc:
                logger.debug("Probe %s/%s as %s failed: %s", owner, project_number, kind.value, exc)
                continue

            if response.ok:
                logger.debug("Resolved %s/%s as %s", owner, project_number, kind.value)
                return kind

            logger.debug(
                "Probe %s/%s as %s returned HTTP %d",
                owner,
                project_number,
                kind.value,
                response.status_code,
            )

        raise OwnerNotResolvedError(owner, project_number)

    async def ensure(self, scope: ProjectScope) -> ProjectScope:
        """Return ``scope`` with its owner kind set, probing only if it is missing."""
        if scope.is_resolved:
            return scope
        kind = await self.resolve(scope.owner, scope.project_number)
        return scope.with_kind(kind)
