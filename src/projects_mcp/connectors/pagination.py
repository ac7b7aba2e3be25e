"""Cursor pagination helpers for the Projects v2 REST endpoints.

The REST plane hands out opaque ``after``/``before`` cursors in the ``Link``
header. They are carried back to the caller verbatim as ``nextCursor`` and
``prevCursor`` and echoed on the next request; nothing here interprets them.
An absent cursor is always *omitted*, never sent or reported as ``""``.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlsplit

from pydantic import BaseModel, ConfigDict, field_validator

logger = logging.getLogger(__name__)

MAX_PROJECTS_PER_PAGE = 50


class PageCursor(BaseModel):
    """Forward/backward cursor pair as reported by, or sent to, the REST plane."""

    model_config = ConfigDict(frozen=True)

    after: Optional[str] = None
    before: Optional[str] = None

    @field_validator("after", "before", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return v or None


class PageInfo(BaseModel):
    """Pagination block attached to every list result."""

    hasNextPage: bool = False
    hasPreviousPage: bool = False
    nextCursor: Optional[str] = None
    prevCursor: Optional[str] = None

    @classmethod
    def from_cursor(cls, cursor: PageCursor) -> "PageInfo":
        return cls(
            hasNextPage=cursor.after is not None,
            hasPreviousPage=cursor.before is not None,
            nextCursor=cursor.after,
            prevCursor=cursor.before,
        )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class PaginationOptions(BaseModel):
    """Page size and cursors for one list request."""

    per_page: int = MAX_PROJECTS_PER_PAGE
    after: Optional[str] = None
    before: Optional[str] = None

    @field_validator("after", "before", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return v or None

    @classmethod
    def from_request(
        cls,
        per_page: Optional[int] = None,
        after: Optional[str] = None,
        before: Optional[str] = None,
    ) -> "PaginationOptions":
        """Build options for a caller-facing list call, clamping the page size."""
        return cls(per_page=clamp_per_page(per_page), after=after, before=before)

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {"per_page": self.per_page}
        if self.after:
            params["after"] = self.after
        if self.before:
            params["before"] = self.before
        return params


def clamp_per_page(requested: Optional[int], maximum: int = MAX_PROJECTS_PER_PAGE) -> int:
    """Clamp a requested page size to ``maximum``; ``None`` means the maximum."""
    if requested is None:
        return maximum
    if requested > maximum:
        logger.debug("Clamping per_page=%d to %d", requested, maximum)
        return maximum
    return requested


def parse_link_cursors(link_header: Optional[str]) -> PageCursor:
    """Extract the ``after`` cursor of rel="next" and ``before`` cursor of rel="prev".

    Example: '<https://api.github.com/orgs/o/projectsV2?after=Y3Vy>; rel="next"'
    """
    after = None
    before = None
    if not link_header:
        return PageCursor()

    for part in link_header.split(","):
        part = part.strip()
        start = part.find("<")
        end = part.find(">")
        if start == -1 or end == -1:
            continue
        rel = _parse_rel(part[end + 1 :])
        query = parse_qs(urlsplit(part[start + 1 : end]).query)
        if rel == "next":
            after = (query.get("after") or [None])[0]
        elif rel == "prev":
            before = (query.get("before") or [None])[0]

    return PageCursor(after=after, before=before)


def _parse_rel(params: str) -> Optional[str]:
    for param in params.split(";"):
        key, _, value = param.strip().partition("=")
        if key.strip() == "rel":
            return value.strip().strip("\"'")
    return None
