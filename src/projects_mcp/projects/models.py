"""Per-call projections of Projects v2 resources.

Nothing here is persisted; every value is rebuilt from upstream responses on
each invocation.
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

from ..connectors.exceptions import ProjectsValidationError, ResolutionError
from ..connectors.pagination import PageInfo


class OwnerKind(str, Enum):
    """Whether a login denotes a personal or an organization account."""

    USER = "user"
    ORG = "org"


class ContentKind(str, Enum):
    """What a project item points at."""

    ISSUE = "issue"
    PULL_REQUEST = "pull_request"
    DRAFT = "draft"

    @classmethod
    def from_api(cls, content_type: Optional[str]) -> Optional["ContentKind"]:
        return {
            "Issue": cls.ISSUE,
            "PullRequest": cls.PULL_REQUEST,
            "DraftIssue": cls.DRAFT,
        }.get(content_type or "")


class ProjectScope(BaseModel):
    """Owner login + project number, with the owner kind once it is known."""

    owner: str
    project_number: int
    owner_kind: Optional[OwnerKind] = None

    @property
    def is_resolved(self) -> bool:
        return self.owner_kind is not None

    @property
    def kind(self) -> OwnerKind:
        """The resolved owner kind; raises if probing has not happened yet."""
        if self.owner_kind is None:
            raise ResolutionError(
                f"owner type for {self.owner}/{self.project_number} has not been resolved",
                identifier=f"{self.owner}/{self.project_number}",
            )
        return self.owner_kind

    def with_kind(self, kind: OwnerKind) -> "ProjectScope":
        return self.model_copy(update={"owner_kind": kind})


class FieldOption(BaseModel):
    id: str
    name: str


class ProjectField(BaseModel):
    """A project field; ``options`` is only populated for single-select fields."""

    id: Optional[int] = None
    name: str = ""
    data_type: Optional[str] = None
    options: List[FieldOption] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ProjectField":
        options = []
        for raw in data.get("options") or []:
            if not raw or raw.get("id") is None:
                continue
            name = raw.get("name")
            if isinstance(name, dict):
                name = name.get("raw")
            options.append(FieldOption(id=str(raw["id"]), name=name or ""))
        return cls(
            id=data.get("id"),
            name=data.get("name") or "",
            data_type=data.get("data_type"),
            options=options,
        )

    def find_option(self, option_name: str) -> Optional[FieldOption]:
        for option in self.options:
            if option.name == option_name:
                return option
        return None


class ProjectItem(BaseModel):
    """A project item as seen on the REST plane (numeric ``id``)."""

    id: Optional[int] = None
    node_id: Optional[str] = None
    content_kind: Optional[ContentKind] = None
    content: Dict[str, Any] = Field(default_factory=dict)
    field_values: Dict[int, Any] = Field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ProjectItem":
        field_values = {}
        for field in data.get("fields") or []:
            if isinstance(field, dict) and field.get("id") is not None:
                field_values[field["id"]] = field.get("value")
        return cls(
            id=data.get("id"),
            node_id=data.get("node_id"),
            content_kind=ContentKind.from_api(data.get("content_type")),
            content=data.get("content") or {},
            field_values=field_values,
        )

    def matches_issue(self, repo_owner: str, repo_name: str, number: int) -> bool:
        """True if this item is issue ``repo_owner/repo_name#number``.

        Repository name/owner are only compared when the content carries them.
        """
        if self.id is None or self.content_kind != ContentKind.ISSUE or not self.content:
            return False
        if self.content.get("number") != number:
            return False

        owner, name = _content_repository(self.content)
        if name is not None and name != repo_name:
            return False
        if owner is not None and owner != repo_owner:
            return False
        return True


def _content_repository(content: Dict[str, Any]):
    repository = content.get("repository")
    if isinstance(repository, dict):
        owner = (repository.get("owner") or {}).get("login")
        return owner, repository.get("name")

    repository_url = content.get("repository_url")
    if repository_url:
        # .../repos/{owner}/{name}
        segments = [s for s in urlsplit(repository_url).path.split("/") if s]
        if len(segments) >= 2:
            return segments[-2], segments[-1]

    return None, None


class MinimalProject(BaseModel):
    """Trimmed project projection, tagged with the scope it was read from."""

    id: Optional[int] = None
    node_id: Optional[str] = None
    number: Optional[int] = None
    title: Optional[str] = None
    short_description: Optional[str] = None
    public: Optional[bool] = None
    closed: Optional[bool] = None
    url: Optional[str] = None
    owner: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    closed_at: Optional[str] = None
    owner_type: Optional[OwnerKind] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any], owner_type: Optional[OwnerKind] = None) -> "MinimalProject":
        return cls(
            id=data.get("id"),
            node_id=data.get("node_id"),
            number=data.get("number"),
            title=data.get("title"),
            short_description=data.get("short_description"),
            public=data.get("public"),
            closed=data.get("closed"),
            url=data.get("html_url") or data.get("url"),
            owner=(data.get("owner") or {}).get("login"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            closed_at=data.get("closed_at"),
            owner_type=owner_type,
        )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class FieldUpdate(BaseModel):
    """One field value to write; ``value=None`` clears the field."""

    field_id: int
    value: Any = None

    @classmethod
    def from_arguments(cls, raw: Any) -> "FieldUpdate":
        """Build from a tool's ``updated_field`` object: ``{"id": ..., "value": ...}``."""
        if not isinstance(raw, dict):
            raise ProjectsValidationError("updated_field must be an object")
        if "id" not in raw:
            raise ProjectsValidationError("updated_field.id is required")
        field_id = _as_int(raw["id"])
        if field_id is None:
            raise ProjectsValidationError(f"updated_field.id: value must be a valid integer (got {raw['id']!r})")
        if "value" not in raw:
            raise ProjectsValidationError("updated_field.value is required")
        return cls(field_id=field_id, value=raw["value"])

    def to_payload(self) -> Dict[str, Any]:
        return {"fields": [{"id": self.field_id, "value": self.value}]}


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


class ProjectList(BaseModel):
    """Result of ``list_projects``.

    In unspecified-owner mode the two scopes keep separate cursors in
    ``page_info_by_owner_type`` and ``note`` explains the limitation.
    """

    projects: List[MinimalProject] = Field(default_factory=list)
    page_info: Optional[PageInfo] = None
    page_info_by_owner_type: Dict[OwnerKind, PageInfo] = Field(default_factory=dict)
    note: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"projects": [p.to_payload() for p in self.projects]}
        if self.page_info is not None:
            payload["pageInfo"] = self.page_info.to_payload()
        if self.page_info_by_owner_type:
            payload["pageInfoByOwnerType"] = {
                kind.value: info.to_payload() for kind, info in self.page_info_by_owner_type.items()
            }
        if self.note:
            payload["note"] = self.note
        return payload


class AddItemResult(BaseModel):
    """``id`` is the item's GraphQL node ID, not the numeric REST item ID."""

    id: str
    message: str


class AssignResult(BaseModel):
    item_id: int
    message: str
    updates: List[str] = Field(default_factory=list)
