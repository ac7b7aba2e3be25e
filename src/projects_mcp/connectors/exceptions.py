"""Exception types for the Projects v2 connector.

Raised by the REST/GraphQL clients and the resolvers in ``projects_mcp.projects``
and caught at the tool boundary in ``ProjectsConnector.execute_tool()``, where
they are rendered as structured error payloads.
"""

from typing import Any, Dict, List, Optional

MAX_BODY_CHARS = 500


class ProjectsError(Exception):
    """Base exception for all Projects connector errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_payload(self) -> Dict[str, Any]:
        """Structured error payload returned to tool callers."""
        return {"error": self.message, "error_type": type(self).__name__}


class ProjectsValidationError(ProjectsError):
    """Malformed or missing argument, detected before any network call."""

    pass


class ResolutionError(ProjectsError):
    """An identifier could not be resolved to a concrete resource."""

    def __init__(self, message: str, identifier: str = ""):
        self.identifier = identifier
        super().__init__(message)

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        if self.identifier:
            payload["identifier"] = self.identifier
        return payload


class OwnerNotResolvedError(ResolutionError):
    """Owner is neither a user nor an organization (for the given project)."""

    def __init__(self, owner: str, project_number: Optional[int] = None, message: str = ""):
        self.owner = owner
        self.project_number = project_number
        if not message:
            message = (
                f"could not determine owner type for {owner} with project {project_number}: "
                "owner is neither a user nor an org with this project"
            )
        identifier = owner if project_number is None else f"{owner}/{project_number}"
        super().__init__(message, identifier=identifier)


class ContentNotFoundError(ResolutionError):
    """Repository or numbered issue/pull request does not exist."""

    def __init__(self, owner: str, repo: str, number: int, kind: str, detail: str = ""):
        self.owner = owner
        self.repo = repo
        self.number = number
        self.kind = kind
        label = "pull request" if kind == "pull_request" else "issue"
        message = f"failed to resolve {label} {owner}/{repo}#{number}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, identifier=f"{owner}/{repo}#{number}")


class ProjectNotFoundError(ResolutionError):
    """Project node ID lookup returned nothing for the owner/number."""

    def __init__(self, owner: str, project_number: int):
        self.owner = owner
        self.project_number = project_number
        super().__init__(
            f"failed to get project ID: project {owner}/{project_number} not found",
            identifier=f"{owner}/{project_number}",
        )


class FieldNotFoundError(ResolutionError):
    """No project field carries the requested name."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f'field "{field_name}" not found in project', identifier=field_name)


class OptionNotFoundError(ResolutionError):
    """The field exists but none of its options carries the requested name."""

    def __init__(self, field_name: str, option_name: str):
        self.field_name = field_name
        self.option_name = option_name
        super().__init__(
            f'option "{option_name}" not found in field "{field_name}"',
            identifier=f"{field_name}={option_name}",
        )


class ItemNotLocatedError(ResolutionError):
    """A freshly added item was not found within the bounded item scan."""

    def __init__(self, owner: str, repo: str, number: int):
        self.owner = owner
        self.repo = repo
        self.number = number
        super().__init__(
            f"project item for issue {owner}/{repo}#{number} not found (list may be paginated)",
            identifier=f"{owner}/{repo}#{number}",
        )


class UpstreamAPIError(ProjectsError):
    """Transport failure or non-success status from either backend."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: str = "",
    ):
        self.status_code = status_code
        self.response_body = (response_body or "")[:MAX_BODY_CHARS]
        super().__init__(message)

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        if self.status_code is not None:
            payload["status_code"] = self.status_code
        if self.response_body:
            payload["response_body"] = self.response_body
        return payload


class GraphQLError(UpstreamAPIError):
    """The GraphQL endpoint answered with an ``errors`` array."""

    def __init__(
        self,
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None,
        status_code: Optional[int] = None,
    ):
        self.errors = errors or []
        super().__init__(message, status_code=status_code, response_body=str(self.errors))

    @property
    def is_not_found(self) -> bool:
        return any(e.get("type") == "NOT_FOUND" for e in self.errors)


class PartialWorkflowError(ProjectsError):
    """A later workflow step failed after earlier steps already mutated state.

    ``applied`` lists the effects that persist; nothing is rolled back.
    """

    def __init__(self, step: str, applied: List[str], cause: ProjectsError):
        self.step = step
        self.applied = list(applied)
        self.cause = cause
        message = f"{step}: {cause.message}"
        if self.applied:
            message += f" (already applied, not rolled back: {', '.join(self.applied)})"
        super().__init__(message)

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["step"] = self.step
        payload["applied"] = self.applied
        cause = self.cause.to_payload()
        for key in ("status_code", "response_body", "identifier"):
            if key in cause:
                payload[key] = cause[key]
        return payload


class MarshalError(ProjectsError):
    """Serializing a result failed; indicates a logic defect."""

    pass
