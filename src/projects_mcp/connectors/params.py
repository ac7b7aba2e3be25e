"""Tool argument extraction.

Every helper raises ``ProjectsValidationError`` so malformed input is rejected
before any request is issued.
"""

from typing import Any, Dict, List, Optional

from .exceptions import ProjectsValidationError

Arguments = Dict[str, Any]


def required_str(arguments: Arguments, name: str) -> str:
    value = arguments.get(name)
    if value is None:
        raise ProjectsValidationError(f"missing required parameter: {name}")
    if not isinstance(value, str):
        raise ProjectsValidationError(f"parameter {name} is not of type string")
    if value == "":
        raise ProjectsValidationError(f"missing required parameter: {name}")
    return value


def optional_str(arguments: Arguments, name: str) -> Optional[str]:
    value = arguments.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ProjectsValidationError(f"parameter {name} is not of type string")
    return value or None


def _to_int(name: str, value: Any) -> int:
    # JSON numbers may arrive as integral floats; bool is an int subclass and is rejected.
    if isinstance(value, bool):
        raise ProjectsValidationError(f"parameter {name} is not a valid number")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ProjectsValidationError(f"parameter {name} is not a valid number")


def required_int(arguments: Arguments, name: str) -> int:
    if arguments.get(name) is None:
        raise ProjectsValidationError(f"missing required parameter: {name}")
    return _to_int(name, arguments[name])


def optional_int(arguments: Arguments, name: str) -> Optional[int]:
    if arguments.get(name) is None:
        return None
    return _to_int(name, arguments[name])


def optional_int_list(arguments: Arguments, name: str) -> Optional[List[int]]:
    """List of IDs given as numbers or numeric strings, e.g. ``["102589", 985201]``."""
    raw = arguments.get(name)
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise ProjectsValidationError(f"parameter {name} must be an array")

    ids = []
    for entry in raw:
        if isinstance(entry, str):
            try:
                ids.append(int(entry.strip()))
            except ValueError:
                raise ProjectsValidationError(
                    f"parameter {name} contains a non-numeric ID: {entry!r}"
                ) from None
        else:
            ids.append(_to_int(name, entry))
    return ids or None


def optional_per_page(arguments: Arguments) -> Optional[int]:
    per_page = optional_int(arguments, "per_page")
    if per_page is not None and per_page < 1:
        raise ProjectsValidationError("per_page must be at least 1")
    return per_page
