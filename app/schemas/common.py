"""
Shared response envelope and validation-error helpers.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

# Request locations FastAPI prefixes onto error locs
_LOC_PREFIXES = {"body", "query", "path", "header"}


def envelope(data: Optional[Dict[str, Any]] = None, message: Optional[str] = None, **extra) -> Dict[str, Any]:
    """Wrap a successful payload as {"success": true, "message"?, "data"?, ...}."""
    body: Dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    body.update(extra)
    if data is not None:
        body["data"] = data
    return body


def _field_name(loc: Iterable[Any]) -> str:
    parts = [str(part) for part in loc]
    if len(parts) > 1 and parts[0] in _LOC_PREFIXES:
        parts = parts[1:]
    return ".".join(parts) or "body"


def field_errors(
    raw_errors: Iterable[Mapping[str, Any]],
    messages: Optional[Mapping[str, str]] = None,
) -> List[Dict[str, str]]:
    """
    Flatten pydantic error dicts into [{"field", "message"}], one entry per field.

    Args:
        raw_errors: Output of ``exc.errors()``
        messages: Public field name -> message used instead of pydantic's wording
    """
    messages = messages or {}
    result: List[Dict[str, str]] = []
    seen = set()
    for error in raw_errors:
        field = _field_name(error.get("loc", ()))
        head = field.partition(".")[0]
        if field in seen:
            continue
        seen.add(field)

        if error.get("type") == "missing":
            message = f"{head} is required"
        elif error.get("type") == "extra_forbidden":
            message = f"{head} cannot be set"
        else:
            message = messages.get(head) or str(error.get("msg", "Invalid value"))
        result.append({"field": field, "message": message})
    return result


def pydantic_field_errors(
    exc: PydanticValidationError,
    messages: Optional[Mapping[str, str]] = None,
) -> List[Dict[str, str]]:
    return field_errors(exc.errors(), messages=messages)
