"""Helpers for decoding Worktile id responses."""

from typing import Any

from svn_worktile.exceptions import ApiError


def parse_id(data: dict[str, Any], method: str, path: str) -> str:
    """Get ``id`` from a create response."""
    entity_id = data.get("id")
    if entity_id is None:
        raise ApiError("INVALID_RESPONSE", "response has no id", method, path)
    return str(entity_id)


def parse_ids(data: dict[str, Any], method: str, path: str) -> list[str]:
    """Get the ids of ``values`` from a query response."""
    values = data.get("values")
    if not isinstance(values, list):
        raise ApiError("INVALID_RESPONSE", "response has no values list", method, path)
    return [parse_id(value, method, path) for value in values if isinstance(value, dict)]
