#!/usr/bin/env python3
# src/openapi_mcp_server/tools/formatters.py
"""
Human-readable rendering of API entities for tool results.

Used when the deployment picks ``ResultFormat.FORMATTED``; the raw strategy
never touches this module.
"""

import math
from collections.abc import Callable
from datetime import datetime
from typing import Any

import orjson

from ..types import text_result

Line = tuple[str, Callable[[dict[str, Any]], Any]]


def _yes_no(value: Any) -> str:
    return "Yes" if value else "No"


def _date(value: Any) -> str | None:
    """ISO timestamp -> YYYY-MM-DD; unparsable values are shown as-is."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return str(value)


def _field(name: str) -> Callable[[dict[str, Any]], Any]:
    return lambda entity: entity.get(name)


def _joined(name: str) -> Callable[[dict[str, Any]], Any]:
    return lambda entity: ", ".join(map(str, entity[name])) if entity.get(name) else None


def _timestamp(name: str) -> Callable[[dict[str, Any]], Any]:
    return lambda entity: _date(entity.get(name))


# (title fields, summary lines, detail-only lines)
_ENTITY_LAYOUTS: dict[str, tuple[tuple[str, ...], list[Line], list[Line]]] = {
    "module": (
        ("name",),
        [
            ("Description", _field("description")),
            ("Author", _field("author")),
            ("Builtin", lambda e: _yes_no(e.get("builtin"))),
            ("Supported Games", _joined("supportedGames")),
            ("Created", _timestamp("createdAt")),
            ("Updated", _timestamp("updatedAt")),
        ],
        [("Version", _field("version")), ("Required Permissions", _joined("permissions"))],
    ),
    "player": (
        ("name",),
        [
            ("Steam ID", _field("steamId")),
            ("Epic ID", _field("epicOnlineServicesId")),
            ("Online", lambda e: _yes_no(e.get("online"))),
            ("Country", _field("country")),
            ("First Seen", _timestamp("createdAt")),
            ("Last Seen", _timestamp("lastSeen")),
        ],
        [("Currency", _field("currency")), ("XP", _field("xp")), ("Playtime", _field("playtime"))],
    ),
    "gameserver": (
        ("name",),
        [
            ("Type", _field("type")),
            ("Status", lambda e: "Online" if e.get("reachable") else "Offline"),
            ("Created", _timestamp("createdAt")),
            ("Updated", _timestamp("updatedAt")),
        ],
        [("Version", _field("version"))],
    ),
    "item": (
        ("name",),
        [
            ("Code", _field("code")),
            ("Description", _field("description")),
            ("Price", _field("price")),
            ("Quality", _field("quality")),
            ("Created", _timestamp("createdAt")),
        ],
        [("Amount", _field("amount")), ("Server ID", _field("gameserverId"))],
    ),
    "role": (
        ("name",),
        [
            ("Description", _field("description")),
            ("System Role", lambda e: _yes_no(e.get("system"))),
            ("Permissions", lambda e: f"{len(e['permissions'])} assigned" if e.get("permissions") else None),
            ("Created", _timestamp("createdAt")),
        ],
        [],
    ),
    "hook": (
        ("name",),
        [
            ("Event", _field("eventType")),
            ("Enabled", lambda e: _yes_no(e.get("enabled"))),
            ("Last Triggered", _timestamp("lastTriggered")),
        ],
        [],
    ),
    "cronjob": (
        ("name",),
        [
            ("Schedule", _field("temporalValue")),
            ("Enabled", lambda e: _yes_no(e.get("enabled"))),
            ("Last Run", _timestamp("lastRun")),
        ],
        [],
    ),
    "event": (
        ("eventName", "eventType", "type"),
        [
            ("Player ID", _field("playerId")),
            ("Server ID", _field("gameserverId")),
            ("Timestamp", _field("createdAt")),
        ],
        [("Data", lambda e: orjson.dumps(e["meta"]).decode() if e.get("meta") else None)],
    ),
    "function": (
        ("name",),
        [("Description", _field("description")), ("Module ID", _field("moduleId"))],
        [("Code Length", lambda e: f"{len(e['code'])} characters" if e.get("code") else None)],
    ),
    "variable": (
        ("key", "name"),
        [
            ("Value", lambda e: e["value"] if isinstance(e.get("value"), str) else None),
            ("Server ID", _field("gameServerId")),
            ("Player ID", _field("playerId")),
            ("Module ID", _field("moduleId")),
        ],
        [],
    ),
    "command": (
        ("name",),
        [("Trigger", _field("trigger")), ("Help", _field("helpText")), ("Module ID", _field("moduleId"))],
        [("Arguments", lambda e: len(e["arguments"]) if e.get("arguments") else None)],
    ),
}

_GENERIC_FIELDS = ("description", "type", "status", "enabled", "active")


def _normalize_entity_type(entity_type: str) -> str:
    normalized = entity_type.lower().replace(" ", "")
    if normalized.endswith("s") and normalized[:-1] in _ENTITY_LAYOUTS:
        normalized = normalized[:-1]
    return normalized


class ResponseFormatter:
    """Render entities and entity lists as plain text."""

    def format_paginated_list(
        self, response: dict[str, Any], entity_type: str, query: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Format a ``{data: [...], meta: {...}}`` envelope."""
        items = response.get("data") or []
        meta = response.get("meta") or {}
        query = query or {}

        total = meta.get("total") or len(items)
        page = query.get("page") or meta.get("page") or 0
        limit = query.get("limit") or meta.get("limit") or len(items) or 10
        total_pages = math.ceil(total / limit) if limit else 1

        text = f"Found {total} {entity_type}"
        if total_pages > 1:
            text += f" (page {page + 1} of {total_pages})"
        text += "\n\n"

        if not items:
            text += f"No {entity_type} found matching your criteria."
        else:
            for index, item in enumerate(items, start=1):
                text += f"{index}. {self.format_entity(item, entity_type)}\n"

        return text_result(text)

    def format_single_entity(self, entity: dict[str, Any], entity_type: str) -> dict[str, Any]:
        return text_result(self.format_entity(entity, entity_type, detailed=True))

    def format_entity(self, entity: Any, entity_type: str, detailed: bool = False) -> str:
        """Render one entity: a title line followed by indented fields."""
        if not isinstance(entity, dict):
            return f"{entity}\n"

        layout = _ENTITY_LAYOUTS.get(_normalize_entity_type(entity_type))
        if layout is None:
            return self._format_generic(entity)

        title_fields, lines, detail_lines = layout
        title = next((entity[f] for f in title_fields if entity.get(f)), None) or f"Unnamed {entity_type}"
        result = f"{title}\n   ID: {entity.get('id')}"

        for label, getter in lines + (detail_lines if detailed else []):
            value = getter(entity)
            if value is not None and value != "":
                result += f"\n   {label}: {value}"
        return result + "\n"

    def _format_generic(self, entity: dict[str, Any]) -> str:
        title = entity.get("name") or entity.get("title") or entity.get("label") or "Unnamed Entity"
        result = f"{title}\n   ID: {entity.get('id')}"

        for field in _GENERIC_FIELDS:
            if field in entity and entity[field] is not None:
                value = _yes_no(entity[field]) if isinstance(entity[field], bool) else entity[field]
                result += f"\n   {field.capitalize()}: {value}"

        for label, key in (("Created", "createdAt"), ("Updated", "updatedAt")):
            if entity.get(key):
                result += f"\n   {label}: {_date(entity[key])}"
        return result + "\n"

    def format_error(self, error: Any) -> dict[str, Any]:
        """Render an API error; structured ``errors`` lists are itemised."""
        text = "An error occurred while processing your request.\n\n"
        details = getattr(error, "details", None)

        if isinstance(details, dict) and isinstance(details.get("errors"), list):
            text += "Errors:\n"
            for item in details["errors"]:
                message = item.get("message") or item.get("detail") if isinstance(item, dict) else item
                text += f"- {message}\n"
        elif isinstance(details, dict) and isinstance(details.get("meta"), dict) and details["meta"].get("error"):
            api_error = details["meta"]["error"]
            text += f"Error: {api_error.get('message', api_error) if isinstance(api_error, dict) else api_error}"
        elif str(error):
            text += f"Error: {error}"
        else:
            text += "Unknown error occurred."

        return text_result(text, is_error=True)
