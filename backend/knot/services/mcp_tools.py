"""
Query tools for assistants.

Each tool takes the small argument mapping sent by the MCP server and returns
a JSON-ready payload. Bad arguments raise ``ValidationError``, unknown ids or
names raise ``NotFoundError``; the route turns both into ``{"error": ...}``.
"""
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy.orm import Session

from knot.core.errors import NotFoundError, ValidationError
from knot.models.api import Api
from knot.models.group import Group
from knot.services import catalog


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _enum_value(value: Any) -> Any:
    return value.value if hasattr(value, "value") else value


def _require_str(args: dict, key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{key} is required")
    return value


def _require_id(args: dict, key: str) -> int:
    value = args.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{key} (number) is required")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{key} must be an integer")
    return int(value)


def _api_summary(api: Api) -> dict:
    return {
        "id": api.id,
        "name": api.name,
        "endpoint": api.endpoint,
        "method": _enum_value(api.method),
        "type": _enum_value(api.type),
    }


def _group_ref(group: Group | None) -> dict | None:
    if group is None:
        return None
    return {"id": group.id, "name": group.name}


def _find_group_or_404(db: Session, args: dict) -> Group:
    group_name = _require_str(args, "groupName")
    group = catalog.find_group(db, group_name)
    if group is None:
        raise NotFoundError(f"No group found matching: {group_name}")
    return group


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------

def list_groups(db: Session, args: dict) -> list[dict]:
    groups = db.query(Group).order_by(Group.created_at.desc(), Group.id.desc()).all()
    return [{"id": g.id, "name": g.name, "createdAt": _iso(g.created_at)} for g in groups]


def get_group(db: Session, args: dict) -> dict:
    group = _find_group_or_404(db, args)
    return {
        "id": group.id,
        "name": group.name,
        "apiCount": len(group.apis),
        "createdAt": _iso(group.created_at),
    }


def list_apis_by_group(db: Session, args: dict) -> dict:
    group = _find_group_or_404(db, args)
    return {
        "group": _group_ref(group),
        "apis": [_api_summary(api) for api in catalog.list_apis_by_group(db, group.id)],
    }


def get_api(db: Session, args: dict) -> dict:
    detail = catalog.get_api_detail(db, _require_id(args, "apiId"))
    api = detail.api
    return {
        **_api_summary(api),
        "note": api.note,
        "group": _group_ref(detail.group),
        "requestParameters": [node.to_dict() for node in detail.request_parameters],
        "responseParameters": [node.to_dict() for node in detail.response_parameters],
    }


def search_apis(db: Session, args: dict) -> dict:
    apis = catalog.search_apis(db, _require_str(args, "query"))
    results = [{**_api_summary(api), "group": _group_ref(api.group)} for api in apis]
    return {"count": len(results), "apis": results}


def get_api_json_example(db: Session, args: dict) -> dict:
    detail = catalog.get_api_detail(db, _require_id(args, "apiId"))
    request_example, response_example = catalog.build_examples(detail)
    return {
        "apiName": detail.api.name,
        "endpoint": detail.api.endpoint,
        "method": _enum_value(detail.api.method),
        "requestExample": request_example,
        "responseExample": response_example,
    }


TOOLS: dict[str, Callable[[Session, dict], Any]] = {
    "list_groups": list_groups,
    "get_group": get_group,
    "list_apis_by_group": list_apis_by_group,
    "get_api": get_api,
    "search_apis": search_apis,
    "get_api_json_example": get_api_json_example,
}


def call_tool(db: Session, tool: str, args: dict | None) -> Any:
    if not tool:
        raise ValidationError("Tool name is required")
    handler = TOOLS.get(tool)
    if handler is None:
        raise ValidationError(f"Unknown tool: {tool}")
    return handler(db, args or {})
