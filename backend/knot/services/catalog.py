"""Read-side queries over groups, APIs and their parameter trees."""
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from knot.config import settings
from knot.core.errors import NotFoundError, ValidationError
from knot.models.api import Api
from knot.models.group import Group
from knot.services.parameter_store import split_by_direction
from knot.services.parameter_tree import ParameterNode, build_parameter_tree, generate_example_json


@dataclass
class ApiDetail:
    api: Api
    group: Group | None
    request_parameters: list[ParameterNode] = field(default_factory=list)
    response_parameters: list[ParameterNode] = field(default_factory=list)


def list_groups(db: Session) -> list[Group]:
    return db.query(Group).order_by(Group.sort_order, Group.id).all()


def list_groups_with_apis(db: Session) -> list[Group]:
    return (
        db.query(Group)
        .options(selectinload(Group.apis))
        .order_by(Group.sort_order, Group.id)
        .all()
    )


def get_group(db: Session, group_id: int) -> Group:
    group = db.query(Group).filter(Group.id == group_id).first()
    if not group:
        raise NotFoundError("Group not found")
    return group


def find_group(db: Session, name_fragment: str) -> Group | None:
    """First group whose name contains ``name_fragment`` (case-insensitive), in display order."""
    if not name_fragment:
        raise ValidationError("groupName is required")
    return (
        db.query(Group)
        .filter(Group.name.icontains(name_fragment, autoescape=True))
        .order_by(Group.sort_order, Group.id)
        .first()
    )


def list_apis_by_group(db: Session, group_id: int) -> list[Api]:
    return (
        db.query(Api)
        .filter(Api.group_id == group_id)
        .order_by(Api.sort_order, Api.id)
        .all()
    )


def get_api(db: Session, api_id: int) -> Api:
    api = db.query(Api).filter(Api.id == api_id).first()
    if not api:
        raise NotFoundError("API not found")
    return api


def get_api_detail(db: Session, api_id: int) -> ApiDetail:
    """Load one API with its group and both parameter forests."""
    api = (
        db.query(Api)
        .options(joinedload(Api.group), selectinload(Api.parameters))
        .filter(Api.id == api_id)
        .first()
    )
    if not api:
        raise NotFoundError("API not found")

    request_rows, response_rows = split_by_direction(api.parameters)
    return ApiDetail(
        api=api,
        group=api.group,
        request_parameters=build_parameter_tree(request_rows),
        response_parameters=build_parameter_tree(response_rows),
    )


def search_apis(db: Session, query: str, limit: int | None = None) -> list[Api]:
    """Case-insensitive substring search over API name and endpoint."""
    if not query:
        raise ValidationError("query is required")
    return (
        db.query(Api)
        .options(joinedload(Api.group))
        .filter(
            or_(
                Api.name.icontains(query, autoescape=True),
                Api.endpoint.icontains(query, autoescape=True),
            )
        )
        .order_by(Api.id)
        .limit(limit or settings.SEARCH_LIMIT)
        .all()
    )


def build_examples(detail: ApiDetail) -> tuple[dict[str, Any] | None, dict[str, Any] | None]:
    """Example request/response payloads; ``None`` for a direction without parameters."""
    request_example = generate_example_json(detail.request_parameters) if detail.request_parameters else None
    response_example = generate_example_json(detail.response_parameters) if detail.response_parameters else None
    return request_example, response_example
