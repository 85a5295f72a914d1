"""Write-side operations on groups and APIs."""
import logging
from typing import Any, Iterable

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from knot.core.errors import StorageError, ValidationError
from knot.models.api import Api, ApiType
from knot.models.group import Group
from knot.services.catalog import get_api, get_group

logger = logging.getLogger(__name__)

_API_FIELDS = ("name", "endpoint", "method", "type", "note")


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to %s", action)
        raise StorageError(f"Failed to {action}") from e


def _check_group_name(db: Session, name: str, exclude_id: int | None = None) -> None:
    if not name:
        raise ValidationError("Group name is required")
    query = db.query(Group.id).filter(Group.name == name)
    if exclude_id is not None:
        query = query.filter(Group.id != exclude_id)
    if query.first():
        raise ValidationError("Group name already exists")


def _check_method(api_type: ApiType | str, method: Any) -> None:
    if ApiType(api_type) == ApiType.HTTP and not method:
        raise ValidationError("Method is required for HTTP APIs")


def _next_order(db: Session, column, *criteria) -> int:
    current = db.query(func.coalesce(func.max(column), 0)).filter(*criteria).scalar()
    return current + 1


def _save_group(db: Session, group: Group, action: str) -> Group:
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with another writer using the same name
        db.rollback()
        raise ValidationError("Group name already exists") from None
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to %s", action)
        raise StorageError(f"Failed to {action}") from e
    db.refresh(group)
    return group


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------

def create_group(db: Session, name: str) -> Group:
    _check_group_name(db, name)
    group = Group(name=name, sort_order=_next_order(db, Group.sort_order))
    db.add(group)
    group = _save_group(db, group, "create group")
    logger.info("Created group %s (%s)", group.id, group.name)
    return group


def rename_group(db: Session, group_id: int, name: str) -> Group:
    group = get_group(db, group_id)
    _check_group_name(db, name, exclude_id=group_id)
    group.name = name
    return _save_group(db, group, "update group")


def delete_group(db: Session, group_id: int) -> None:
    group = get_group(db, group_id)
    db.delete(group)
    _commit(db, "delete group")
    logger.info("Deleted group %s", group_id)


def reorder_groups(db: Session, orders: Iterable[tuple[int, int]]) -> None:
    """Apply ``(id, sort_order)`` pairs in one transaction; unknown ids are ignored."""
    for group_id, sort_order in orders:
        db.query(Group).filter(Group.id == group_id).update({"sort_order": sort_order})
    _commit(db, "update group orders")


# ---------------------------------------------------------------------------
# APIs
# ---------------------------------------------------------------------------

def create_api(
    db: Session,
    group_id: int,
    name: str,
    endpoint: str,
    type: ApiType,
    method: str | None = None,
    note: str | None = None,
) -> Api:
    if not name or not endpoint:
        raise ValidationError("Missing required fields")
    _check_method(type, method)
    get_group(db, group_id)

    api = Api(
        group_id=group_id,
        name=name,
        endpoint=endpoint,
        method=method or None,
        type=type,
        note=note,
        sort_order=_next_order(db, Api.sort_order, Api.group_id == group_id),
    )
    db.add(api)
    _commit(db, "create API")
    db.refresh(api)
    logger.info("Created API %s (%s) in group %s", api.id, api.name, group_id)
    return api


def update_api(db: Session, api_id: int, changes: dict[str, Any]) -> Api:
    """Partial update; only keys present in ``changes`` are touched."""
    api = get_api(db, api_id)
    updates = {key: value for key, value in changes.items() if key in _API_FIELDS}
    for key in ("name", "endpoint", "type"):
        if key in updates and not updates[key]:
            raise ValidationError(f"{key} cannot be empty")

    _check_method(updates.get("type", api.type), updates.get("method", api.method))
    for key, value in updates.items():
        setattr(api, key, value)

    _commit(db, "update API")
    db.refresh(api)
    return api


def update_api_note(db: Session, api_id: int, note: str | None) -> Api:
    api = get_api(db, api_id)
    api.note = note
    _commit(db, "update API note")
    db.refresh(api)
    return api


def reorder_apis(db: Session, orders: Iterable[tuple[int, int]]) -> None:
    for api_id, sort_order in orders:
        db.query(Api).filter(Api.id == api_id).update({"sort_order": sort_order})
    _commit(db, "update API orders")


def delete_api(db: Session, api_id: int) -> None:
    api = get_api(db, api_id)
    db.delete(api)
    _commit(db, "delete API")
    logger.info("Deleted API %s", api_id)
