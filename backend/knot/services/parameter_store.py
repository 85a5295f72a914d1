"""
Persistence of parameter partitions.

A partition is every parameter row of one (api, direction) pair. Partitions
are never patched: ``replace_partition`` reads the old rows, deletes them and
inserts the new ones inside a single transaction.
"""
import itertools
import logging
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from knot.core.errors import CatalogError, NotFoundError, StorageError, ValidationError
from knot.models.api import Api
from knot.models.parameter import Parameter, ParamDirection

logger = logging.getLogger(__name__)

# Writers of one partition always map to the same stripe; the pool never grows
_PARTITION_LOCK_STRIPES = 64
_partition_locks = [Lock() for _ in range(_PARTITION_LOCK_STRIPES)]


@dataclass
class ParameterDraft:
    """A parameter that is about to be written, still in nested form."""

    name: str
    type: str
    required: bool = False
    description: str | None = None
    children: list["ParameterDraft"] = field(default_factory=list)


def validate_direction(value: str) -> str:
    try:
        return ParamDirection(value).value
    except ValueError:
        raise ValidationError("Invalid paramType. Must be 'request' or 'response'") from None


def _partition_lock(api_id: int, direction: str) -> Lock:
    return _partition_locks[hash((api_id, direction)) % _PARTITION_LOCK_STRIPES]


def load_partition(db: Session, api_id: int, direction: str) -> list[Parameter]:
    direction = validate_direction(direction)
    return (
        db.query(Parameter)
        .filter(Parameter.api_id == api_id, Parameter.param_type == direction)
        .order_by(Parameter.sort_order, Parameter.id)
        .all()
    )


def split_by_direction(rows: list[Parameter]) -> tuple[list[Parameter], list[Parameter]]:
    request_rows = [p for p in rows if p.param_type == ParamDirection.REQUEST.value]
    response_rows = [p for p in rows if p.param_type == ParamDirection.RESPONSE.value]
    return request_rows, response_rows


def _insert_drafts(db: Session, api_id: int, direction: str, drafts: list[ParameterDraft]) -> list[Parameter]:
    inserted: list[Parameter] = []
    # One counter for the whole import, shared by every depth
    order = itertools.count()

    def _insert(items: list[ParameterDraft], parent_id: int | None) -> None:
        for draft in items:
            row = Parameter(
                api_id=api_id,
                parent_id=parent_id,
                name=draft.name,
                type=draft.type,
                description=draft.description,
                required=draft.required,
                param_type=direction,
                sort_order=next(order),
            )
            db.add(row)
            # Children need the generated id of their parent
            db.flush()
            inserted.append(row)
            if draft.children:
                _insert(draft.children, row.id)

    _insert(drafts, None)
    return inserted


def replace_partition(
    db: Session,
    api_id: int,
    direction: str,
    build_drafts: Callable[[list[Parameter]], list[ParameterDraft]],
) -> list[Parameter]:
    """Replace the parameters of one partition atomically.

    ``build_drafts`` receives the current rows of the partition (read before
    anything is deleted) and returns the new forest to persist. Writers of the
    same partition are serialized; any failure rolls the whole replacement back.
    """
    direction = validate_direction(direction)

    with _partition_lock(api_id, direction):
        try:
            api = db.query(Api).filter(Api.id == api_id).with_for_update().first()
            if api is None:
                raise NotFoundError("API not found")

            existing = load_partition(db, api_id, direction)
            drafts = build_drafts(existing)

            (
                db.query(Parameter)
                .filter(Parameter.api_id == api_id, Parameter.param_type == direction)
                .delete(synchronize_session=False)
            )
            # Rows loaded above are gone now; drop them from the identity map
            for row in existing:
                db.expunge(row)

            inserted = _insert_drafts(db, api_id, direction, drafts)
            db.commit()
        except CatalogError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Replacing %s parameters of API %s failed", direction, api_id)
            raise StorageError("Failed to replace parameters") from e

    logger.info(
        "Replaced %s parameters of API %s: %d removed, %d inserted",
        direction, api_id, len(existing), len(inserted),
    )
    return inserted
