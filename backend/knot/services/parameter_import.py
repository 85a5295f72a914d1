"""
Importers that rebuild a parameter partition.

``import_parameters_from_json`` derives the tree from an example payload and
keeps the ``required``/``description`` metadata of same-named parameters.
``import_structured_parameters`` stores an explicit, already typed tree.
"""
from dataclasses import dataclass
from typing import Any, Iterable

from sqlalchemy.orm import Session

from knot.config import settings
from knot.core.errors import ValidationError
from knot.models.parameter import Parameter, ParameterType
from knot.services.parameter_store import ParameterDraft, replace_partition, validate_direction

# Name of the synthesized child that describes the elements of a scalar array
ARRAY_ITEM_NAME = "item"


@dataclass
class JsonImportResult:
    count: int
    parameter_count: int


# ---------------------------------------------------------------------------
# JSON -> parameters
# ---------------------------------------------------------------------------

def infer_parameter_type(value: Any) -> tuple[str, dict | None]:
    """Return the parameter type of a JSON value and the object whose keys become its children."""
    if isinstance(value, list):
        if value and isinstance(value[0], dict):
            return ParameterType.ARRAY.value, value[0]
        return ParameterType.ARRAY.value, None
    if isinstance(value, dict):
        return ParameterType.OBJECT.value, value
    if isinstance(value, str):
        return ParameterType.STRING.value, None
    # bool is a subclass of int
    if isinstance(value, bool):
        return ParameterType.BOOLEAN.value, None
    if isinstance(value, (int, float)):
        return ParameterType.NUMBER.value, None
    return ParameterType.STRING.value, None


def _check_depth(depth: int) -> None:
    if depth > settings.MAX_PARAMETER_DEPTH:
        raise ValidationError(f"Parameters nest deeper than {settings.MAX_PARAMETER_DEPTH} levels")


def json_to_parameter_drafts(data: Any, existing: Iterable[Parameter]) -> list[ParameterDraft]:
    """Derive a parameter forest from ``data``, copying metadata from ``existing`` by name.

    Matching is by name only, at any depth. When several existing rows share
    a name the last one wins. A non-empty array of scalars (or of arrays) gets
    one child named ``item`` typed after its first element.
    """
    if not isinstance(data, dict):
        raise ValidationError("Invalid json object")

    known: dict[str, Parameter] = {}
    for row in existing:
        known[row.name] = row

    def _draft(name: str, value: Any, depth: int) -> ParameterDraft:
        _check_depth(depth)
        param_type, template = infer_parameter_type(value)
        if template is not None:
            children = _convert(template, depth + 1)
        elif isinstance(value, list) and value:
            children = [_draft(ARRAY_ITEM_NAME, value[0], depth + 1)]
        else:
            children = []

        previous = known.get(name)
        return ParameterDraft(
            name=name,
            type=param_type,
            required=bool(previous.required) if previous else False,
            description=previous.description if previous else None,
            children=children,
        )

    def _convert(obj: dict, depth: int) -> list[ParameterDraft]:
        return [_draft(key, value, depth) for key, value in obj.items()]

    return _convert(data, 1)


def import_parameters_from_json(db: Session, api_id: int, direction: str, data: Any) -> JsonImportResult:
    direction = validate_direction(direction)
    if not isinstance(data, dict):
        raise ValidationError("Invalid json object")

    rows = replace_partition(db, api_id, direction, lambda existing: json_to_parameter_drafts(data, existing))
    return JsonImportResult(count=len(rows), parameter_count=len(data))


# ---------------------------------------------------------------------------
# Structured descriptors -> parameters
# ---------------------------------------------------------------------------

def _descriptor_field(descriptor: Any, name: str, default: Any = None) -> Any:
    if isinstance(descriptor, dict):
        return descriptor.get(name, default)
    return getattr(descriptor, name, default)


def descriptors_to_drafts(descriptors: Iterable[Any], depth: int = 1) -> list[ParameterDraft]:
    """Turn descriptors (``ParameterIn`` models or plain dicts) into drafts, validating each one."""
    drafts = []
    for descriptor in descriptors:
        _check_depth(depth)
        name = _descriptor_field(descriptor, "name")
        if not isinstance(name, str) or not name:
            raise ValidationError("Parameter name is required")

        raw_type = _descriptor_field(descriptor, "type")
        try:
            param_type = ParameterType(raw_type).value
        except ValueError:
            raise ValidationError(f"Invalid type {raw_type!r} for parameter {name!r}") from None

        children = _descriptor_field(descriptor, "children") or []
        drafts.append(
            ParameterDraft(
                name=name,
                type=param_type,
                required=bool(_descriptor_field(descriptor, "required", False)),
                description=_descriptor_field(descriptor, "description") or None,
                children=descriptors_to_drafts(children, depth + 1),
            )
        )
    return drafts


def import_structured_parameters(db: Session, api_id: int, direction: str, descriptors: Iterable[Any]) -> int:
    direction = validate_direction(direction)
    # Validate the whole tree before the partition is touched
    drafts = descriptors_to_drafts(descriptors)
    rows = replace_partition(db, api_id, direction, lambda existing: drafts)
    return len(rows)
