"""
Parameter tree views.

Parameters are stored as flat rows that point at their parent. Everything in
this module works on detached ``ParameterNode`` copies, so building a tree
never touches ORM state and calling it twice gives the same result.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Iterable

from knot.core.errors import ParameterTreeError
from knot.models.parameter import ParameterType


@dataclass
class ParameterNode:
    id: int
    name: str
    type: str
    param_type: str
    sort_order: int = 0
    api_id: int | None = None
    parent_id: int | None = None
    description: str | None = None
    required: bool = False
    children: list["ParameterNode"] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Any) -> "ParameterNode":
        """Copy the scalar columns of a ``Parameter`` (or another node); children are not copied."""
        param_type = row.param_type
        return cls(
            id=row.id,
            name=row.name,
            type=row.type.value if hasattr(row.type, "value") else row.type,
            param_type=param_type.value if hasattr(param_type, "value") else param_type,
            sort_order=row.sort_order or 0,
            api_id=row.api_id,
            parent_id=row.parent_id,
            description=row.description,
            required=bool(row.required),
        )

    def to_dict(self) -> dict:
        """Serialize with the camelCase keys used by the query-tool protocol."""
        return {
            "id": self.id,
            "apiId": self.api_id,
            "parentId": self.parent_id,
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "required": self.required,
            "paramType": self.param_type,
            "order": self.sort_order,
            "children": [child.to_dict() for child in self.children],
        }


def _sibling_key(node: ParameterNode) -> tuple[int, int]:
    return (node.sort_order, node.id)


def build_parameter_tree(rows: Iterable[Any]) -> list[ParameterNode]:
    """Build an ordered forest from the flat rows of one (api, direction) partition.

    Siblings are sorted by ``sort_order`` with the row id as tie breaker; the
    input order does not matter. A parent id that is not part of ``rows`` or a
    cycle in the parent relation raises ``ParameterTreeError``.
    """
    nodes = [ParameterNode.from_row(row) for row in rows]
    if not nodes:
        return []

    by_id: dict[int, ParameterNode] = {}
    for node in nodes:
        if node.id in by_id:
            raise ParameterTreeError(f"Duplicate parameter id {node.id}")
        by_id[node.id] = node

    roots: list[ParameterNode] = []
    for node in sorted(nodes, key=_sibling_key):
        if node.parent_id is None:
            roots.append(node)
            continue
        parent = by_id.get(node.parent_id)
        if parent is None:
            raise ParameterTreeError(
                f"Parameter {node.id} ({node.name!r}) references missing parent {node.parent_id}"
            )
        parent.children.append(node)

    reachable = sum(1 for _ in _walk(roots))
    if reachable != len(nodes):
        seen = {node.id for node in _walk(roots)}
        stuck = sorted(node_id for node_id in by_id if node_id not in seen)
        raise ParameterTreeError(f"Cyclic parent references among parameters {stuck}")

    return roots


def _walk(forest: list[ParameterNode]):
    stack = list(reversed(forest))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def flatten_parameter_tree(forest: list[ParameterNode]) -> list[ParameterNode]:
    """Pre-order list of every node in ``forest``, each copied without its children."""
    return [replace(node, children=[]) for node in _walk(forest)]


# ---------------------------------------------------------------------------
# Example synthesis
# ---------------------------------------------------------------------------

def _example_value(node: ParameterNode) -> Any:
    if node.type == ParameterType.STRING:
        return node.description if node.description else "string"
    if node.type == ParameterType.NUMBER:
        return 0
    if node.type == ParameterType.BOOLEAN:
        return False
    if node.type == ParameterType.ARRAY:
        if not node.children:
            return []
        if len(node.children) == 1 and node.children[0].type not in (ParameterType.OBJECT, ParameterType.ARRAY):
            return [_example_value(node.children[0])]
        # Several children describe the fields of one item
        return [generate_example_json(node.children)]
    if node.type == ParameterType.OBJECT:
        return generate_example_json(node.children)
    return None


def generate_example_json(forest: list[ParameterNode]) -> dict[str, Any]:
    """Synthesize a representative JSON object from a forest, keys in forest order."""
    return {node.name: _example_value(node) for node in forest}
