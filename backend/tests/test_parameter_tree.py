from types import SimpleNamespace

import pytest

from knot.core.errors import ParameterTreeError
from knot.services.parameter_tree import (
    ParameterNode,
    build_parameter_tree,
    flatten_parameter_tree,
)


def row(id, name, type="string", parent_id=None, sort_order=0, **kwargs):
    kwargs.setdefault("description", None)
    kwargs.setdefault("required", False)
    kwargs.setdefault("param_type", "request")
    kwargs.setdefault("api_id", 1)
    return SimpleNamespace(id=id, name=name, type=type, parent_id=parent_id, sort_order=sort_order, **kwargs)


@pytest.fixture
def user_rows():
    return [
        row(1, "user", "object", sort_order=0),
        row(2, "name", "string", parent_id=1, sort_order=1),
        row(3, "tags", "array", parent_id=1, sort_order=2),
        row(4, "tag", "string", parent_id=3, sort_order=3),
        row(5, "token", "string", sort_order=4),
    ]


def _names(forest):
    return [node.name for node in forest]


def test_empty_input_gives_empty_forest():
    assert build_parameter_tree([]) == []


def test_builds_nested_forest(user_rows):
    forest = build_parameter_tree(user_rows)

    assert _names(forest) == ["user", "token"]
    user = forest[0]
    assert _names(user.children) == ["name", "tags"]
    assert _names(user.children[1].children) == ["tag"]
    assert forest[1].children == []


def test_siblings_sorted_by_order_regardless_of_input_order():
    rows = [
        row(10, "c", sort_order=3),
        row(11, "a", sort_order=1),
        row(12, "b", sort_order=2),
    ]
    assert _names(build_parameter_tree(rows)) == ["a", "b", "c"]
    assert _names(build_parameter_tree(list(reversed(rows)))) == ["a", "b", "c"]


def test_order_ties_broken_by_id():
    rows = [row(3, "third"), row(1, "first"), row(2, "second")]
    assert _names(build_parameter_tree(rows)) == ["first", "second", "third"]


def test_build_is_idempotent(user_rows):
    assert build_parameter_tree(user_rows) == build_parameter_tree(user_rows)


def test_build_does_not_touch_input_rows(user_rows):
    build_parameter_tree(user_rows)
    for r in user_rows:
        assert not hasattr(r, "children")


def test_nodes_are_copies():
    nodes = build_parameter_tree([row(1, "a", "object"), row(2, "b", parent_id=1)])
    again = build_parameter_tree(flatten_parameter_tree(nodes))
    again[0].children.clear()
    assert _names(nodes[0].children) == ["b"]


def test_flatten_round_trip(user_rows):
    forest = build_parameter_tree(user_rows)
    flat = flatten_parameter_tree(forest)

    assert [node.name for node in flat] == ["user", "name", "tags", "tag", "token"]
    assert all(node.children == [] for node in flat)
    assert build_parameter_tree(flat) == forest


def test_dangling_parent_is_an_integrity_error():
    rows = [row(1, "a"), row(2, "b", parent_id=99)]
    with pytest.raises(ParameterTreeError, match="missing parent 99"):
        build_parameter_tree(rows)


def test_cycle_is_an_integrity_error():
    rows = [row(1, "root"), row(2, "a", parent_id=3), row(3, "b", parent_id=2)]
    with pytest.raises(ParameterTreeError, match="Cyclic"):
        build_parameter_tree(rows)


def test_self_parent_is_a_cycle():
    with pytest.raises(ParameterTreeError):
        build_parameter_tree([row(1, "loop", parent_id=1)])


def test_duplicate_ids_rejected():
    with pytest.raises(ParameterTreeError, match="Duplicate"):
        build_parameter_tree([row(1, "a"), row(1, "b")])


def test_to_dict_uses_protocol_keys():
    node = build_parameter_tree([
        row(1, "page", "object", required=True, description="paging"),
        row(2, "size", "number", parent_id=1, sort_order=1),
    ])[0]

    data = node.to_dict()
    assert data["apiId"] == 1
    assert data["parentId"] is None
    assert data["paramType"] == "request"
    assert data["required"] is True
    assert data["description"] == "paging"
    assert data["children"][0]["parentId"] == 1
    assert data["children"][0]["order"] == 1


def test_from_row_accepts_nodes():
    node = ParameterNode(id=1, name="x", type="string", param_type="response")
    copy = ParameterNode.from_row(node)
    assert copy == node
    assert copy is not node
