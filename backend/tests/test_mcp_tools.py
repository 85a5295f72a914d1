from datetime import datetime

import pytest

from knot.models import ApiType
from knot.services.parameter_import import import_parameters_from_json, import_structured_parameters


def call(client, tool, args=None):
    return client.post("/api/mcp-tools", json={"tool": tool, "args": args or {}})


@pytest.fixture
def catalog_data(db, make_group, make_api):
    users = make_group("USER-SERVICE", created_at=datetime(2024, 1, 1))
    make_group("payments", created_at=datetime(2024, 3, 1))
    get_user = make_api(users, "Get user", "/users/{id}", note="Cached for 60s")
    make_api(users, "UserService.Find", "user.find", type=ApiType.RPC)

    import_structured_parameters(db, get_user.id, "request", [
        {"name": "id", "type": "number", "required": True, "description": "User id"},
    ])
    import_parameters_from_json(db, get_user.id, "response", {
        "user": {"id": 1, "name": "k", "roles": ["admin"]},
    })
    return {"group_id": users.id, "api_id": get_user.id}


def test_list_groups_newest_first(client, catalog_data):
    resp = call(client, "list_groups")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [g["name"] for g in data] == ["payments", "USER-SERVICE"]
    assert data[1]["createdAt"] == "2024-01-01T00:00:00Z"


def test_get_group_fuzzy(client, catalog_data):
    data = call(client, "get_group", {"groupName": "user"}).json()["data"]
    assert data["id"] == catalog_data["group_id"]
    assert data["apiCount"] == 2


def test_get_group_not_found(client, catalog_data):
    resp = call(client, "get_group", {"groupName": "nope"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "No group found matching: nope"}


def test_group_name_required(client):
    resp = call(client, "list_apis_by_group")
    assert resp.status_code == 400
    assert resp.json() == {"error": "groupName is required"}


def test_list_apis_by_group(client, catalog_data):
    data = call(client, "list_apis_by_group", {"groupName": "USER"}).json()["data"]
    assert data["group"]["name"] == "USER-SERVICE"
    assert [(a["name"], a["method"], a["type"]) for a in data["apis"]] == [
        ("Get user", "GET", "HTTP"),
        ("UserService.Find", None, "RPC"),
    ]


def test_get_api(client, catalog_data):
    data = call(client, "get_api", {"apiId": catalog_data["api_id"]}).json()["data"]

    assert data["note"] == "Cached for 60s"
    assert data["group"]["name"] == "USER-SERVICE"
    assert data["requestParameters"][0]["required"] is True
    (user,) = data["responseParameters"]
    assert [c["name"] for c in user["children"]] == ["id", "name", "roles"]
    assert user["children"][0]["parentId"] == user["id"]


@pytest.mark.parametrize("api_id", [None, "1", True, 1.5])
def test_get_api_rejects_bad_id(client, api_id):
    resp = call(client, "get_api", {"apiId": api_id})
    assert resp.status_code == 400


def test_get_api_accepts_integral_float(client, catalog_data):
    resp = call(client, "get_api", {"apiId": float(catalog_data["api_id"])})
    assert resp.status_code == 200


def test_get_api_not_found(client):
    resp = call(client, "get_api", {"apiId": 4040})
    assert resp.status_code == 404
    assert resp.json() == {"error": "API not found"}


def test_search_apis(client, catalog_data):
    data = call(client, "search_apis", {"query": "USER"}).json()["data"]
    assert data["count"] == 2
    assert all(api["group"]["name"] == "USER-SERVICE" for api in data["apis"])


def test_search_requires_query(client):
    resp = call(client, "search_apis", {"query": ""})
    assert resp.status_code == 400


def test_json_example(client, catalog_data):
    data = call(client, "get_api_json_example", {"apiId": catalog_data["api_id"]}).json()["data"]

    assert data["apiName"] == "Get user"
    assert data["method"] == "GET"
    assert data["requestExample"] == {"id": 0}
    assert data["responseExample"] == {"user": {"id": 0, "name": "string", "roles": ["string"]}}


def test_json_example_null_for_empty_forest(client, make_group, make_api):
    api = make_api(make_group("misc"), "Ping", "/ping")
    data = call(client, "get_api_json_example", {"apiId": api.id}).json()["data"]
    assert data["requestExample"] is None
    assert data["responseExample"] is None


def test_unknown_tool(client):
    resp = call(client, "drop_tables")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Unknown tool: drop_tables"}


def test_missing_tool_name(client):
    resp = client.post("/api/mcp-tools", json={"args": {}})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Tool name is required"}
