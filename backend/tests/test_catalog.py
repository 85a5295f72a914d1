import pytest

from knot.core.errors import NotFoundError, ValidationError
from knot.services import catalog
from knot.services.parameter_import import import_parameters_from_json, import_structured_parameters


def test_list_groups_by_sort_order(db, make_group):
    make_group("b", sort_order=2)
    make_group("a", sort_order=3)
    make_group("c", sort_order=1)

    assert [g.name for g in catalog.list_groups(db)] == ["c", "b", "a"]


def test_list_groups_empty(db):
    assert catalog.list_groups(db) == []
    assert catalog.list_groups_with_apis(db) == []


def test_groups_with_apis_are_ordered(db, make_group, make_api):
    group = make_group("orders")
    make_api(group, "second", sort_order=2)
    make_api(group, "first", sort_order=1)
    make_group("empty")

    groups = catalog.list_groups_with_apis(db)
    assert [api.name for api in groups[0].apis] == ["first", "second"]
    assert groups[1].apis == []


def test_find_group_is_case_insensitive_substring(db, make_group):
    make_group("USER-SERVICE")
    assert catalog.find_group(db, "user").name == "USER-SERVICE"
    assert catalog.find_group(db, "nothing") is None


def test_find_group_returns_first_in_display_order(db, make_group):
    make_group("auth-legacy", sort_order=5)
    make_group("auth", sort_order=1)

    assert catalog.find_group(db, "auth").name == "auth"


def test_find_group_requires_a_name(db):
    with pytest.raises(ValidationError):
        catalog.find_group(db, "")


def test_search_matches_name_and_endpoint(db, make_group, make_api):
    group = make_group("auth")
    make_api(group, "User Login", "/v1/session")
    make_api(group, "Refresh", "/auth/LOGIN/refresh")
    make_api(group, "Logout", "/auth/logout")

    results = catalog.search_apis(db, "login")
    assert sorted(api.name for api in results) == ["Refresh", "User Login"]
    assert all(api.group.name == "auth" for api in results)


def test_search_is_capped(db, make_group, make_api):
    group = make_group("bulk")
    for i in range(60):
        make_api(group, f"login-{i}", f"/login/{i}")

    assert len(catalog.search_apis(db, "login")) == 50
    assert len(catalog.search_apis(db, "login", limit=5)) == 5


def test_search_treats_wildcards_literally(db, make_group, make_api):
    group = make_group("stats")
    make_api(group, "Growth 100%", "/growth")
    make_api(group, "Plain", "/plain")

    assert [api.name for api in catalog.search_apis(db, "%")] == ["Growth 100%"]


def test_search_requires_query(db):
    with pytest.raises(ValidationError):
        catalog.search_apis(db, "")


def test_api_detail_splits_directions(db, make_group, make_api):
    api = make_api(make_group("user"), "Get user", "/users/{id}")
    import_structured_parameters(db, api.id, "request", [{"name": "id", "type": "number", "required": True}])
    import_parameters_from_json(db, api.id, "response", {"user": {"id": 1, "name": "k"}})

    detail = catalog.get_api_detail(db, api.id)

    assert detail.group.name == "user"
    assert [n.name for n in detail.request_parameters] == ["id"]
    (user,) = detail.response_parameters
    assert [child.name for child in user.children] == ["id", "name"]


def test_api_detail_missing(db):
    with pytest.raises(NotFoundError, match="API not found"):
        catalog.get_api_detail(db, 999)


def test_build_examples(db, make_group, make_api):
    api = make_api(make_group("user"), "Ping", "/ping")
    import_parameters_from_json(db, api.id, "response", {"ok": True})

    request_example, response_example = catalog.build_examples(catalog.get_api_detail(db, api.id))
    assert request_example is None
    assert response_example == {"ok": False}
