import json

import httpx
import pytest
from fastmcp.exceptions import ToolError

from knot.mcp_server import KnotAPIError, KnotClient, run_tool


def make_client(handler) -> KnotClient:
    return KnotClient(base_url="http://knot.test/", transport=httpx.MockTransport(handler))


def test_call_posts_tool_envelope():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": {"id": 3}})

    client = make_client(handler)
    assert client.call("get_api", {"apiId": 3}) == {"id": 3}
    assert seen == {"url": "http://knot.test/api/mcp-tools", "body": {"tool": "get_api", "args": {"apiId": 3}}}


def test_call_sends_empty_args_object():
    def handler(request):
        assert json.loads(request.content)["args"] == {}
        return httpx.Response(200, json={"data": []})

    assert make_client(handler).call("list_groups") == []


def test_error_body_is_surfaced():
    client = make_client(lambda request: httpx.Response(404, json={"error": "No group found matching: x"}))
    with pytest.raises(KnotAPIError, match="No group found matching: x"):
        client.call("get_group", {"groupName": "x"})


def test_error_without_body():
    client = make_client(lambda request: httpx.Response(502, text="bad gateway"))
    with pytest.raises(KnotAPIError, match="API call failed: 502 Bad Gateway"):
        client.call("list_groups")


def test_connection_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(KnotAPIError, match="API call failed"):
        make_client(handler).call("list_groups")


def test_run_tool_pretty_prints():
    client = make_client(lambda request: httpx.Response(200, json={"data": [{"id": 1, "name": "用户"}]}))
    text = run_tool("list_groups", client=client)

    assert text == json.dumps([{"id": 1, "name": "用户"}], indent=2, ensure_ascii=False)
    assert "用户" in text


def test_run_tool_raises_tool_error():
    client = make_client(lambda request: httpx.Response(400, json={"error": "query is required"}))
    with pytest.raises(ToolError, match="query is required"):
        run_tool("search_apis", {"query": ""}, client=client)


def test_against_backend(client, make_group, make_api):
    make_api(make_group("auth"), "Login", "/login")

    def forward(request: httpx.Request) -> httpx.Response:
        resp = client.post(request.url.path, json=json.loads(request.content))
        return httpx.Response(resp.status_code, content=resp.content, headers={"content-type": "application/json"})

    knot = make_client(forward)
    data = json.loads(run_tool("search_apis", {"query": "log"}, client=knot))
    assert data["count"] == 1
    assert data["apis"][0]["group"]["name"] == "auth"

    with pytest.raises(ToolError, match="Unknown tool"):
        run_tool("nope", client=knot)
