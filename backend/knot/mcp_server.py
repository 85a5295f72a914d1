"""
Knot MCP server.

Read-only query tools over the API catalog, served on stdio. Every tool is a
thin forwarder to ``POST {KNOT_BASE_URL}/api/mcp-tools``; the Knot backend
must be running.
"""
import json
import logging
import os
from typing import Any

import httpx
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger("knot.mcp")

KNOT_BASE_URL = os.getenv("KNOT_BASE_URL", "http://localhost:3000")
KNOT_MCP_TIMEOUT = float(os.getenv("KNOT_MCP_TIMEOUT", "30"))


class KnotAPIError(Exception):
    pass


class KnotClient:
    """Calls the backend query-tool endpoint and unwraps its ``{"data"}``/``{"error"}`` envelope."""

    def __init__(
        self,
        base_url: str = KNOT_BASE_URL,
        timeout: float = KNOT_MCP_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def call(self, tool: str, args: dict[str, Any] | None = None) -> Any:
        try:
            resp = self._client.post("/api/mcp-tools", json={"tool": tool, "args": args or {}})
        except httpx.HTTPError as e:
            raise KnotAPIError(f"API call failed: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = None

        if resp.status_code != 200:
            if isinstance(body, dict) and body.get("error"):
                raise KnotAPIError(body["error"])
            raise KnotAPIError(f"API call failed: {resp.status_code} {resp.reason_phrase}")

        if not isinstance(body, dict):
            raise KnotAPIError("Failed to parse response")
        if body.get("error"):
            raise KnotAPIError(body["error"])
        return body.get("data")


_client: KnotClient | None = None


def get_client() -> KnotClient:
    global _client
    if _client is None:
        _client = KnotClient()
    return _client


def run_tool(tool: str, args: dict[str, Any] | None = None, client: KnotClient | None = None) -> str:
    """Forward one tool call and return its data as indented JSON text."""
    try:
        data = (client or get_client()).call(tool, args)
    except KnotAPIError as e:
        logger.warning("Tool %s failed: %s", tool, e)
        raise ToolError(str(e)) from e
    return json.dumps(data, indent=2, ensure_ascii=False)


# ==================== MCP Server ====================

mcp = FastMCP("knot-mcp")


@mcp.tool()
def list_groups() -> str:
    """
    List all API groups in the Knot database.

    Returns an array of all available API groups with their IDs and names.
    Use this as the starting point to explore the API catalog.
    """
    return run_tool("list_groups")


@mcp.tool()
def get_group(groupName: str) -> str:
    """
    Get detailed information about a specific API group.

    Supports fuzzy matching: a partial group name (e.g. 'user') matches
    'USER-SERVICE'. Returns group details including the total count of APIs
    in that group. Use this to verify the exact group name before listing
    its APIs.

    Args:
        groupName: Full or partial name of the API group, matched case-insensitively
    """
    return run_tool("get_group", {"groupName": groupName})


@mcp.tool()
def list_apis_by_group(groupName: str) -> str:
    """
    List all APIs within a specific group.

    Supports fuzzy matching on the group name. Returns the group and every API
    in it with ID, name, endpoint, method (GET/POST/etc) and type (HTTP/RPC).

    Args:
        groupName: Full or partial name of the API group, e.g. 'auth' or 'payment-gateway'
    """
    return run_tool("list_apis_by_group", {"groupName": groupName})


@mcp.tool()
def get_api(apiId: int) -> str:
    """
    Get comprehensive details about a specific API.

    Returns endpoint, HTTP method, type (HTTP/RPC), group, and the hierarchical
    request/response parameters with types, descriptions and required flags.
    Use this after finding the API ID with list_apis_by_group or search_apis.

    Args:
        apiId: The unique ID of the API
    """
    return run_tool("get_api", {"apiId": apiId})


@mcp.tool()
def search_apis(query: str) -> str:
    """
    Search for APIs across all groups by name or endpoint path.

    Matches case-insensitively on both API name and endpoint URL and returns
    up to 50 APIs with their group names. Use this when you know part of an
    API name or endpoint but not its group.

    Args:
        query: Search term, e.g. 'login' or '/users'
    """
    return run_tool("search_apis", {"query": query})


@mcp.tool()
def get_api_json_example(apiId: int) -> str:
    """
    Generate example JSON for a specific API's request and response payloads.

    Returns the API name, endpoint, HTTP method and example JSON built from
    the parameter definitions. Use this to see the expected data format.

    Args:
        apiId: The unique ID of the API
    """
    return run_tool("get_api_json_example", {"apiId": apiId})


@mcp.resource(
    "knot://groups",
    name="All API Groups",
    description="List of all available API groups in the Knot database",
    mime_type="application/json",
)
def groups_resource() -> str:
    return run_tool("list_groups")


@mcp.prompt(name="explore-api-group", description="Explore APIs in a specific group")
def explore_api_group(groupName: str) -> str:
    return f'Please show me all APIs in the "{groupName}" group. Include their names, endpoints, and methods.'


@mcp.prompt(name="find-api", description="Find an API by name or endpoint")
def find_api(query: str) -> str:
    return f'Search for APIs matching "{query}" and show me the results with their details.'


def main() -> None:
    logger.info("Knot MCP Server running on stdio")
    logger.info("Connecting to: %s", KNOT_BASE_URL)
    mcp.run()


if __name__ == "__main__":
    main()
