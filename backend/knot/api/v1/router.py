from fastapi import APIRouter

from knot.api.v1 import apis, export, groups, mcp_tools

api_router = APIRouter(prefix="/api")

api_router.include_router(groups.router, prefix="/groups", tags=["Groups"])
api_router.include_router(apis.router, prefix="/apis", tags=["APIs"])
api_router.include_router(export.router, prefix="/export", tags=["Export"])
api_router.include_router(mcp_tools.router, prefix="/mcp-tools", tags=["MCP Tools"])
