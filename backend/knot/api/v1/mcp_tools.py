import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from knot.core.errors import CatalogError
from knot.database import get_db
from knot.schemas.mcp import ToolCall
from knot.services.mcp_tools import call_tool

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("")
def run_tool(payload: ToolCall, db: Session = Depends(get_db)):
    """Dispatch one query tool; failures come back as ``{"error": ...}`` with the matching status."""
    try:
        data = call_tool(db, payload.tool, payload.args)
    except CatalogError as e:
        if e.status_code >= 500:
            logger.error("Tool %s failed: %s", payload.tool, e.message)
        return JSONResponse(status_code=e.status_code, content={"error": e.message})
    return {"data": data}
