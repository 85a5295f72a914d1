from typing import Any

from pydantic import BaseModel


class ToolCall(BaseModel):
    tool: str = ""
    args: dict[str, Any] | None = None
