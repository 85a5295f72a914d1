from pydantic import BaseModel


class ExportRequest(BaseModel):
    api_ids: list[int]
