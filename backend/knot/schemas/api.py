from datetime import datetime

from pydantic import BaseModel, Field

from knot.models.api import ApiType, HttpMethod
from knot.schemas.parameter import ParameterOut


class ApiCreate(BaseModel):
    group_id: int
    name: str = Field(min_length=1, max_length=200)
    endpoint: str = Field(min_length=1)
    method: HttpMethod | None = None
    type: ApiType
    note: str | None = None


class ApiUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    endpoint: str | None = Field(default=None, min_length=1)
    method: HttpMethod | None = None
    type: ApiType | None = None
    note: str | None = None


class ApiNoteUpdate(BaseModel):
    note: str | None = None


class ApiOut(BaseModel):
    id: int
    group_id: int
    name: str
    endpoint: str
    method: HttpMethod | None
    type: ApiType
    sort_order: int
    note: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ApiGroupRef(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class ApiDetailOut(ApiOut):
    group: ApiGroupRef | None = None
    request_parameters: list[ParameterOut] = []
    response_parameters: list[ParameterOut] = []
