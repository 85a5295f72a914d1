from datetime import datetime

from pydantic import BaseModel, Field

from knot.schemas.api import ApiOut


class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)


class GroupUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=200)


class GroupOut(BaseModel):
    id: int
    name: str
    sort_order: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class GroupWithApisOut(GroupOut):
    apis: list[ApiOut] = []
