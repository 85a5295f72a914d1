from typing import Any

from pydantic import BaseModel, Field


class ParameterIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    # Checked against ParameterType by the importer so a bad value is a 400
    type: str
    required: bool = False
    description: str | None = None
    children: list["ParameterIn"] = []


class ParametersUpdate(BaseModel):
    param_type: str = Field(alias="paramType")
    parameters: list[ParameterIn] = []

    model_config = {"populate_by_name": True}


class ParametersFromJson(BaseModel):
    param_type: str = Field(alias="paramType")
    json_data: Any = Field(alias="json")

    model_config = {"populate_by_name": True}


class ParameterOut(BaseModel):
    id: int
    api_id: int | None = None
    parent_id: int | None = None
    name: str
    type: str
    description: str | None = None
    required: bool = False
    param_type: str
    sort_order: int
    children: list["ParameterOut"] = []

    model_config = {"from_attributes": True}


class ParametersUpdated(BaseModel):
    count: int


class ParametersImported(BaseModel):
    count: int
    parameter_count: int
