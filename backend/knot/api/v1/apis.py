from dataclasses import asdict

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from knot.database import get_db
from knot.schemas.api import ApiCreate, ApiDetailOut, ApiNoteUpdate, ApiOut, ApiUpdate
from knot.schemas.common import OrderUpdate
from knot.schemas.parameter import (
    ParametersFromJson, ParametersImported, ParametersUpdate, ParametersUpdated,
)
from knot.services import catalog, management
from knot.services.parameter_import import import_parameters_from_json, import_structured_parameters

router = APIRouter()


@router.get("/group/{group_id}", response_model=list[ApiOut])
def list_apis_by_group(group_id: int, db: Session = Depends(get_db)):
    return catalog.list_apis_by_group(db, group_id)


@router.get("/{api_id}", response_model=ApiDetailOut)
def get_api(api_id: int, db: Session = Depends(get_db)):
    detail = catalog.get_api_detail(db, api_id)
    payload = ApiOut.model_validate(detail.api).model_dump()
    payload["group"] = {"id": detail.group.id, "name": detail.group.name} if detail.group else None
    payload["request_parameters"] = [asdict(node) for node in detail.request_parameters]
    payload["response_parameters"] = [asdict(node) for node in detail.response_parameters]
    return payload


@router.post("", response_model=ApiOut, status_code=status.HTTP_201_CREATED)
def create_api(payload: ApiCreate, db: Session = Depends(get_db)):
    return management.create_api(
        db,
        group_id=payload.group_id,
        name=payload.name,
        endpoint=payload.endpoint,
        type=payload.type,
        method=payload.method,
        note=payload.note,
    )


@router.post("/orders", status_code=status.HTTP_204_NO_CONTENT)
def update_api_orders(payload: OrderUpdate, db: Session = Depends(get_db)):
    management.reorder_apis(db, [(item.id, item.sort_order) for item in payload.orders])


@router.patch("/{api_id}", response_model=ApiOut)
def update_api(api_id: int, payload: ApiUpdate, db: Session = Depends(get_db)):
    return management.update_api(db, api_id, payload.model_dump(exclude_unset=True))


@router.patch("/{api_id}/note", response_model=ApiOut)
def update_api_note(api_id: int, payload: ApiNoteUpdate, db: Session = Depends(get_db)):
    return management.update_api_note(db, api_id, payload.note)


@router.delete("/{api_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_api(api_id: int, db: Session = Depends(get_db)):
    management.delete_api(db, api_id)


@router.put("/{api_id}/parameters", response_model=ParametersUpdated)
def update_parameters(api_id: int, payload: ParametersUpdate, db: Session = Depends(get_db)):
    count = import_structured_parameters(db, api_id, payload.param_type, payload.parameters)
    return {"count": count}


@router.post("/{api_id}/parameters/from-json", response_model=ParametersImported)
def update_parameters_from_json(api_id: int, payload: ParametersFromJson, db: Session = Depends(get_db)):
    result = import_parameters_from_json(db, api_id, payload.param_type, payload.json_data)
    return {"count": result.count, "parameter_count": result.parameter_count}
