from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from knot.database import get_db
from knot.schemas.common import OrderUpdate
from knot.schemas.group import GroupCreate, GroupOut, GroupUpdate, GroupWithApisOut
from knot.services import catalog, management

router = APIRouter()


@router.get("", response_model=list[GroupOut])
def list_groups(db: Session = Depends(get_db)):
    return catalog.list_groups(db)


@router.get("/with-apis", response_model=list[GroupWithApisOut])
def list_groups_with_apis(db: Session = Depends(get_db)):
    return catalog.list_groups_with_apis(db)


@router.post("", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(payload: GroupCreate, db: Session = Depends(get_db)):
    return management.create_group(db, payload.name.strip())


@router.post("/orders", status_code=status.HTTP_204_NO_CONTENT)
def update_group_orders(payload: OrderUpdate, db: Session = Depends(get_db)):
    management.reorder_groups(db, [(item.id, item.sort_order) for item in payload.orders])


@router.patch("/{group_id}", response_model=GroupOut)
def update_group(group_id: int, payload: GroupUpdate, db: Session = Depends(get_db)):
    return management.rename_group(db, group_id, payload.name.strip())


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(group_id: int, db: Session = Depends(get_db)):
    management.delete_group(db, group_id)
