from pydantic import BaseModel


class OrderItem(BaseModel):
    id: int
    sort_order: int


class OrderUpdate(BaseModel):
    orders: list[OrderItem]
