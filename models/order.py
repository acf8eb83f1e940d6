from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

class OrderItem(BaseModel):
    menuId: int
    description: str
    price: float = Field(..., ge=0)

class OrderItemOut(OrderItem):
    id: int

class OrderCreate(BaseModel):
    franchiseId: int
    storeId: int
    items: List[OrderItem] = Field(..., min_length=1)

class OrderOut(BaseModel):
    id: int
    franchiseId: int
    storeId: int
    date: Optional[datetime] = None
    items: List[OrderItemOut]

class OrderHistory(BaseModel):
    dinerId: int
    orders: List[OrderOut]
    page: int

class OrderPlaced(BaseModel):
    order: OrderOut
    followLinkToEndChaos: Optional[str] = None
    jwt: Optional[str] = None
