from pydantic import BaseModel, Field
from typing import Optional

class MenuItemCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = ""
    image: Optional[str] = ""
    price: float = Field(..., ge=0)

class MenuItemOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = ""
    image: Optional[str] = ""
    price: float
