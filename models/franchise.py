# models/franchise.py
from pydantic import BaseModel, Field
from typing import List, Optional

class FranchiseAdminRef(BaseModel):
    email: str

class FranchiseCreate(BaseModel):
    name: str = Field(min_length=1)
    admins: List[FranchiseAdminRef] = Field(default_factory=list)

class StoreCreate(BaseModel):
    name: str = Field(min_length=1)

class FranchiseAdmin(BaseModel):
    id: int
    name: Optional[str] = None
    email: str

class StoreOut(BaseModel):
    id: int
    franchiseId: Optional[int] = None
    name: str
    totalRevenue: Optional[float] = None

class FranchiseOut(BaseModel):
    id: int
    name: str
    admins: Optional[List[FranchiseAdmin]] = None
    stores: List[StoreOut] = Field(default_factory=list)

class FranchiseListResponse(BaseModel):
    franchises: List[FranchiseOut]
    more: bool
