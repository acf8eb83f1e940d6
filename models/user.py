from pydantic import BaseModel, Field, field_validator
from typing import Any, List, Optional

class Role:
    DINER = "diner"
    FRANCHISEE = "franchisee"
    ADMIN = "admin"

class UserRole(BaseModel):
    role: str
    objectId: Optional[int] = None

# fields are optional so the route can answer with its own 400 message
class UserCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator('name', 'email', 'password', mode='before')
    @classmethod
    def non_string_as_missing(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None

class UserLogin(BaseModel):
    email: str
    password: str

class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

class UserOut(BaseModel):
    id: int
    name: Optional[str] = None
    email: str
    roles: List[UserRole] = Field(default_factory=list)

class AuthResponse(BaseModel):
    user: UserOut
    token: str
