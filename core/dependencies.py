from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import List, Optional
from pydantic import BaseModel, Field
from core.exceptions import Unauthorized
from models.user import UserRole
from services.auth_service import session_active
from services.user_service import get_user_by_id
from utils.jwt_handler import decode_access_token
from utils.logger import get_logger

logger = get_logger("Dependencies")

# missing header is answered by us with 401, not by FastAPI
bearer_scheme = HTTPBearer(auto_error=False)

class CurrentUser(BaseModel):
    id: int
    name: Optional[str] = None
    email: str
    roles: List[UserRole] = Field(default_factory=list)
    token_version: int = 0
    jti: Optional[str] = None

    def is_role(self, role: str) -> bool:
        return any(r.role == role for r in self.roles)

    def public(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "roles": [r.model_dump(exclude_none=True) for r in self.roles]
        }

async def resolve_token(token: str) -> CurrentUser:
    """
    Decode token, check it is still an active session, and ensure the user
    exists with a matching token_version.
    """
    try:
        payload = decode_access_token(token)
    except ValueError:
        logger.warning("Rejected token: invalid or expired")
        raise Unauthorized()

    user_id = payload.get("id")
    if user_id is None:
        logger.warning("Rejected token: no user id")
        raise Unauthorized()
    if not await session_active(payload.get("jti")):
        logger.warning(f"Rejected token for user {user_id}: session logged out or replaced")
        raise Unauthorized()

    user = await get_user_by_id(user_id)
    if user is None:
        logger.warning(f"Rejected token: user {user_id} no longer exists")
        raise Unauthorized()
    if int(user.get("token_version", 0)) != payload.get("token_version"):
        logger.warning(f"Token version mismatch for user: {user_id}")
        raise Unauthorized()

    return CurrentUser(
        id=user_id,
        name=payload.get("name"),
        email=payload.get("email"),
        roles=payload.get("roles") or [],
        token_version=payload.get("token_version"),
        jti=payload.get("jti")
    )

async def get_current_user(credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme)) -> CurrentUser:
    if credentials is None or not credentials.credentials:
        raise Unauthorized()
    return await resolve_token(credentials.credentials)

async def get_optional_user(credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme)) -> CurrentUser | None:
    """Like get_current_user, but anonymous or invalid callers resolve to None."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return await resolve_token(credentials.credentials)
    except Unauthorized:
        return None
