# core/authorization.py
from fastapi import Depends
from core.dependencies import get_current_user, CurrentUser
from core.exceptions import Forbidden
from models.user import Role
from utils.logger import get_logger

logger = get_logger("Authorization")

def is_admin(actor: CurrentUser) -> bool:
    return actor.is_role(Role.ADMIN)

def is_franchise_admin(actor: CurrentUser, franchise: dict) -> bool:
    """True when actor is listed among the franchise's current admins."""
    return any(a["id"] == actor.id for a in franchise.get("admins") or [])

def can_list_users(actor: CurrentUser) -> bool:
    return is_admin(actor)

def can_delete_user(actor: CurrentUser) -> bool:
    return is_admin(actor)

def can_update_user(actor: CurrentUser, user_id: int) -> bool:
    return actor.id == user_id or is_admin(actor)

def can_view_user_franchises(actor: CurrentUser, user_id: int) -> bool:
    return actor.id == user_id or is_admin(actor)

def can_create_franchise(actor: CurrentUser) -> bool:
    return is_admin(actor)

def can_manage_store(actor: CurrentUser, franchise: dict) -> bool:
    return is_admin(actor) or is_franchise_admin(actor, franchise)

def can_add_menu_item(actor: CurrentUser) -> bool:
    return is_admin(actor)

def can_place_order(actor: CurrentUser) -> bool:
    return actor is not None

def require_role(*allowed_roles, message: str = "forbidden"):
    async def _dependency(current_user: CurrentUser = Depends(get_current_user)):
        if not any(current_user.is_role(role) for role in allowed_roles):
            logger.warning(f"Forbidden: {current_user.email} lacks one of {allowed_roles}")
            raise Forbidden(message)
        return current_user
    return _dependency
