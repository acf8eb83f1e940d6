from fastapi import APIRouter, Depends, Query, Response, status
from typing import Optional
from core.authorization import can_delete_user, can_list_users, can_update_user
from core.dependencies import get_current_user, CurrentUser
from core.exceptions import Forbidden, NotFound
from models.user import UserOut, UserUpdate, AuthResponse
from services.auth_service import issue_token
from services.user_service import list_users, delete_user, update_user, to_user_out
from utils.logger import get_logger

logger = get_logger("User_Route")

router = APIRouter(prefix="/api/user", tags=["Users"])

@router.get("/me", response_model=UserOut, response_model_exclude_none=True)
async def read_me(current_user: CurrentUser = Depends(get_current_user)):
    return current_user.public()

@router.get("")
async def api_list_users(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=200),
    name: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    List users (admin only). Without query parameters the full list is
    returned as an array; with page/limit/name the response is {users, more}.
    """
    if not can_list_users(current_user):
        raise Forbidden("forbidden")
    if page is None and limit is None and name is None:
        users, _ = await list_users(limit=None)
        return users
    users, more = await list_users(page=page or 1, limit=limit or 10, name=(name or "*").strip())
    return {"users": users, "more": more}

@router.put("/{user_id}", response_model=AuthResponse, response_model_exclude_none=True)
async def api_update_user(user_id: int, payload: UserUpdate, current_user: CurrentUser = Depends(get_current_user)):
    if not can_update_user(current_user, user_id):
        logger.warning(f"Forbidden: {current_user.email} tried to update user {user_id}")
        raise Forbidden("unauthorized")
    updated = await update_user(user_id, payload.name, payload.email, payload.password)
    token = await issue_token(updated)
    return {"user": to_user_out(updated), "token": token}

@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def api_delete_user(user_id: int, current_user: CurrentUser = Depends(get_current_user)):
    if not can_delete_user(current_user):
        raise Forbidden("forbidden")
    if not await delete_user(user_id):
        raise NotFound("not found")
    logger.info(f"User {user_id} deleted by {current_user.email}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
