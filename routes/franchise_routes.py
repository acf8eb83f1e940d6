# routes/franchise_routes.py
from fastapi import APIRouter, Depends, Query, Body
from typing import List
from core.authorization import can_create_franchise, can_manage_store, can_view_user_franchises, is_admin, require_role
from core.dependencies import get_current_user, get_optional_user, CurrentUser
from core.exceptions import Forbidden, NotFound
from models.franchise import FranchiseCreate, FranchiseOut, FranchiseListResponse, StoreCreate, StoreOut
from models.user import Role
from services.franchise_service import (
    create_franchise, create_store, delete_franchise, delete_store, get_franchise, get_user_franchises, list_franchises
)
from utils.logger import get_logger

logger = get_logger("Franchise_Route")
router = APIRouter(prefix="/api/franchise", tags=["Franchises"])

# Public: list franchises, admins see admin lists and store revenue
@router.get("", response_model=FranchiseListResponse, response_model_exclude_none=True)
async def api_list_franchises(
    page: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=200),
    name: str = Query("*"),
    current_user: CurrentUser | None = Depends(get_optional_user)
):
    detailed = current_user is not None and is_admin(current_user)
    franchises, more = await list_franchises(page=page, limit=limit, name=name.strip(), detailed=detailed)
    return {"franchises": franchises, "more": more}

# Self or admin: franchises the user administers; anyone else gets an empty list
@router.get("/{user_id}", response_model=List[FranchiseOut], response_model_exclude_none=True)
async def api_user_franchises(user_id: int, current_user: CurrentUser = Depends(get_current_user)):
    if not can_view_user_franchises(current_user, user_id):
        return []
    return await get_user_franchises(user_id)

# Admin: create franchise
@router.post("", response_model=FranchiseOut, response_model_exclude_none=True)
async def api_create_franchise(payload: FranchiseCreate = Body(...), current_user: CurrentUser = Depends(get_current_user)):
    if not can_create_franchise(current_user):
        logger.warning(f"Forbidden: {current_user.email} tried to create a franchise")
        raise Forbidden("unable to create a franchise")
    return await create_franchise(payload.name, [a.email for a in payload.admins])

# Admin: delete franchise
@router.delete("/{franchise_id}")
async def api_delete_franchise(
    franchise_id: int,
    current_user: CurrentUser = Depends(require_role(Role.ADMIN, message="unable to delete a franchise"))
):
    await delete_franchise(franchise_id)
    logger.info(f"Franchise {franchise_id} deleted by {current_user.email}")
    return {"message": "franchise deleted"}

async def _franchise_for_store_change(franchise_id: int, current_user: CurrentUser, action: str) -> dict:
    franchise = await get_franchise(franchise_id)
    if franchise is None:
        # unknown franchise looks the same as no permission to non-admins
        if is_admin(current_user):
            raise NotFound("unknown franchise")
        raise Forbidden(f"unable to {action} a store")
    if not can_manage_store(current_user, franchise):
        logger.warning(f"Forbidden: {current_user.email} tried to {action} a store in franchise {franchise_id}")
        raise Forbidden(f"unable to {action} a store")
    return franchise

# Admin or franchise admin: create store
@router.post("/{franchise_id}/store", response_model=StoreOut, response_model_exclude_none=True)
async def api_create_store(franchise_id: int, payload: StoreCreate = Body(...), current_user: CurrentUser = Depends(get_current_user)):
    await _franchise_for_store_change(franchise_id, current_user, "create")
    return await create_store(franchise_id, payload.name)

# Admin or franchise admin: delete store
@router.delete("/{franchise_id}/store/{store_id}")
async def api_delete_store(franchise_id: int, store_id: int, current_user: CurrentUser = Depends(get_current_user)):
    await _franchise_for_store_change(franchise_id, current_user, "delete")
    await delete_store(franchise_id, store_id)
    return {"message": "store deleted"}
