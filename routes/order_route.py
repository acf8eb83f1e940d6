from fastapi import APIRouter, Depends, Query, Body
from typing import List
from core.authorization import can_add_menu_item, can_place_order
from core.dependencies import get_current_user, CurrentUser
from core.exceptions import Forbidden, Unauthorized
from models.menu import MenuItemCreate, MenuItemOut
from models.order import OrderCreate, OrderHistory, OrderPlaced
from services.menu_service import list_menu_items, add_menu_item
from services.order_service import get_diner_orders, place_order
from utils.logger import get_logger

logger = get_logger("Order_Route")

router = APIRouter(prefix="/api/order", tags=["Orders"])

# Public: the pizza menu
@router.get("/menu", response_model=List[MenuItemOut])
async def api_get_menu():
    return await list_menu_items()

@router.put("/menu", response_model=List[MenuItemOut])
async def api_add_menu_item(payload: MenuItemCreate = Body(...), current_user: CurrentUser = Depends(get_current_user)):
    """Add a menu item (admin only) and return the whole menu."""
    if not can_add_menu_item(current_user):
        logger.warning(f"Forbidden: {current_user.email} tried to add a menu item")
        raise Forbidden("unable to add menu item")
    await add_menu_item(payload, actor_email=current_user.email)
    return await list_menu_items()

@router.get("", response_model=OrderHistory)
async def api_get_orders(page: int = Query(1, ge=1), current_user: CurrentUser = Depends(get_current_user)):
    """Fetch the current diner's orders"""
    return await get_diner_orders(current_user.id, page)

@router.post("", response_model=OrderPlaced)
async def api_place_order(order: OrderCreate, current_user: CurrentUser = Depends(get_current_user)):
    if not can_place_order(current_user):
        raise Unauthorized()
    logger.info(f"Received order from diner {current_user.id} for store {order.storeId}")
    return await place_order(current_user.public(), order)
