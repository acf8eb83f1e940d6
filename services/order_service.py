import time
from db.db_operation import mongo_conn, utcnow
from core.exceptions import NotFound, UpstreamFailure
from models.order import OrderCreate
from services import factory_client
from services.franchise_service import get_store
from services.menu_service import get_menu_item
from services.metrics_service import metrics
from utils.log_shipper import log_shipper
from utils.logger import get_logger

logger = get_logger("Order_Service")

ORDERS_PAGE_SIZE = 10

def _serialize(order: dict) -> dict:
    return {
        "id": order["_id"],
        "franchiseId": order["franchise_id"],
        "storeId": order["store_id"],
        "date": order.get("date"),
        "items": order.get("items", [])
    }

async def get_diner_orders(diner_id: int, page: int = 1) -> dict:
    """One page of a diner's order history, newest first."""
    skip = (page - 1) * ORDERS_PAGE_SIZE
    cursor = mongo_conn.orders_collection.find({"diner_id": diner_id}, sort=[("_id", -1)], skip=skip, limit=ORDERS_PAGE_SIZE)
    orders = await cursor.to_list(length=ORDERS_PAGE_SIZE)
    logger.info(f"Fetched {len(orders)} orders for diner {diner_id}")
    return {"dinerId": diner_id, "orders": [_serialize(o) for o in orders], "page": page}

async def _validate_order(order_data: OrderCreate):
    if not await get_store(order_data.franchiseId, order_data.storeId):
        raise NotFound("unknown store")
    for item in order_data.items:
        if not await get_menu_item(item.menuId):
            raise NotFound(f"unknown menu item {item.menuId}")

async def place_order(diner: dict, order_data: OrderCreate) -> dict:
    """
    Send the order to the factory and persist it once accepted.
    Returns {order, followLinkToEndChaos, jwt}; raises UpstreamFailure when
    the factory refuses it.
    """
    await _validate_order(order_data)

    order_id = await mongo_conn.next_id("orders")
    items = []
    for item in order_data.items:
        items.append({"id": await mongo_conn.next_id("order_items"), **item.model_dump()})
    order_doc = {
        "_id": order_id,
        "diner_id": diner["id"],
        "franchise_id": order_data.franchiseId,
        "store_id": order_data.storeId,
        "date": utcnow(),
        "items": items
    }
    order = _serialize(order_doc)
    total_price = sum(i["price"] for i in items)

    started = time.perf_counter()
    try:
        result = await factory_client.submit_order(
            {"id": diner["id"], "name": diner.get("name"), "email": diner.get("email")},
            {**order, "date": order_doc["date"].isoformat()}
        )
    except UpstreamFailure:
        metrics.record_pizza_purchase(False, (time.perf_counter() - started) * 1000, total_price)
        raise
    metrics.record_pizza_purchase(True, (time.perf_counter() - started) * 1000, total_price)

    await mongo_conn.orders_collection.insert_one(order_doc)
    log_shipper.log_db("orders.insert_one", {"id": order_id, "diner_id": diner["id"]})
    logger.info(f"Order {order_id} placed by diner {diner['id']}")
    return {"order": order, "followLinkToEndChaos": result.report_url, "jwt": result.jwt}
