from db.db_operation import mongo_conn, utcnow
from models.menu import MenuItemCreate
from utils.log_shipper import log_shipper
from utils.logger import get_logger

logger = get_logger("Menu_Service")

def _serialize(item: dict) -> dict:
    return {
        "id": item["_id"],
        "title": item["title"],
        "description": item.get("description") or "",
        "image": item.get("image") or "",
        "price": item["price"]
    }

async def list_menu_items() -> list[dict]:
    cursor = mongo_conn.menu_collection.find({}, sort=[("_id", 1)])
    items = await cursor.to_list(length=None)
    return [_serialize(i) for i in items]

async def get_menu_item(item_id: int) -> dict | None:
    item = await mongo_conn.menu_collection.find_one({"_id": item_id})
    return _serialize(item) if item else None

async def add_menu_item(payload: MenuItemCreate, actor_email: str) -> dict:
    item_id = await mongo_conn.next_id("menu")
    doc = payload.model_dump()
    doc.update({"_id": item_id, "created_at": utcnow()})
    await mongo_conn.menu_collection.insert_one(doc)
    log_shipper.log_db("menu.insert_one", {"id": item_id, "title": payload.title})
    logger.info(f"{actor_email} added menu item {item_id}: {payload.title}")
    return _serialize(doc)
