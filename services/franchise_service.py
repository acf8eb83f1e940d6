# services/franchise_service.py
from pymongo.errors import DuplicateKeyError
from db.db_operation import mongo_conn, utcnow
from core.exceptions import Conflict, NotFound
from models.user import Role
from services.user_service import wildcard_regex
from utils.log_shipper import log_shipper
from utils.logger import get_logger

logger = get_logger("Franchise_Service")

async def _franchise_admins(franchise_id: int) -> list[dict]:
    cursor = mongo_conn.users_collection.find(
        {"roles": {"$elemMatch": {"role": Role.FRANCHISEE, "objectId": franchise_id}}},
        {"password": 0},
        sort=[("_id", 1)]
    )
    users = await cursor.to_list(length=None)
    return [{"id": u["_id"], "name": u.get("name"), "email": u["email"]} for u in users]

async def _store_revenue(store_id: int) -> float:
    cursor = mongo_conn.orders_collection.find({"store_id": store_id}, {"items.price": 1})
    orders = await cursor.to_list(length=None)
    return round(sum(item.get("price", 0) for o in orders for item in o.get("items", [])), 4)

async def _franchise_stores(franchise_id: int, with_revenue: bool) -> list[dict]:
    cursor = mongo_conn.stores_collection.find({"franchise_id": franchise_id}, sort=[("_id", 1)])
    stores = await cursor.to_list(length=None)
    result = []
    for s in stores:
        store = {"id": s["_id"], "name": s["name"]}
        if with_revenue:
            store["totalRevenue"] = await _store_revenue(s["_id"])
        result.append(store)
    return result

async def _expand(franchise: dict, detailed: bool) -> dict:
    out = {
        "id": franchise["_id"],
        "name": franchise["name"],
        "stores": await _franchise_stores(franchise["_id"], with_revenue=detailed)
    }
    if detailed:
        out["admins"] = await _franchise_admins(franchise["_id"])
    return out

async def get_franchise(franchise_id: int) -> dict | None:
    """Franchise with admins and stores, or None."""
    franchise = await mongo_conn.franchises_collection.find_one({"_id": franchise_id})
    if not franchise:
        return None
    return await _expand(franchise, detailed=True)

async def create_franchise(name: str, admin_emails: list[str]) -> dict:
    """
    Create a franchise and grant the franchisee role to each listed admin.
    Every admin email must belong to an existing user.
    """
    users_col = mongo_conn.users_collection
    admins = []
    for email in admin_emails:
        user = await users_col.find_one({"email": email})
        if not user:
            raise NotFound(f"unknown user for franchise admin {email} provided")
        admins.append(user)

    if await mongo_conn.franchises_collection.find_one({"name": name}):
        raise Conflict("franchise name already exists")
    franchise_id = await mongo_conn.next_id("franchises")
    try:
        await mongo_conn.franchises_collection.insert_one({"_id": franchise_id, "name": name, "created_at": utcnow()})
    except DuplicateKeyError:
        raise Conflict("franchise name already exists")

    for user in admins:
        await users_col.update_one(
            {"_id": user["_id"]},
            {"$addToSet": {"roles": {"role": Role.FRANCHISEE, "objectId": franchise_id}}}
        )
    log_shipper.log_db("franchises.insert_one", {"id": franchise_id, "name": name, "admins": admin_emails})
    logger.info(f"Franchise {franchise_id} created with admins {admin_emails}")
    return {
        "id": franchise_id,
        "name": name,
        "admins": [{"id": u["_id"], "name": u.get("name"), "email": u["email"]} for u in admins],
        "stores": []
    }

async def list_franchises(page: int = 0, limit: int = 10, name: str = "*", detailed: bool = False):
    """
    Return (franchises, more) for a 0-based page. Admin details and store
    revenue are only included when detailed is set.
    """
    query = {}
    if name and name != "*":
        query = {"name": {"$regex": wildcard_regex(name), "$options": "i"}}
    cursor = mongo_conn.franchises_collection.find(query, sort=[("_id", 1)], skip=page * limit, limit=limit + 1)
    franchises = await cursor.to_list(length=limit + 1)
    more = len(franchises) > limit
    return [await _expand(f, detailed) for f in franchises[:limit]], more

async def get_user_franchises(user_id: int) -> list[dict]:
    user = await mongo_conn.users_collection.find_one({"_id": user_id})
    if not user:
        return []
    ids = [r["objectId"] for r in user.get("roles", []) if r.get("role") == Role.FRANCHISEE and r.get("objectId") is not None]
    if not ids:
        return []
    cursor = mongo_conn.franchises_collection.find({"_id": {"$in": ids}}, sort=[("_id", 1)])
    return [await _expand(f, detailed=True) for f in await cursor.to_list(length=None)]

async def delete_franchise(franchise_id: int):
    """Remove the franchise, its stores, and the matching franchisee roles."""
    await mongo_conn.stores_collection.delete_many({"franchise_id": franchise_id})
    await mongo_conn.users_collection.update_many(
        {"roles.objectId": franchise_id},
        {"$pull": {"roles": {"role": Role.FRANCHISEE, "objectId": franchise_id}}}
    )
    await mongo_conn.franchises_collection.delete_one({"_id": franchise_id})
    log_shipper.log_db("franchises.delete_one", {"id": franchise_id})
    logger.info(f"Franchise {franchise_id} deleted")

async def create_store(franchise_id: int, name: str) -> dict:
    if not await mongo_conn.franchises_collection.find_one({"_id": franchise_id}):
        raise NotFound("unknown franchise")
    store_id = await mongo_conn.next_id("stores")
    await mongo_conn.stores_collection.insert_one({"_id": store_id, "franchise_id": franchise_id, "name": name, "created_at": utcnow()})
    log_shipper.log_db("stores.insert_one", {"id": store_id, "franchise_id": franchise_id})
    logger.info(f"Store {store_id} created in franchise {franchise_id}")
    return {"id": store_id, "franchiseId": franchise_id, "name": name}

async def get_store(franchise_id: int, store_id: int) -> dict | None:
    return await mongo_conn.stores_collection.find_one({"_id": store_id, "franchise_id": franchise_id})

async def delete_store(franchise_id: int, store_id: int):
    result = await mongo_conn.stores_collection.delete_one({"_id": store_id, "franchise_id": franchise_id})
    if result.deleted_count == 0:
        raise NotFound("unknown store")
    log_shipper.log_db("stores.delete_one", {"id": store_id, "franchise_id": franchise_id})
    logger.info(f"Store {store_id} deleted from franchise {franchise_id}")
