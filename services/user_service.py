import re
from pymongo.errors import DuplicateKeyError
from db.db_operation import mongo_conn, utcnow
from core.exceptions import Conflict, NotFound
from models.user import Role
from utils.hash import hash_password, verify_password
from utils.log_shipper import log_shipper
from utils.logger import get_logger
from settings.config import settings

logger = get_logger("USER_SERVICE")

def to_user_out(user: dict) -> dict:
    """Public shape of a user document (no password, no token_version)."""
    roles = []
    for r in user.get("roles", []):
        role = {"role": r["role"]}
        if r.get("objectId") is not None:
            role["objectId"] = r["objectId"]
        roles.append(role)
    return {
        "id": user["_id"],
        "name": user.get("name"),
        "email": user["email"],
        "roles": roles
    }

def wildcard_regex(pattern: str) -> str:
    """Translate a '*' wildcard filter into an anchored regex."""
    return "^" + ".*".join(re.escape(part) for part in pattern.split("*")) + "$"

async def create_user(name: str, email: str, password: str, roles: list | None = None) -> dict:
    logger.info(f"User create request received for email: {email}")
    users_collection = mongo_conn.users_collection
    if await users_collection.find_one({"email": email}):
        raise Conflict("email already registered")

    user_dict = {
        "_id": await mongo_conn.next_id("users"),
        "name": name,
        "email": email,
        "password": hash_password(password),
        "roles": roles if roles is not None else [{"role": Role.DINER}],
        "token_version": 0,
        "created_at": utcnow()
    }
    try:
        await users_collection.insert_one(user_dict)
    except DuplicateKeyError:
        raise Conflict("email already registered")
    log_shipper.log_db("users.insert_one", {"id": user_dict["_id"], "email": email})
    logger.info(f"User inserted into database with id: {user_dict['_id']}")
    return user_dict

async def get_user_by_id(user_id: int) -> dict | None:
    return await mongo_conn.users_collection.find_one({"_id": user_id})

async def get_user_by_email(email: str) -> dict | None:
    return await mongo_conn.users_collection.find_one({"email": email})

async def authenticate(email: str, password: str) -> dict | None:
    """Return the user when the credentials match, otherwise None."""
    user = await get_user_by_email(email)
    if not user:
        logger.warning(f"Login failed: user not found {email}")
        return None
    if not verify_password(password, user.get("password")):
        logger.warning(f"Login failed: wrong password {email}")
        return None
    return user

async def update_user(user_id: int, name: str | None = None, email: str | None = None, password: str | None = None) -> dict:
    """
    Update name/email/password and bump token_version so every token issued
    before this change stops validating.
    """
    users_collection = mongo_conn.users_collection
    existing = await users_collection.find_one({"_id": user_id})
    if not existing:
        raise NotFound("unknown user")

    changes = {"updated_at": utcnow()}
    if name:
        changes["name"] = name
    if email and email != existing["email"]:
        if await users_collection.find_one({"email": email, "_id": {"$ne": user_id}}):
            raise Conflict("email already registered")
        changes["email"] = email
    if password:
        changes["password"] = hash_password(password)

    try:
        await users_collection.update_one({"_id": user_id}, {"$set": changes, "$inc": {"token_version": 1}})
    except DuplicateKeyError:
        raise Conflict("email already registered")
    await mongo_conn.auth_collection.delete_many({"user_id": user_id})
    log_shipper.log_db("users.update_one", {"id": user_id, "fields": sorted(k for k in changes if k != "password")})
    logger.info(f"User {user_id} updated")
    return await users_collection.find_one({"_id": user_id})

async def delete_user(user_id: int) -> bool:
    """Hard delete. Orders placed by the user are kept."""
    result = await mongo_conn.users_collection.delete_one({"_id": user_id})
    if result.deleted_count == 0:
        return False
    await mongo_conn.auth_collection.delete_many({"user_id": user_id})
    log_shipper.log_db("users.delete_one", {"id": user_id})
    logger.info(f"User {user_id} deleted")
    return True

async def list_users(page: int = 1, limit: int | None = 10, name: str = "*"):
    """
    Return (users, more) for a 1-based page, filtered by a wildcard that is
    matched against name or email. A limit of None returns every match.
    """
    query = {}
    if name and name != "*":
        regex = {"$regex": wildcard_regex(name), "$options": "i"}
        query = {"$or": [{"name": regex}, {"email": regex}]}
    if limit is None:
        cursor = mongo_conn.users_collection.find(query, {"password": 0}, sort=[("_id", 1)])
        return [to_user_out(u) for u in await cursor.to_list(length=None)], False
    skip = (page - 1) * limit
    cursor = mongo_conn.users_collection.find(query, {"password": 0}, sort=[("_id", 1)], skip=skip, limit=limit + 1)
    users = await cursor.to_list(length=limit + 1)
    more = len(users) > limit
    return [to_user_out(u) for u in users[:limit]], more

async def ensure_default_admin():
    if await get_user_by_email(settings.DEFAULT_ADMIN_EMAIL):
        return
    await create_user(
        settings.DEFAULT_ADMIN_NAME,
        settings.DEFAULT_ADMIN_EMAIL,
        settings.DEFAULT_ADMIN_PASSWORD,
        roles=[{"role": Role.ADMIN}]
    )
    logger.info(f"Seeded default admin {settings.DEFAULT_ADMIN_EMAIL}")
