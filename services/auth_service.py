from db.db_operation import mongo_conn, utcnow
from services.user_service import to_user_out
from utils.jwt_handler import create_access_token
from utils.log_shipper import log_shipper
from utils.logger import get_logger

logger = get_logger("AUTH_SERVICE")

async def issue_token(user: dict) -> str:
    """
    Sign a session token for the user and record it as an active session.
    The role set is a snapshot of the user document at this moment.
    """
    out = to_user_out(user)
    claims = {
        "sub": str(out["id"]),
        "id": out["id"],
        "name": out["name"],
        "email": out["email"],
        "roles": out["roles"],
        "token_version": int(user.get("token_version", 0)),
    }
    token, jti = create_access_token(claims)
    await mongo_conn.auth_collection.insert_one({"jti": jti, "user_id": out["id"], "created_at": utcnow()})
    log_shipper.log_db("auth.insert_one", {"user_id": out["id"]})
    logger.info(f"Token issued for user {out['id']}")
    return token

async def session_active(jti: str | None) -> bool:
    if not jti:
        return False
    return await mongo_conn.auth_collection.find_one({"jti": jti}) is not None

async def revoke_token(jti: str):
    await mongo_conn.auth_collection.delete_one({"jti": jti})
    log_shipper.log_db("auth.delete_one", None)
    logger.info("Session revoked")
