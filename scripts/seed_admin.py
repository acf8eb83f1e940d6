# scripts/seed_admin.py
import asyncio
from db.db_operation import mongo_conn, create_indexes
from services.user_service import ensure_default_admin, get_user_by_email
from settings.config import settings

async def seed():
    await mongo_conn.connect()
    await create_indexes()
    existing = await get_user_by_email(settings.DEFAULT_ADMIN_EMAIL)
    if existing:
        print("Admin already exists:", settings.DEFAULT_ADMIN_EMAIL)
        return
    await ensure_default_admin()
    print("Created admin:", settings.DEFAULT_ADMIN_EMAIL)

if __name__ == "__main__":
    asyncio.run(seed())
