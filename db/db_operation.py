from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ReturnDocument
from settings.config import settings
from utils.logger import get_logger

logger = get_logger("DB_OPERATION")

class MongoConnection:
    def __init__(self):
        logger.info("Initializing MongoDB Connection")
        self.bind(AsyncIOMotorClient(settings.MONGO_URI), settings.DB_NAME)

    def bind(self, client, db_name: str):
        """Point every collection handle at the given client (tests swap in a mock)."""
        self.client = client
        self.db = self.client[db_name]
        self.users_collection = self.db["users"]
        self.auth_collection = self.db["auth"]
        self.franchises_collection = self.db["franchises"]
        self.stores_collection = self.db["stores"]
        self.menu_collection = self.db["menu"]
        self.orders_collection = self.db["orders"]
        self.counters_collection = self.db["counters"]

    async def connect(self):
        try:
            # Force an actual connection & authentication check
            await self.db.command("ping")
            logger.info(f"Successfully connected to MongoDB, using database: {self.db.name}")
        except Exception as e:
            logger.error(f"Could not connect to MongoDB: {e}")
            raise e

    async def next_id(self, name: str) -> int:
        """Allocate the next integer id for a collection."""
        counter = await self.counters_collection.find_one_and_update(
            {"_id": name},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER
        )
        return int(counter["seq"])

async def create_indexes():
    await mongo_conn.users_collection.create_index("email", unique=True)
    await mongo_conn.users_collection.create_index("roles.objectId")
    await mongo_conn.auth_collection.create_index("jti", unique=True)
    await mongo_conn.auth_collection.create_index("user_id")
    await mongo_conn.franchises_collection.create_index("name", unique=True)
    await mongo_conn.stores_collection.create_index("franchise_id")
    await mongo_conn.orders_collection.create_index("diner_id")
    logger.info("Indexes created")

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

# Create the instance
mongo_conn = MongoConnection()
