from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.core.config import settings

def create_mongo_client(uri: str | None = None) -> AsyncIOMotorClient:
    return AsyncIOMotorClient(uri or settings.MONGODB_URI)

def get_database(client: AsyncIOMotorClient, name: str | None = None) -> AsyncIOMotorDatabase:
    return client[name or settings.MONGODB_DB]
