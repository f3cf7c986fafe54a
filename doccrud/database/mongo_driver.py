from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from .base import BaseDatabaseDriver

class MongoDriver(BaseDatabaseDriver):
    def __init__(self, url: str, database: str, client: Optional[AsyncIOMotorClient] = None):
        self.url = url
        self.database_name = database
        # motor connects lazily, so building the client here does no I/O
        self.client = client or AsyncIOMotorClient(url, tz_aware=True)

    async def connect(self):
        """Verify the server is reachable."""
        await self.client.admin.command("ping")

    async def disconnect(self):
        """Close client connections."""
        self.client.close()

    def get_client(self) -> AsyncIOMotorClient:
        return self.client

    def get_database(self) -> AsyncIOMotorDatabase:
        return self.client[self.database_name]

    def get_collection(self, name: str) -> AsyncIOMotorCollection:
        return self.get_database()[name]
