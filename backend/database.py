from motor.motor_asyncio import AsyncIOMotorClient
import logging

from legallylegit import config

logger = logging.getLogger(__name__)

class Database:
    client: AsyncIOMotorClient = None
    db = None
    
    async def connect(self):
        try:
            self.client = AsyncIOMotorClient(config.MONGO_URL)
            self.db = self.client[config.DB_NAME]
            # Verify connection
            await self.db.command("ping")
            logger.info(f"Connected to MongoDB: {config.DB_NAME}")
            
            await self._create_indexes()
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise
    
    async def close(self):
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed")
    
    def get_db(self):
        return self.db
    
    async def _create_indexes(self):
        """Create MongoDB indexes for efficient queries."""
        try:
            # Key-value snapshots (profiles, saved document lists, drafts, sessions)
            await self.db.legallylegit_store.create_index("key", unique=True)
            
            # Entitlement journal - saves and purchases are idempotent by reference
            await self.db.legallylegit_entitlement_transactions.create_index("transaction_id", unique=True)
            await self.db.legallylegit_entitlement_transactions.create_index([("email", 1), ("created_at", -1)])
            await self.db.legallylegit_entitlement_transactions.create_index(
                [("email", 1), ("action", 1), ("reference_id", 1)]
            )
            
            # Checkout sessions awaiting payment confirmation
            await self.db.legallylegit_checkouts.create_index("stripe_checkout_session_id", unique=True)
            await self.db.legallylegit_checkouts.create_index("email")
            
            logger.info("Database indexes created")
        except Exception as e:
            logger.warning(f"Index creation warning: {e}")

database = Database()
