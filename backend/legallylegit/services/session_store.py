"""Session Store

Typed key-value repository over MongoDB. Values are whole pydantic
snapshots: callers read a full object, change it, and write it back.
"""

from datetime import datetime, timezone
from typing import Optional, Type, TypeVar
import logging

from pydantic import BaseModel

from database import database

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

STORE_COLLECTION = "legallylegit_store"


def profile_key(email: str) -> str:
    return f"profile:{email.lower()}"


def documents_key(email: str) -> str:
    return f"documents:{email.lower()}"


def generation_key(email: str, generation_id: str) -> str:
    return f"generation:{email.lower()}:{generation_id}"


def session_key(session_id: str) -> str:
    return f"session:{session_id}"


class SessionStore:
    """get/set/delete of typed snapshots by key."""

    def __init__(self):
        self.db = None

    def _get_db(self):
        if self.db is None:
            self.db = database.get_db()
        return self.db

    async def get(self, key: str, model: Type[T]) -> Optional[T]:
        db = self._get_db()
        record = await db[STORE_COLLECTION].find_one({"key": key}, {"_id": 0})
        if not record:
            return None
        return model.model_validate(record["value"])

    async def set(self, key: str, value: BaseModel) -> None:
        db = self._get_db()
        await db[STORE_COLLECTION].update_one(
            {"key": key},
            {
                "$set": {
                    "value": value.model_dump(mode="json"),
                    "updated_at": datetime.now(timezone.utc),
                }
            },
            upsert=True,
        )

    async def delete(self, key: str) -> bool:
        db = self._get_db()
        result = await db[STORE_COLLECTION].delete_one({"key": key})
        return result.deleted_count > 0


# Global store instance
session_store = SessionStore()
