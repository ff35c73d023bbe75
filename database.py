"""
Key-value storage for the portal.

The portal keeps its whole state (session, cart, orders) as string values
under string keys, the way a browser keeps it in local storage. A store is
either process memory or a MongoDB collection with one document per key.
"""
import logging
from typing import Dict, Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from config import get_settings

logger = logging.getLogger(__name__)

KV_COLLECTION = "kv"


class KeyValueStore:
    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data)


class MongoStore(KeyValueStore):
    """One document per key: ``{"_id": key, "value": value}``."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def get_item(self, key: str) -> Optional[str]:
        doc = self.collection.find_one({"_id": key})
        if not doc:
            return None
        return doc.get("value")

    def set_item(self, key: str, value: str) -> None:
        self.collection.replace_one({"_id": key}, {"_id": key, "value": str(value)}, upsert=True)

    def remove_item(self, key: str) -> None:
        self.collection.delete_one({"_id": key})


def connect(database_url: Optional[str], database_name: Optional[str]) -> Optional[Database]:
    if not database_url or not database_name:
        return None
    client = MongoClient(database_url)
    logger.info("Using MongoDB database %s for portal storage", database_name)
    return client[database_name]


def get_store(database: Optional[Database] = None) -> KeyValueStore:
    if database is None:
        settings = get_settings()
        database = connect(settings.database_url, settings.database_name)
    if database is None:
        return MemoryStore()
    return MongoStore(database[KV_COLLECTION])
