import logging
from typing import Any, Optional

from pymongo import MongoClient

from conectajob.core.config import get_settings

logger = logging.getLogger(__name__)


class MongoManager:
    """
    MongoDB connection manager, one client per process
    """
    _instance = None
    _db = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(MongoManager, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if self._db is None:
            self.initialize_mongo()

    def initialize_mongo(self):
        settings = get_settings()
        client = MongoClient(settings.database_url)
        self._db = client[settings.database_name]
        logger.info("MongoDB client initialized for database '%s'", settings.database_name)

    def get_db(self):
        """Get the MongoDB database handle"""
        return self._db


class MongoStorage:
    """
    Storage backend keeping each key as one document, `{"_id": key, "value": ...}`.
    """

    def __init__(self, collection_name: str = "conectajob_state", db: Optional[Any] = None):
        self.collection_name = collection_name
        self.db = db if db is not None else MongoManager().get_db()

    @property
    def collection(self):
        return self.db[self.collection_name]

    def load(self, key: str) -> Optional[Any]:
        doc = self.collection.find_one({"_id": key})
        if doc is None:
            return None
        return doc.get("value")

    def save(self, key: str, value: Any) -> None:
        self.collection.replace_one({"_id": key}, {"_id": key, "value": value}, upsert=True)

    def delete(self, key: str) -> None:
        self.collection.delete_one({"_id": key})
