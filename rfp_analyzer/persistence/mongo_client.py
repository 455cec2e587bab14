"""
Mongo Client — raw database connection management.
The connection is opened lazily on first use and shared by the process.
"""

from __future__ import annotations

import logging
from typing import Any

from pymongo import MongoClient as PyMongoClient
from pymongo.errors import PyMongoError

from rfp_analyzer.config import get_settings
from rfp_analyzer.errors import ConfigurationError, PersistenceError

logger = logging.getLogger(__name__)


class MongoClient:
    """Thin wrapper around pymongo."""

    def __init__(self, uri: str | None = None, database: str | None = None):
        self.settings = get_settings()
        self.uri = uri or self.settings.mongodb_uri
        self.database_name = database or self.settings.mongodb_database
        self._client: Any = None
        self._db: Any = None

    def connect(self) -> None:
        """Establish the MongoDB connection."""
        if not self.uri:
            raise ConfigurationError("MONGODB_URI is not set in environment / .env file")

        try:
            self._client = PyMongoClient(self.uri)
            self._db = self._client[self.database_name]
        except PyMongoError as exc:
            raise PersistenceError(f"Could not connect to MongoDB: {exc}") from exc
        logger.info(f"Connected to MongoDB: {self.database_name}")

    def get_database(self) -> Any:
        """Return the database handle."""
        if self._db is None:
            self.connect()
        return self._db

    def close(self) -> None:
        """Close the connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._db = None
            logger.info("MongoDB connection closed")
