"""
Wrapper for the MongoDB document store.
Lazily connected handle, error translation, generic store/find/aggregate.
All persistence logic is isolated here.
"""
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from shopscraper.errors import StoreConnectionError, WriteError, ReadError
from shopscraper.config import config
from shopscraper.logger import logger


Record = Union[BaseModel, Dict[str, Any]]


def to_document(record: Record) -> Dict[str, Any]:
    """Convert a model or dict into an insertable document. Absent fields are omitted."""
    if isinstance(record, BaseModel):
        return record.model_dump(exclude_none=True)
    return dict(record)


class DocumentStore:
    """
    Wrapper for MongoDB calls.
    Business logic never calls the driver directly.
    """

    def __init__(self, uri: Optional[str] = None, db_name: Optional[str] = None):
        self.uri = uri or config.MONGO_URI
        self.db_name = db_name or config.DB_NAME
        self.client: Optional[AsyncMongoClient] = None
        self.db = None

    @property
    def is_connected(self) -> bool:
        return self.db is not None

    async def connect(self):
        """
        Connect once and return the shared database handle.

        Raises:
            StoreConnectionError: If no session can be established
        """
        if self.db is not None:
            return self.db

        client = None
        try:
            client = AsyncMongoClient(self.uri, serverSelectionTimeoutMS=config.MONGO_TIMEOUT_MS)
            await client.admin.command("ping")
        except PyMongoError as e:
            if client is not None:
                await client.close()
            logger.error(f"Error connecting to MongoDB: {e}")
            raise StoreConnectionError(f"Cannot connect to MongoDB at {self.uri}: {e}") from e

        self.client = client
        self.db = client[self.db_name]
        logger.info(f"Connected to MongoDB database '{self.db_name}'")
        return self.db

    async def close(self):
        """Close the client. Safe to call when already closed."""
        if self.client is None:
            return

        await self.client.close()
        self.client = None
        self.db = None
        logger.info("MongoDB connection closed")

    @asynccontextmanager
    async def session(self):
        """Connect for the duration of a run; the connection is always released."""
        try:
            yield await self.connect()
        finally:
            await self.close()

    async def _collection(self, collection_name: str):
        db = await self.connect()
        return db[collection_name]

    async def store(self, collection_name: str, data: Union[Record, Sequence[Record]]) -> int:
        """
        Insert one record, or a sequence of records as a single batch.

        An empty sequence is a no-op. A failed batch may leave a prefix
        of the documents already written.

        Returns:
            Number of documents written

        Raises:
            WriteError: If the insert is rejected
        """
        collection = await self._collection(collection_name)

        try:
            if isinstance(data, (list, tuple)):
                if not data:
                    return 0
                documents = [to_document(record) for record in data]
                await collection.insert_many(documents)
                logger.info(f"Inserted {len(documents)} documents into {collection_name}")
                return len(documents)

            await collection.insert_one(to_document(data))
            logger.info(f"Inserted 1 document into {collection_name}")
            return 1

        except PyMongoError as e:
            logger.error(f"Error storing data in {collection_name}: {e}")
            raise WriteError(f"Failed to store data in {collection_name}: {e}") from e

    async def find(self, collection_name: str, query: Optional[Dict[str, Any]] = None,
                   projection: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Return all matching documents. No pagination."""
        collection = await self._collection(collection_name)

        try:
            cursor = collection.find(query or {}, projection)
            return await cursor.to_list(None)
        except PyMongoError as e:
            logger.error(f"Error finding data in {collection_name}: {e}")
            raise ReadError(f"Failed to find data in {collection_name}: {e}") from e

    async def count(self, collection_name: str, query: Optional[Dict[str, Any]] = None) -> int:
        """Count matching documents."""
        collection = await self._collection(collection_name)

        try:
            return await collection.count_documents(query or {})
        except PyMongoError as e:
            logger.error(f"Error counting documents in {collection_name}: {e}")
            raise ReadError(f"Failed to count documents in {collection_name}: {e}") from e

    async def aggregate(self, collection_name: str,
                        pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Run an aggregation pipeline and return the materialized results."""
        collection = await self._collection(collection_name)

        try:
            cursor = await collection.aggregate(pipeline)
            return await cursor.to_list(None)
        except PyMongoError as e:
            logger.error(f"Error aggregating data in {collection_name}: {e}")
            raise ReadError(f"Failed to aggregate data in {collection_name}: {e}") from e
