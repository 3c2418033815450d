"""
db/connection.py
----------------
Manages the process-wide MongoDB client.
A single pymongo.MongoClient owns the connection pool and is safe to share
between threads, so every repository reuses it.
"""

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from config import MONGO_DB_NAME, MONGO_SERVER_SELECTION_TIMEOUT_MS, MONGO_URI
from utils.logger import get_logger

logger = get_logger(__name__)

_client: MongoClient | None = None


def init_client(uri: str = MONGO_URI, ping: bool = True) -> MongoClient:
    """
    Initialize the MongoDB client.

    Args:
        uri: Connection string of the deployment.
        ping: Run a ``ping`` command so an unreachable server fails fast.

    Returns:
        The shared MongoClient.

    Raises:
        pymongo.errors.ServerSelectionTimeoutError: If the server is unreachable.
    """
    global _client
    if _client is not None:
        return _client
    client = MongoClient(uri, serverSelectionTimeoutMS=MONGO_SERVER_SELECTION_TIMEOUT_MS)
    if ping:
        try:
            client.admin.command("ping")
        except PyMongoError as e:
            logger.error(f"Failed to reach MongoDB: {e}")
            client.close()
            raise
    _client = client
    logger.info("MongoDB client initialized successfully.")
    return _client


def get_client() -> MongoClient:
    """
    Get the shared client.

    Raises:
        RuntimeError: If the client has not been initialized.
    """
    if _client is None:
        raise RuntimeError("MongoDB client not initialized. Call init_client() first.")
    return _client


def get_database(name: str = MONGO_DB_NAME) -> Database:
    """Get a database handle from the shared client."""
    return get_client()[name]


def close_client() -> None:
    """Close the client and all pooled connections."""
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB client closed.")
