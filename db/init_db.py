"""
db/init_db.py
-------------
Creates the collections and secondary indexes if they do not already exist.
Run this module directly to prepare a fresh database:
    python -m db.init_db
"""

from pymongo import ASCENDING
from pymongo.database import Database
from pymongo.errors import PyMongoError

from config import LOCATION_COLLECTION, SIMPLE_STUDENT_COLLECTION, STUDENT_COLLECTION
from db.connection import get_database
from utils.logger import get_logger

logger = get_logger(__name__)

# collection -> indexed storage fields; `_id` is always indexed
INDEXES: dict[str, list[str]] = {
    LOCATION_COLLECTION: [],
    STUDENT_COLLECTION: ["name", "hobbies.name", "location"],
    SIMPLE_STUDENT_COLLECTION: ["name"],
}


def create_collections(database: Database | None = None) -> None:
    """
    Create every collection and its indexes.
    Safe to call multiple times (existing collections and indexes are kept).
    """
    db = database if database is not None else get_database()
    try:
        existing = set(db.list_collection_names())
        for name, fields in INDEXES.items():
            if name not in existing:
                db.create_collection(name)
                logger.info(f"Created collection '{name}'.")
            for field in fields:
                db[name].create_index([(field, ASCENDING)])
        logger.info("Database collections initialized successfully.")
    except PyMongoError as e:
        logger.error(f"Failed to initialize collections: {e}")
        raise


if __name__ == "__main__":
    from db.connection import close_client, init_client
    init_client()
    create_collections()
    close_client()
    print("Collections and indexes created successfully.")
