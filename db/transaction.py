"""
db/transaction.py
-----------------
Transaction manager bound to the MongoDB client.
It only hands out sessions; commit/abort behavior is the driver's.
Multi-document transactions need a replica set or sharded cluster.
"""

from contextlib import contextmanager
from typing import Iterator

from pymongo import MongoClient
from pymongo.client_session import ClientSession
from pymongo.errors import PyMongoError

from utils.logger import get_logger

logger = get_logger(__name__)


class MongoTransactionManager:
    """Creates sessions and transaction scopes on a single client."""

    def __init__(self, client: MongoClient):
        self.client = client

    def start_session(self) -> ClientSession:
        """Start a plain (causally consistent) session. The caller must end it."""
        return self.client.start_session()

    @contextmanager
    def transaction(self) -> Iterator[ClientSession]:
        """
        Run a block inside a multi-document transaction.

        Yields:
            The session to pass to repository calls via ``session=``.

        The transaction commits when the block exits normally and is
        aborted when the block raises; the exception is re-raised.
        """
        with self.client.start_session() as session:
            session.start_transaction()
            try:
                yield session
            except Exception:
                if session.in_transaction:
                    try:
                        session.abort_transaction()
                        logger.warning("Transaction aborted.")
                    except PyMongoError as e:
                        # the block's own exception is the one the caller sees
                        logger.error(f"Failed to abort transaction: {e}")
                raise
            try:
                session.commit_transaction()
            except PyMongoError as e:
                logger.error(f"Failed to commit transaction: {e}")
                raise
