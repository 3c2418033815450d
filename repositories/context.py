"""
repositories/context.py
-----------------------
Builds the set of repositories an application works with.
Construct it once at startup and pass it to whatever needs data access.
"""

from dataclasses import dataclass
from typing import Optional

from pymongo import MongoClient

from config import MONGO_DB_NAME
from db.connection import get_client
from db.transaction import MongoTransactionManager
from repositories.location_repo import LocationRepository
from repositories.simple_student_repo import SimpleStudentRepository
from repositories.student_repo import StudentRepository
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RepositoryContext:
    """One repository per collection plus the shared transaction manager."""
    locations: LocationRepository
    students: StudentRepository
    simple_students: SimpleStudentRepository
    transaction_manager: MongoTransactionManager


def build_context(client: Optional[MongoClient] = None, database_name: str = MONGO_DB_NAME) -> RepositoryContext:
    """
    Wire repositories and the transaction manager to one database.

    Args:
        client: MongoClient to use; defaults to the one from db.connection.
        database_name: Database holding the collections.

    Raises:
        RuntimeError: If no client is given and none was initialized.
    """
    client = client if client is not None else get_client()
    database = client[database_name]
    context = RepositoryContext(
        locations=LocationRepository(database),
        students=StudentRepository(database),
        simple_students=SimpleStudentRepository(database),
        transaction_manager=MongoTransactionManager(client),
    )
    logger.info(f"Repository context ready on database '{database_name}'.")
    return context
