"""
repositories/base_repo.py
-------------------------
Generic data access over one MongoDB collection.
Concrete repositories only choose an entity mapping and declare queries.
"""

from typing import Any, Generic, Iterable, Optional, TypeVar
from uuid import UUID

from pymongo.client_session import ClientSession
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from models.mapping import EntityMapping, encode_id
from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def _session_kwargs(session: Optional[ClientSession]) -> dict:
    return {"session": session} if session is not None else {}


class MongoRepository(Generic[T]):
    """CRUD operations on the collection named by `mapping`."""

    mapping: EntityMapping

    def __init__(self, database: Database):
        self.database = database
        self.collection: Collection = database[self.mapping.collection]

    # ── CREATE / UPDATE ───────────────────────────────────

    def save(self, entity: T, session: Optional[ClientSession] = None) -> T:
        """
        Insert or fully replace the document with the entity's id.

        Referenced entities are not saved.

        Returns:
            The same entity.
        """
        doc = self.mapping.to_document(entity)
        try:
            self.collection.replace_one({"_id": doc["_id"]}, doc, upsert=True, **_session_kwargs(session))
            logger.info(f"Saved {self.mapping.entity_type.__name__} {doc['_id']}")
            return entity
        except PyMongoError as e:
            logger.error(f"Failed to save {self.mapping.entity_type.__name__} {doc['_id']}: {e}")
            raise

    def save_all(self, entities: Iterable[T], session: Optional[ClientSession] = None) -> list[T]:
        """Save each entity in turn. Returns them as a list."""
        return [self.save(e, session=session) for e in entities]

    # ── READ ──────────────────────────────────────────────

    def find_by_id(self, entity_id: UUID | str, session: Optional[ClientSession] = None) -> Optional[T]:
        """
        Fetch a single entity.

        Returns:
            The entity or None if not found.
        """
        try:
            doc = self.collection.find_one({"_id": encode_id(entity_id)}, **_session_kwargs(session))
        except PyMongoError as e:
            logger.error(f"Failed to fetch {self.mapping.entity_type.__name__} {entity_id}: {e}")
            raise
        return self._to_entity(doc, {}, session) if doc else None

    def exists_by_id(self, entity_id: UUID | str, session: Optional[ClientSession] = None) -> bool:
        """
        Check whether a document with the given id exists.

        Returns:
            True if found, False otherwise.
        """
        try:
            return self.collection.count_documents(
                {"_id": encode_id(entity_id)}, limit=1, **_session_kwargs(session)
            ) > 0
        except PyMongoError as e:
            logger.error(f"Failed to check {self.mapping.entity_type.__name__} {entity_id}: {e}")
            raise

    def find_all(self, session: Optional[ClientSession] = None) -> list[T]:
        """Fetch every document of the collection (unbounded, in store order)."""
        return self.find_by_filter({}, session=session)

    def find_all_by_id(self, entity_ids: Iterable[UUID | str], session: Optional[ClientSession] = None) -> list[T]:
        """
        Fetch the entities whose ids are listed. Missing ids are skipped.

        Args:
            entity_ids: Identifiers to look up.

        Returns:
            List of found entities, in store order.
        """
        return self.find_by_filter({"_id": {"$in": [encode_id(i) for i in entity_ids]}}, session=session)

    def find_by_filter(self, flt: dict, session: Optional[ClientSession] = None) -> list[T]:
        """
        Run one `find` with a ready filter document and map the results.
        Used by the derived and native query methods.
        """
        logger.debug(f"find {self.collection.name} {flt}")
        try:
            docs = list(self.collection.find(flt, **_session_kwargs(session)))
        except PyMongoError as e:
            logger.error(f"Failed to query {self.collection.name} with {flt}: {e}")
            raise
        resolved: dict = {}
        return [self._to_entity(d, resolved, session) for d in docs]

    def count(self, session: Optional[ClientSession] = None) -> int:
        """
        Count the documents of the collection.

        Returns:
            Number of stored entities.
        """
        try:
            return self.collection.count_documents({}, **_session_kwargs(session))
        except PyMongoError as e:
            logger.error(f"Failed to count {self.collection.name}: {e}")
            raise

    # ── DELETE ────────────────────────────────────────────

    def delete_by_id(self, entity_id: UUID | str, session: Optional[ClientSession] = None) -> None:
        """Delete by id. Deleting a missing document is not an error."""
        try:
            result = self.collection.delete_one({"_id": encode_id(entity_id)}, **_session_kwargs(session))
        except PyMongoError as e:
            logger.error(f"Failed to delete {self.mapping.entity_type.__name__} {entity_id}: {e}")
            raise
        if result.deleted_count:
            logger.info(f"Deleted {self.mapping.entity_type.__name__} {entity_id}")

    def delete(self, entity: T, session: Optional[ClientSession] = None) -> None:
        """
        Delete an entity by its id. Deleting a missing entity is not an error.

        Args:
            entity: The record to remove; only its id is used.
        """
        self.delete_by_id(getattr(entity, self.mapping.id_field.attribute), session=session)

    def delete_all(self, entities: Optional[Iterable[T]] = None, session: Optional[ClientSession] = None) -> None:
        """Delete the given entities, or the whole collection when none are given."""
        if entities is not None:
            for e in entities:
                self.delete(e, session=session)
            return
        try:
            result = self.collection.delete_many({}, **_session_kwargs(session))
            logger.info(f"Deleted {result.deleted_count} document(s) from {self.collection.name}")
        except PyMongoError as e:
            logger.error(f"Failed to clear {self.collection.name}: {e}")
            raise

    # ── HELPERS ───────────────────────────────────────────

    def _to_entity(self, doc: dict, resolved: dict, session: Optional[ClientSession]) -> T:
        """Convert a document, dereferencing references once per (collection, id)."""

        def dereference(target: EntityMapping, ref_id: Any):
            key = (target.collection, ref_id)
            if key not in resolved:
                try:
                    ref_doc = self.database[target.collection].find_one({"_id": ref_id}, **_session_kwargs(session))
                except PyMongoError as e:
                    logger.error(f"Failed to resolve {target.collection} {ref_id}: {e}")
                    raise
                if ref_doc is None:
                    logger.warning(f"Dangling reference to {target.collection} {ref_id}")
                resolved[key] = target.from_document(ref_doc, dereference) if ref_doc else None
            return resolved[key]

        return self.mapping.from_document(doc, dereference)
