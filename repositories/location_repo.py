"""
repositories/location_repo.py
-----------------------------
Data access layer for the `location` collection.
"""

from models.location import Location
from models.mapping import LOCATION_MAPPING
from repositories.base_repo import MongoRepository


class LocationRepository(MongoRepository[Location]):
    """Generic CRUD only."""

    mapping = LOCATION_MAPPING
