"""
models/location.py
------------------
Domain model for a location (city + postal code).
"""

from dataclasses import dataclass, field
from uuid import UUID, uuid4


@dataclass(frozen=True)
class Location:
    """
    A top-level document in the `location` collection.

    Attributes:
        city: City name.
        postal_code: Postal code, stored as `postalCode`.
        id: Identifier, generated on construction unless given.
    """
    city: str
    postal_code: str
    id: UUID = field(default_factory=uuid4)

    def __str__(self) -> str:
        return f"{self.postal_code} {self.city}"
