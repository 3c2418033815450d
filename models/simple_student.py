"""
models/simple_student.py
------------------------
Flat student record without location or hobbies.
"""

from dataclasses import dataclass, field
from uuid import UUID, uuid4


@dataclass(frozen=True)
class SimpleStudent:
    """A document in the `simpleStudent` collection; `mail` is stored as `email`."""
    name: str
    mail: str
    id: UUID = field(default_factory=uuid4)
