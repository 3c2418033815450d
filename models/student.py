"""
models/student.py
-----------------
Domain models for a student and the hobbies embedded in it.
"""

from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID, uuid4

from models.location import Location


@dataclass(frozen=True)
class Hobby:
    """An embedded value of a student; it has no identity of its own."""
    name: str


@dataclass(frozen=True)
class Student:
    """
    A document in the `student` collection.

    Attributes:
        name: Display name.
        mail: E-mail address, stored under the field `email`.
        location: Referenced Location; only its id is stored, and saving a
            student never saves the location.
        hobbies: Ordered hobbies, embedded in the student document.
        id: Identifier, generated on construction unless given.
    """
    name: str
    mail: str
    location: Optional[Location] = None
    hobbies: tuple[Hobby, ...] = ()
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self):
        # accept any iterable (e.g. a list) but keep the record immutable
        object.__setattr__(self, "hobbies", tuple(self.hobbies))

    def __str__(self) -> str:
        hobbies = ", ".join(h.name for h in self.hobbies) or "-"
        return f"{self.name} <{self.mail}> | {self.location or 'no location'} | {hobbies}"
