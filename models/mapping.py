"""
models/mapping.py
-----------------
Explicit object <-> document mapping.

Every entity has a field table (attribute name -> storage field name and
kind) and a pair of hand-written functions that turn a record into a
MongoDB document and back. The field tables are also what the derived
query compiler in repositories/query.py resolves method names against.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional
from uuid import UUID

from config import LOCATION_COLLECTION, SIMPLE_STUDENT_COLLECTION, STUDENT_COLLECTION
from models.location import Location
from models.simple_student import SimpleStudent
from models.student import Hobby, Student

# Field kinds
ID = "id"
VALUE = "value"
EMBEDDED_LIST = "embedded_list"
REFERENCE = "reference"

# Resolves a stored reference: (target mapping, stored id) -> entity or None
Dereference = Callable[["EntityMapping", Any], Any]


@dataclass(frozen=True)
class FieldMapping:
    """One attribute of an entity and where it lives in the document."""
    attribute: str
    storage: str
    kind: str = VALUE
    target: Optional["EntityMapping"] = None  # element type / referenced entity


@dataclass(frozen=True)
class EntityMapping:
    """How one entity type is laid out in the store."""
    entity_type: type
    collection: Optional[str]  # None for embedded values
    fields: tuple[FieldMapping, ...]
    to_document: Callable[[Any], dict]
    from_document: Callable[[dict, Optional[Dereference]], Any]

    def field(self, attribute: str) -> Optional[FieldMapping]:
        """Look up a field by its attribute name."""
        for f in self.fields:
            if f.attribute == attribute:
                return f
        return None

    def storage_name(self, attribute: str) -> str:
        f = self.field(attribute)
        if f is None:
            raise KeyError(f"{self.entity_type.__name__} has no attribute '{attribute}'")
        return f.storage

    @property
    def id_field(self) -> FieldMapping:
        return next(f for f in self.fields if f.kind == ID)


# ── Value encoding ────────────────────────────────────────

def encode_id(value: UUID | str) -> str:
    """Identifiers are stored in canonical UUID string form."""
    return str(UUID(str(value)))


def decode_id(value: str) -> UUID:
    return UUID(str(value))


def encode_value(value: Any) -> Any:
    """
    Encode a query argument the same way the record holding it is stored.

    UUIDs become strings, embedded values become sub-documents and
    referenced entities collapse to their identifier.
    """
    if isinstance(value, UUID):
        return encode_id(value)
    if isinstance(value, Hobby):
        return hobby_to_document(value)
    if isinstance(value, (Location, Student, SimpleStudent)):
        return encode_id(value.id)
    if isinstance(value, (list, tuple, set, frozenset)):
        return [encode_value(v) for v in value]
    return value


# ── Hobby (embedded) ──────────────────────────────────────

HOBBY_FIELDS = {"name": "name"}


def hobby_to_document(hobby: Hobby) -> dict:
    return {HOBBY_FIELDS["name"]: hobby.name}


def hobby_from_document(doc: dict, dereference: Optional[Dereference] = None) -> Hobby:
    return Hobby(name=doc.get(HOBBY_FIELDS["name"]))


HOBBY_MAPPING = EntityMapping(
    entity_type=Hobby,
    collection=None,
    fields=(FieldMapping("name", HOBBY_FIELDS["name"]),),
    to_document=hobby_to_document,
    from_document=hobby_from_document,
)


# ── Location ──────────────────────────────────────────────

LOCATION_FIELDS = {"id": "_id", "city": "city", "postal_code": "postalCode"}


def location_to_document(location: Location) -> dict:
    return {
        LOCATION_FIELDS["id"]: encode_id(location.id),
        LOCATION_FIELDS["city"]: location.city,
        LOCATION_FIELDS["postal_code"]: location.postal_code,
    }


def location_from_document(doc: dict, dereference: Optional[Dereference] = None) -> Location:
    return Location(
        id=decode_id(doc[LOCATION_FIELDS["id"]]),
        city=doc.get(LOCATION_FIELDS["city"]),
        postal_code=doc.get(LOCATION_FIELDS["postal_code"]),
    )


LOCATION_MAPPING = EntityMapping(
    entity_type=Location,
    collection=LOCATION_COLLECTION,
    fields=(
        FieldMapping("id", LOCATION_FIELDS["id"], ID),
        FieldMapping("city", LOCATION_FIELDS["city"]),
        FieldMapping("postal_code", LOCATION_FIELDS["postal_code"]),
    ),
    to_document=location_to_document,
    from_document=location_from_document,
)


# ── Student ───────────────────────────────────────────────

STUDENT_FIELDS = {
    "id": "_id",
    "name": "name",
    "mail": "email",
    "location": "location",
    "hobbies": "hobbies",
}


def student_to_document(student: Student) -> dict:
    """
    Build the stored form of a student.
    The location is written as its identifier only (never cascaded).
    """
    return {
        STUDENT_FIELDS["id"]: encode_id(student.id),
        STUDENT_FIELDS["name"]: student.name,
        STUDENT_FIELDS["mail"]: student.mail,
        STUDENT_FIELDS["location"]: (
            encode_id(student.location.id) if student.location is not None else None
        ),
        STUDENT_FIELDS["hobbies"]: [hobby_to_document(h) for h in student.hobbies],
    }


def student_from_document(doc: dict, dereference: Optional[Dereference] = None) -> Student:
    """
    Rebuild a student, resolving its location reference through `dereference`.
    Without a dereference callback, or for a dangling reference, location is None.
    """
    location_id = doc.get(STUDENT_FIELDS["location"])
    location = None
    if location_id is not None and dereference is not None:
        location = dereference(LOCATION_MAPPING, location_id)
    return Student(
        id=decode_id(doc[STUDENT_FIELDS["id"]]),
        name=doc.get(STUDENT_FIELDS["name"]),
        mail=doc.get(STUDENT_FIELDS["mail"]),
        location=location,
        hobbies=tuple(hobby_from_document(h) for h in doc.get(STUDENT_FIELDS["hobbies"]) or []),
    )


STUDENT_MAPPING = EntityMapping(
    entity_type=Student,
    collection=STUDENT_COLLECTION,
    fields=(
        FieldMapping("id", STUDENT_FIELDS["id"], ID),
        FieldMapping("name", STUDENT_FIELDS["name"]),
        FieldMapping("mail", STUDENT_FIELDS["mail"]),
        FieldMapping("location", STUDENT_FIELDS["location"], REFERENCE, LOCATION_MAPPING),
        FieldMapping("hobbies", STUDENT_FIELDS["hobbies"], EMBEDDED_LIST, HOBBY_MAPPING),
    ),
    to_document=student_to_document,
    from_document=student_from_document,
)


# ── SimpleStudent ─────────────────────────────────────────

SIMPLE_STUDENT_FIELDS = {"id": "_id", "name": "name", "mail": "email"}


def simple_student_to_document(student: SimpleStudent) -> dict:
    return {
        SIMPLE_STUDENT_FIELDS["id"]: encode_id(student.id),
        SIMPLE_STUDENT_FIELDS["name"]: student.name,
        SIMPLE_STUDENT_FIELDS["mail"]: student.mail,
    }


def simple_student_from_document(doc: dict, dereference: Optional[Dereference] = None) -> SimpleStudent:
    return SimpleStudent(
        id=decode_id(doc[SIMPLE_STUDENT_FIELDS["id"]]),
        name=doc.get(SIMPLE_STUDENT_FIELDS["name"]),
        mail=doc.get(SIMPLE_STUDENT_FIELDS["mail"]),
    )


SIMPLE_STUDENT_MAPPING = EntityMapping(
    entity_type=SimpleStudent,
    collection=SIMPLE_STUDENT_COLLECTION,
    fields=(
        FieldMapping("id", SIMPLE_STUDENT_FIELDS["id"], ID),
        FieldMapping("name", SIMPLE_STUDENT_FIELDS["name"]),
        FieldMapping("mail", SIMPLE_STUDENT_FIELDS["mail"]),
    ),
    to_document=simple_student_to_document,
    from_document=simple_student_from_document,
)
