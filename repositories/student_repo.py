"""
repositories/student_repo.py
----------------------------
Data access layer for the `student` collection.
Every query here is a single `find`; results come back as Student records
with their location resolved.
"""

from models.mapping import STUDENT_MAPPING
from models.student import Student
from repositories.base_repo import MongoRepository
from repositories.query import derived_query, native_query


class StudentRepository(MongoRepository[Student]):
    """Repository for students, with name-derived and native queries."""

    mapping = STUDENT_MAPPING

    # ── Derived queries ───────────────────────────────────

    find_by_name = derived_query()
    # element equality against the embedded hobbies array
    find_by_hobbies_contains = derived_query()
    find_by_hobbies_name = derived_query()
    find_by_hobbies_name_starts_with = derived_query()
    # `*` wildcards at either end, unanchored otherwise
    find_by_hobbies_name_like = derived_query()
    # matches the stored reference, the location is not loaded
    find_by_location_id = derived_query()

    # ── Native queries ────────────────────────────────────

    find_all_native = native_query("{}")
    find_by_name_native = native_query('{ "name": "?0" }')
