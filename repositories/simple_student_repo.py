"""
repositories/simple_student_repo.py
-----------------------------------
Data access layer for the `simpleStudent` collection.
"""

from models.mapping import SIMPLE_STUDENT_MAPPING
from models.simple_student import SimpleStudent
from repositories.base_repo import MongoRepository


class SimpleStudentRepository(MongoRepository[SimpleStudent]):
    mapping = SIMPLE_STUDENT_MAPPING
