"""
main.py
-------
Entry point for the student records demo.

Responsibilities:
    - Initialize the MongoDB client and the collections.
    - Build the repository context.
    - Store a location and a student, then run every student query.
"""

from config import MONGO_DB_NAME
from db.connection import close_client, init_client
from db.init_db import create_collections
from models.location import Location
from models.student import Hobby, Student
from repositories.context import RepositoryContext, build_context
from utils.logger import get_logger

logger = get_logger(__name__)


def run_demo(context: RepositoryContext) -> None:
    """Save a sample location and student and log the result of each query."""
    warsaw = context.locations.save(Location(city="Warsaw", postal_code="00-001"))
    alice = context.students.save(
        Student(
            name="Alice",
            mail="a@example.com",
            location=warsaw,
            hobbies=[Hobby("chess")],
        )
    )

    students = context.students
    queries = {
        "find_by_id": lambda: students.find_by_id(alice.id),
        "find_by_name": lambda: students.find_by_name("Alice"),
        "find_by_hobbies_contains": lambda: students.find_by_hobbies_contains(Hobby("chess")),
        "find_by_hobbies_name": lambda: students.find_by_hobbies_name("chess"),
        "find_by_hobbies_name_starts_with": lambda: students.find_by_hobbies_name_starts_with("ch"),
        "find_by_hobbies_name_like": lambda: students.find_by_hobbies_name_like("*ess"),
        "find_by_location_id": lambda: students.find_by_location_id(warsaw.id),
        "find_all_native": students.find_all_native,
        "find_by_name_native": lambda: students.find_by_name_native("Alice"),
    }
    for name, query in queries.items():
        result = query()
        if isinstance(result, list):
            logger.info(f"{name}: {len(result)} result(s)")
            for s in result:
                logger.info(f"  {s}")
        else:
            logger.info(f"{name}: {result}")

    logger.info(f"{context.locations.count()} location(s), {students.count()} student(s) stored.")


def main() -> None:
    """Initialize, run the demo and clean up."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing MongoDB...")
    client = init_client()
    create_collections(client[MONGO_DB_NAME])

    # ── 2. Repositories ───────────────────────────────────
    context = build_context(client)

    # ── 3. Demo ───────────────────────────────────────────
    try:
        run_demo(context)
    finally:
        # ── 4. Cleanup ────────────────────────────────────
        close_client()


if __name__ == "__main__":
    main()
