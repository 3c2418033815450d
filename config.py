"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── MongoDB ───────────────────────────────────────────────
MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB_NAME: str = os.getenv("MONGO_DB_NAME", "test")
MONGO_SERVER_SELECTION_TIMEOUT_MS: int = int(
    os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "5000")
)

# ── Collections ───────────────────────────────────────────
LOCATION_COLLECTION: str = "location"
STUDENT_COLLECTION: str = "student"
SIMPLE_STUDENT_COLLECTION: str = "simpleStudent"

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
