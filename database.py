"""
MongoDB access.

The client is created on first use so importing the application does not open
a connection. Handlers receive the database through :func:`get_db`, which the
tests override with an in-memory database.
"""

import logging
from typing import Optional

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from config import settings

logger = logging.getLogger(__name__)

USERS = "users"
COLLEGES = "colleges"
ADMISSIONS = "admissions"
GRADUATES = "graduates"
RESEARCH = "research"

_client: Optional[MongoClient] = None


def get_client() -> MongoClient:
    global _client
    if _client is None:
        logger.info("Connecting to MongoDB database %s", settings.database_name)
        _client = MongoClient(settings.database_url, serverSelectionTimeoutMS=5000)
    return _client


def get_db() -> Database:
    return get_client()[settings.database_name]


def ensure_indexes(db: Database) -> None:
    """Create the uniqueness constraints the handlers rely on."""
    db[USERS].create_index([("email", ASCENDING)], unique=True)
    db[ADMISSIONS].create_index(
        [("student_email", ASCENDING), ("college_id", ASCENDING)], unique=True
    )


def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
