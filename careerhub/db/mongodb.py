"""
MongoDB Connection Utility

MongoDB stores:
- Archived AI interview analyses (transcript + raw model output)

WHY MongoDB for these?
- Schema-flexible: model outputs vary in structure between prompt revisions
- Document-oriented: each analysis run is self-contained
- Kept out of the relational store, which only holds the validated scores
"""
import logging

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.collection import Collection

from careerhub.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=5000)
    return _client


def get_mongo_db() -> Database:
    """Get the careerhub_docs database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    db = get_mongo_db()
    return db[name]


def check_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "interview_analyses": "interview_analyses",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # Lookups are always by interview, newest first
    db[COLLECTIONS["interview_analyses"]].create_index([
        ("interview_id", 1),
        ("created_at", -1)
    ])

    logger.info("MongoDB indexes created")
