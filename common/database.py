import logging
import os

from dotenv import load_dotenv
from pymongo import ASCENDING, DESCENDING, MongoClient

load_dotenv()

logger = logging.getLogger(__name__)

# NOTE: For local setup
# MONGODB_URL = "mongodb://localhost:27017"
# MONGODB_DATABASE = "college_events"

MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
MONGODB_DATABASE = os.getenv("MONGODB_DATABASE", "college_events")


def init_indexes(db):
    """Create the indexes every collection relies on."""
    db.users.create_index("email", unique=True)
    db.events.create_index([("date", ASCENDING)])
    db.events.create_index("registered_users.user")
    db.contacts.create_index([("status", ASCENDING), ("created_at", DESCENDING)])
    db.contacts.create_index("email")
    db.chats.create_index("conversation_id", unique=True)
    db.chats.create_index("user_id")


class MongoDBConnection:
    _instance = None

    def __new__(cls):
        # Use the singleton pattern to ensure only one instance
        if cls._instance is None:
            instance = super().__new__(cls)
            try:
                instance.client = MongoClient(MONGODB_URL)
                instance.db = instance.client[MONGODB_DATABASE]
                init_indexes(instance.db)
                logger.info("MongoDB connection established: %s", MONGODB_DATABASE)
            except Exception:
                logger.exception("MongoDB connection failed")
                raise
            cls._instance = instance
        return cls._instance

    @classmethod
    def close(cls):
        """Close the MongoDB connection if one was opened."""
        if cls._instance is None:
            return
        try:
            cls._instance.client.close()
            logger.info("MongoDB connection closed")
        finally:
            cls._instance = None


def get_mongo_db():
    """Provide the MongoDB database to FastAPI routes."""
    return MongoDBConnection().db
