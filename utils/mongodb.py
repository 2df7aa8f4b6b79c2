import logging
from bson import ObjectId
from pymongo import MongoClient

from config.settings import Config

logger = logging.getLogger(__name__)

_client = None
_db = None


def get_db():
    """Return the database instance, connecting on first use."""
    global _client, _db
    if _db is None:
        try:
            _client = MongoClient(Config.MONGO_URI)
            _db = _client[Config.DB_NAME]
            logger.info(f"Connected to MongoDB database: {Config.DB_NAME}")
        except Exception as e:
            logger.error("Failed to connect to MongoDB", exc_info=True)
            raise e
    return _db


def set_db(db):
    """Point every service at another database handle (used by tests)."""
    global _db
    _db = db


def to_object_id(value):
    """Parse a string id, returning None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    if value and ObjectId.is_valid(str(value)):
        return ObjectId(str(value))
    return None
