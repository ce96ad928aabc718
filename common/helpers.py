import logging
from datetime import datetime, timezone
from functools import wraps

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import PyMongoError

from common.exceptions import NotFoundError, ServerError

logger = logging.getLogger(__name__)


def db_connection_handler(func):
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except PyMongoError:
            logger.exception("MongoDB error in %s", func.__name__)
            raise ServerError("Database operation failed")

    return wrapper


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value, message: str = "Resource not found") -> ObjectId:
    """Parse a path id; malformed ids are reported as missing resources."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundError(message)


def success(data=None, message: str = None, **extra) -> dict:
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def as_utc(value: datetime) -> datetime:
    """Stored datetimes come back naive; they are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
