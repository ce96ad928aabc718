import logging

from passlib.context import CryptContext
from pymongo.errors import DuplicateKeyError

from auth.constants import BCRYPT_ROUNDS
from auth.models import UserCreate
from common.exceptions import AuthError, ConflictError, NotFoundError
from common.helpers import to_object_id, utcnow

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS
)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def get_user_by_email(db, email: str):
    return db.users.find_one({"email": email.strip().lower()})


def get_user_by_id(db, user_id):
    user = db.users.find_one({"_id": to_object_id(user_id, "User not found")})
    if not user:
        raise NotFoundError("User not found")
    return user


def create_user(db, user: UserCreate) -> dict:
    if get_user_by_email(db, user.email):
        raise ConflictError("User already exists with this email")

    now = utcnow()
    document = {
        "name": user.name,
        "email": user.email,
        "password_hash": get_password_hash(user.password),
        "role": user.role.value,
        "registered_events": [],
        "created_events": [],
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = db.users.insert_one(document)
    except DuplicateKeyError:
        raise ConflictError("User already exists with this email")
    document["_id"] = result.inserted_id
    logger.info("Created %s account %s", document["role"], document["email"])
    return document


def authenticate(db, email: str, password: str) -> dict:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.get("password_hash")):
        logger.warning("Failed login for %s", email)
        raise AuthError("Invalid email or password")
    return user


def list_users(db) -> list:
    return list(db.users.find({}, {"password_hash": 0}).sort("created_at", -1))


def delete_user(db, user_id) -> dict:
    """Delete a user and release every event slot they occupied."""
    user = get_user_by_id(db, user_id)
    oid = user["_id"]

    # Each user appears at most once per event, so one decrement per match.
    db.events.update_many(
        {"registered_users.user": oid},
        {
            "$pull": {"registered_users": {"user": oid}},
            "$inc": {"registration_count": -1},
        },
    )
    db.users.delete_one({"_id": oid})
    logger.info("Deleted user %s", user["email"])
    return user


def users_by_id(db, ids) -> dict:
    """Fetch the users referenced by ``ids`` keyed by ObjectId."""
    ids = list(set(ids))
    if not ids:
        return {}
    return {
        u["_id"]: u
        for u in db.users.find({"_id": {"$in": ids}}, {"password_hash": 0})
    }
