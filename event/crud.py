import logging
import re
from typing import Optional

from pymongo import ASCENDING

from auth.constants import Role
from event.constants import (
    DEFAULT_CAPACITY,
    DEFAULT_COLLEGE,
    DEFAULT_IMAGE,
    REGISTRATION_ATTEMPTS,
)
from event.models import EventCreate, EventUpdate, RegistrationDetails
from common.exceptions import (
    CapacityError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from common.helpers import to_object_id, utcnow

logger = logging.getLogger(__name__)


def _find_event(db, event_oid):
    event = db.events.find_one({"_id": event_oid})
    if not event:
        raise NotFoundError("Event not found")
    return event


def _is_registered(event: dict, user_oid) -> bool:
    return any(entry["user"] == user_oid for entry in event.get("registered_users", []))


def get_event(db, event_id) -> dict:
    return _find_event(db, to_object_id(event_id, "Event not found"))


def list_events(db, category: Optional[str] = None, search: Optional[str] = None):
    query = {}
    if category:
        query["category"] = category
    if search:
        pattern = re.escape(search)
        query["$or"] = [
            {"title": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]
    return list(db.events.find(query).sort("date", ASCENDING))


def create_event(db, event: EventCreate, creator: dict) -> dict:
    now = utcnow()
    document = event.model_dump()
    document.update(
        {
            "category": event.category.value,
            "status": event.status.value,
            "college": event.college or DEFAULT_COLLEGE,
            "organizer": event.organizer or creator["name"],
            "capacity": event.capacity or DEFAULT_CAPACITY,
            "image": event.image or DEFAULT_IMAGE,
            "created_by": creator["_id"],
            "registered_users": [],
            "registration_count": 0,
            "created_at": now,
            "updated_at": now,
        }
    )
    result = db.events.insert_one(document)
    document["_id"] = result.inserted_id

    db.users.update_one(
        {"_id": creator["_id"]}, {"$push": {"created_events": document["_id"]}}
    )
    logger.info("Event %s created by %s", document["_id"], creator["email"])
    return document


def update_event(db, event_id, patch: EventUpdate, requester: dict) -> dict:
    event = get_event(db, event_id)
    if event["created_by"] != requester["_id"] and requester["role"] != Role.ADMIN:
        raise ForbiddenError("Not authorized to update this event")

    changes = patch.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    # Dates are stored as BSON datetimes, not ISO strings.
    if patch.date is not None:
        changes["date"] = patch.date
    changes["updated_at"] = utcnow()
    db.events.update_one({"_id": event["_id"]}, {"$set": changes})
    return _find_event(db, event["_id"])


def delete_event(db, event_id) -> dict:
    event = get_event(db, event_id)
    oid = event["_id"]

    db.users.update_many(
        {"registered_events": oid}, {"$pull": {"registered_events": oid}}
    )
    db.users.update_one({"_id": event["created_by"]}, {"$pull": {"created_events": oid}})
    db.events.delete_one({"_id": oid})
    logger.info("Event %s deleted", oid)
    return event


def _claim_slot(db, event: dict, entry: dict) -> bool:
    """Append ``entry`` only if the event is unchanged enough to admit it.

    The filter re-checks duplicate and capacity inside the same single
    document update, so two racing registrations cannot both take the last
    slot.
    """
    capacity = event["capacity"]
    result = db.events.update_one(
        {
            "_id": event["_id"],
            "capacity": capacity,
            "registration_count": {"$lt": capacity},
            "registered_users.user": {"$ne": entry["user"]},
        },
        {
            "$push": {"registered_users": entry},
            "$inc": {"registration_count": 1},
            "$set": {"updated_at": utcnow()},
        },
    )
    return result.modified_count == 1


def _release_slot(db, event: dict, user_oid) -> bool:
    result = db.events.update_one(
        {"_id": event["_id"], "registered_users.user": user_oid},
        {
            "$pull": {"registered_users": {"user": user_oid}},
            "$inc": {"registration_count": -1},
            "$set": {"updated_at": utcnow()},
        },
    )
    return result.modified_count == 1


def register_for_event(
    db, event_id, user: dict, details: Optional[RegistrationDetails] = None
) -> dict:
    event_oid = to_object_id(event_id, "Event not found")
    user_oid = user["_id"]
    entry = {"user": user_oid, "registered_at": utcnow()}
    entry.update((details or RegistrationDetails()).model_dump())

    for _ in range(REGISTRATION_ATTEMPTS):
        event = _find_event(db, event_oid)
        if _is_registered(event, user_oid):
            raise ConflictError("You are already registered for this event")
        if len(event.get("registered_users", [])) >= event["capacity"]:
            raise CapacityError("Event is full")
        if _claim_slot(db, event, entry):
            break
        logger.info("Registration for %s lost a race, retrying", event_oid)
    else:
        raise CapacityError("Event is full")

    # Denormalized back-reference; the event's list stays authoritative.
    db.users.update_one({"_id": user_oid}, {"$addToSet": {"registered_events": event_oid}})
    logger.info("User %s registered for event %s", user["email"], event_oid)
    return _find_event(db, event_oid)


def unregister_from_event(db, event_id, user: dict) -> dict:
    event_oid = to_object_id(event_id, "Event not found")
    user_oid = user["_id"]

    event = _find_event(db, event_oid)
    if not _is_registered(event, user_oid) or not _release_slot(db, event, user_oid):
        raise ConflictError("You are not registered for this event")

    db.users.update_one({"_id": user_oid}, {"$pull": {"registered_events": event_oid}})
    logger.info("User %s unregistered from event %s", user["email"], event_oid)
    return _find_event(db, event_oid)


def registered_events_for(db, user: dict) -> list:
    return list(
        db.events.find({"registered_users.user": user["_id"]}).sort("date", ASCENDING)
    )
