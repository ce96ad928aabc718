import logging
import math
from typing import Optional

from pymongo import DESCENDING

from contact.constants import ContactStatus
from contact.models import ContactCreate, ContactUpdate
from common.exceptions import NotFoundError
from common.helpers import to_object_id, utcnow

logger = logging.getLogger(__name__)


def submit_contact(db, contact: ContactCreate, user: Optional[dict] = None) -> dict:
    now = utcnow()
    document = contact.model_dump(mode="json")
    document.update(
        {
            "status": ContactStatus.PENDING.value,
            "response": None,
            "responded_by": None,
            "responded_at": None,
            "user_id": user["_id"] if user else None,
            "created_at": now,
            "updated_at": now,
        }
    )
    result = db.contacts.insert_one(document)
    document["_id"] = result.inserted_id
    logger.info("Contact message %s submitted (%s)", document["_id"], document["issue_type"])
    return document


def get_contact(db, contact_id) -> dict:
    contact = db.contacts.find_one(
        {"_id": to_object_id(contact_id, "Contact message not found")}
    )
    if not contact:
        raise NotFoundError("Contact message not found")
    return contact


def list_contacts(db, status: Optional[str] = None, limit: int = 50, page: int = 1):
    """Return one page of messages, newest first, with pagination info."""
    query = {"status": status} if status else {}
    contacts = list(
        db.contacts.find(query)
        .sort("created_at", DESCENDING)
        .skip((page - 1) * limit)
        .limit(limit)
    )
    total = db.contacts.count_documents(query)
    pagination = {"total": total, "page": page, "pages": math.ceil(total / limit)}
    return contacts, pagination


def update_contact(db, contact_id, update: ContactUpdate, admin: dict) -> dict:
    contact = get_contact(db, contact_id)
    changes = {"updated_at": utcnow()}
    if update.status:
        changes["status"] = update.status.value
    if update.response:
        changes["response"] = update.response
        changes["responded_by"] = admin["_id"]
        changes["responded_at"] = utcnow()
    db.contacts.update_one({"_id": contact["_id"]}, {"$set": changes})
    return get_contact(db, contact["_id"])


def delete_contact(db, contact_id) -> dict:
    contact = get_contact(db, contact_id)
    db.contacts.delete_one({"_id": contact["_id"]})
    return contact


def contact_stats(db) -> dict:
    by_status = {
        s.value.replace("-", "_"): db.contacts.count_documents({"status": s.value})
        for s in ContactStatus
    }
    grouped = db.contacts.aggregate(
        [{"$group": {"_id": "$issue_type", "count": {"$sum": 1}}}]
    )
    return {
        "total": db.contacts.count_documents({}),
        "by_status": by_status,
        "by_issue_type": {item["_id"]: item["count"] for item in grouped},
    }
