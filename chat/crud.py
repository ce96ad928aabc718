import logging
import time
import uuid
from typing import Optional

from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

from auth.constants import Role
from chat.constants import DEFAULT_TITLE, GREETING, TITLE_LENGTH
from chat.models import MessageRole
from common.exceptions import ForbiddenError, NotFoundError
from common.helpers import to_object_id, utcnow

logger = logging.getLogger(__name__)

EVENT_FIELDS = {
    "title": 1,
    "category": 1,
    "date": 1,
    "time": 1,
    "venue": 1,
    "college": 1,
    "capacity": 1,
    "registration_count": 1,
}


def new_conversation_id() -> str:
    return f"chat_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def title_from(message: str) -> str:
    if len(message) > TITLE_LENGTH:
        return message[:TITLE_LENGTH] + "..."
    return message


def _message(role: MessageRole, content: str) -> dict:
    return {"role": role.value, "content": content, "timestamp": utcnow()}


def event_sample(db) -> list:
    """Events the responder reasons over, soonest first."""
    return list(db.events.find({}, EVENT_FIELDS).sort("date", ASCENDING))


def start_chat(db, user: Optional[dict] = None) -> dict:
    now = utcnow()
    document = {
        "conversation_id": new_conversation_id(),
        "user_id": user["_id"] if user else None,
        "title": DEFAULT_TITLE,
        "messages": [_message(MessageRole.ASSISTANT, GREETING)],
        "created_at": now,
        "updated_at": now,
    }
    result = db.chats.insert_one(document)
    document["_id"] = result.inserted_id
    return document


def get_conversation(db, conversation_id: str) -> dict:
    chat = db.chats.find_one({"conversation_id": conversation_id})
    if not chat:
        raise NotFoundError("Conversation not found")
    return chat


def ensure_conversation(db, conversation_id: str, user: Optional[dict] = None) -> dict:
    """Fetch a conversation, creating an empty one for unknown ids."""
    chat = db.chats.find_one({"conversation_id": conversation_id})
    if chat:
        return chat
    now = utcnow()
    document = {
        "conversation_id": conversation_id,
        "user_id": user["_id"] if user else None,
        "title": DEFAULT_TITLE,
        "messages": [],
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = db.chats.insert_one(document)
    except DuplicateKeyError:
        # Another request created it between the lookup and the insert.
        return get_conversation(db, conversation_id)
    document["_id"] = result.inserted_id
    return document


def append_exchange(db, chat: dict, question: str, answer: str) -> dict:
    changes = {"updated_at": utcnow()}
    if chat["title"] == DEFAULT_TITLE:
        changes["title"] = title_from(question)
    db.chats.update_one(
        {"_id": chat["_id"]},
        {
            "$push": {
                "messages": {
                    "$each": [
                        _message(MessageRole.USER, question),
                        _message(MessageRole.ASSISTANT, answer),
                    ]
                }
            },
            "$set": changes,
        },
    )
    return get_conversation(db, chat["conversation_id"])


def delete_conversation(db, conversation_id: str, user: dict) -> None:
    chat = get_conversation(db, conversation_id)
    if chat.get("user_id") and chat["user_id"] != user["_id"]:
        raise ForbiddenError("Not authorized to delete this conversation")
    db.chats.delete_one({"_id": chat["_id"]})
    logger.info("Conversation %s deleted", conversation_id)


def chat_history(db, user_id: str, requester: dict) -> list:
    owner = to_object_id(user_id, "User not found")
    if owner != requester["_id"] and requester["role"] != Role.ADMIN:
        raise ForbiddenError("Not authorized to view this chat history")
    return list(db.chats.find({"user_id": owner}).sort("updated_at", DESCENDING))
