from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, constr


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class MessageCreate(BaseModel):
    conversation_id: constr(strip_whitespace=True, min_length=1)
    message: constr(strip_whitespace=True, min_length=1)


class ChatMessage(BaseModel):
    role: MessageRole
    content: str
    timestamp: datetime


class ConversationResponse(BaseModel):
    conversation_id: str
    title: str
    messages: List[ChatMessage]
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, chat: dict) -> "ConversationResponse":
        return cls(
            conversation_id=chat["conversation_id"],
            title=chat["title"],
            messages=chat.get("messages", []),
            user_id=str(chat["user_id"]) if chat.get("user_id") else None,
            created_at=chat.get("created_at"),
            updated_at=chat.get("updated_at"),
        )
