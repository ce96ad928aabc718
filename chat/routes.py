from typing import Optional

from fastapi import APIRouter, Depends, status
from starlette.concurrency import run_in_threadpool

from common.auth_utils import get_current_user, get_optional_user
from common.database import get_mongo_db
from common.helpers import db_connection_handler, success

from . import crud, models
from .responder import respond

chat = APIRouter()


@chat.post("/start", status_code=status.HTTP_201_CREATED)
@db_connection_handler
async def start_chat(
    user: Optional[dict] = Depends(get_optional_user), db=Depends(get_mongo_db)
):
    document = crud.start_chat(db, user)
    return success(models.ConversationResponse.from_document(document))


@chat.post("/message")
@db_connection_handler
async def send_message(
    body: models.MessageCreate,
    user: Optional[dict] = Depends(get_optional_user),
    db=Depends(get_mongo_db),
):
    conversation = crud.ensure_conversation(db, body.conversation_id, user)
    # The generative API call blocks for up to its timeout.
    answer = await run_in_threadpool(respond, body.message, crud.event_sample(db))
    conversation = crud.append_exchange(db, conversation, body.message, answer)
    return success(models.ConversationResponse.from_document(conversation))


@chat.get("/history/{user_id}")
@db_connection_handler
async def get_chat_history(
    user_id: str, user: dict = Depends(get_current_user), db=Depends(get_mongo_db)
):
    chats = [
        models.ConversationResponse.from_document(c)
        for c in crud.chat_history(db, user_id, user)
    ]
    return success(chats, count=len(chats))


@chat.get("/{conversation_id}")
@db_connection_handler
async def get_conversation(conversation_id: str, db=Depends(get_mongo_db)):
    document = crud.get_conversation(db, conversation_id)
    return success(models.ConversationResponse.from_document(document))


@chat.delete("/{conversation_id}")
@db_connection_handler
async def delete_conversation(
    conversation_id: str,
    user: dict = Depends(get_current_user),
    db=Depends(get_mongo_db),
):
    crud.delete_conversation(db, conversation_id, user)
    return success(message="Conversation deleted successfully")
