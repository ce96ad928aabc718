from typing import Optional

from fastapi import APIRouter, Body, Depends, status

from auth.constants import Action
from auth.crud import users_by_id
from common.auth_utils import get_current_user, require
from common.database import get_mongo_db
from common.helpers import db_connection_handler, success

from . import crud, models

event = APIRouter()


def _populated(db, event_doc: dict, with_roles: bool = False) -> models.EventResponse:
    ids = [event_doc["created_by"]]
    ids += [entry["user"] for entry in event_doc.get("registered_users", [])]
    return models.EventResponse.from_document(
        event_doc, users_by_id(db, ids), with_roles=with_roles
    )


@event.get("")
@db_connection_handler
async def read_events(
    category: Optional[str] = None,
    search: Optional[str] = None,
    db=Depends(get_mongo_db),
):
    """List events, optionally filtered by category and a search term."""
    events = crud.list_events(
        db,
        category.strip() if category else None,
        search.strip() if search else None,
    )
    creators = users_by_id(db, [e["created_by"] for e in events])
    data = [models.EventResponse.from_document(e, creators) for e in events]
    return success(data, count=len(data))


@event.get("/me/registered")
@db_connection_handler
async def read_my_registered_events(
    user: dict = Depends(get_current_user), db=Depends(get_mongo_db)
):
    """Events the caller is registered for, read from the events themselves."""
    events = crud.registered_events_for(db, user)
    data = [models.EventResponse.from_document(e) for e in events]
    return success(data, count=len(data))


@event.get("/{event_id}")
@db_connection_handler
async def read_event(event_id: str, db=Depends(get_mongo_db)):
    event_doc = crud.get_event(db, event_id)
    return success(_populated(db, event_doc, with_roles=True))


@event.post("", status_code=status.HTTP_201_CREATED)
@db_connection_handler
async def create_event(
    event_in: models.EventCreate,
    user: dict = Depends(require(Action.CREATE_EVENT)),
    db=Depends(get_mongo_db),
):
    event_doc = crud.create_event(db, event_in, user)
    return success(_populated(db, event_doc), "Event created successfully")


@event.put("/{event_id}")
@db_connection_handler
async def update_event(
    event_id: str,
    patch: models.EventUpdate,
    user: dict = Depends(require(Action.UPDATE_EVENT)),
    db=Depends(get_mongo_db),
):
    event_doc = crud.update_event(db, event_id, patch, user)
    return success(_populated(db, event_doc), "Event updated successfully")


@event.delete("/{event_id}")
@db_connection_handler
async def delete_event(
    event_id: str,
    _admin: dict = Depends(require(Action.DELETE_EVENT)),
    db=Depends(get_mongo_db),
):
    crud.delete_event(db, event_id)
    return success(message="Event deleted successfully")


@event.post("/{event_id}/register")
@db_connection_handler
async def register_for_event(
    event_id: str,
    details: Optional[models.RegistrationDetails] = Body(default=None),
    user: dict = Depends(require(Action.REGISTER_EVENT)),
    db=Depends(get_mongo_db),
):
    event_doc = crud.register_for_event(db, event_id, user, details)
    return success(_populated(db, event_doc), "Successfully registered for event")


@event.post("/{event_id}/unregister")
@db_connection_handler
async def unregister_from_event(
    event_id: str,
    user: dict = Depends(require(Action.UNREGISTER_EVENT)),
    db=Depends(get_mongo_db),
):
    crud.unregister_from_event(db, event_id, user)
    return success(message="Successfully unregistered from event")
