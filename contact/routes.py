from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from auth.constants import Action
from auth.crud import users_by_id
from common.auth_utils import get_optional_user, require
from common.database import get_mongo_db
from common.helpers import db_connection_handler, success
from contact.constants import DEFAULT_PAGE_SIZE, ContactStatus

from . import crud, models

contact = APIRouter()

admin_only = require(Action.MANAGE_CONTACTS)


def _populated(db, contacts):
    ids = []
    for c in contacts:
        ids += [uid for uid in (c.get("user_id"), c.get("responded_by")) if uid]
    users = users_by_id(db, ids)
    return [models.ContactResponse.from_document(c, users) for c in contacts]


@contact.post("", status_code=status.HTTP_201_CREATED)
@db_connection_handler
async def submit_contact(
    message: models.ContactCreate,
    user: Optional[dict] = Depends(get_optional_user),
    db=Depends(get_mongo_db),
):
    document = crud.submit_contact(db, message, user)
    return success(
        models.ContactResponse.from_document(document),
        "Your message has been sent successfully. We will respond within 24 hours.",
    )


@contact.get("")
@db_connection_handler
async def get_all_contacts(
    status_filter: Optional[ContactStatus] = Query(None, alias="status"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=200),
    page: int = Query(1, ge=1),
    _admin: dict = Depends(admin_only),
    db=Depends(get_mongo_db),
):
    contacts, pagination = crud.list_contacts(
        db, status_filter.value if status_filter else None, limit, page
    )
    return success(_populated(db, contacts), pagination=pagination)


@contact.get("/stats")
@db_connection_handler
async def get_contact_stats(_admin: dict = Depends(admin_only), db=Depends(get_mongo_db)):
    return success(crud.contact_stats(db))


@contact.get("/{contact_id}")
@db_connection_handler
async def get_contact(
    contact_id: str, _admin: dict = Depends(admin_only), db=Depends(get_mongo_db)
):
    return success(_populated(db, [crud.get_contact(db, contact_id)])[0])


@contact.put("/{contact_id}")
@db_connection_handler
async def update_contact(
    contact_id: str,
    update: models.ContactUpdate,
    admin: dict = Depends(admin_only),
    db=Depends(get_mongo_db),
):
    document = crud.update_contact(db, contact_id, update, admin)
    return success(_populated(db, [document])[0], "Contact message updated successfully")


@contact.delete("/{contact_id}")
@db_connection_handler
async def delete_contact(
    contact_id: str, _admin: dict = Depends(admin_only), db=Depends(get_mongo_db)
):
    crud.delete_contact(db, contact_id)
    return success(message="Contact message deleted successfully")
