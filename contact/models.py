from datetime import datetime
from typing import Dict, Optional, Union

from pydantic import BaseModel, EmailStr, constr, field_validator

from auth.models import UserSummary
from contact.constants import ContactStatus, IssueType


class ContactCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1)
    email: EmailStr
    issue_type: IssueType
    subject: constr(strip_whitespace=True, min_length=1)
    message: constr(strip_whitespace=True, min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class ContactUpdate(BaseModel):
    status: Optional[ContactStatus] = None
    response: Optional[constr(strip_whitespace=True, min_length=1)] = None


class ContactResponse(BaseModel):
    id: str
    name: str
    email: str
    issue_type: IssueType
    subject: str
    message: str
    status: ContactStatus
    response: Optional[str] = None
    responded_by: Optional[Union[UserSummary, str]] = None
    responded_at: Optional[datetime] = None
    user_id: Optional[Union[UserSummary, str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, contact: dict, users: Optional[Dict] = None):
        users = users or {}

        def resolve(user_id, role=False):
            if user_id is None:
                return None
            user = users.get(user_id)
            if not user:
                return str(user_id)
            return UserSummary(
                id=str(user["_id"]),
                name=user["name"],
                email=user["email"],
                role=user["role"] if role else None,
            )

        return cls(
            id=str(contact["_id"]),
            name=contact["name"],
            email=contact["email"],
            issue_type=contact["issue_type"],
            subject=contact["subject"],
            message=contact["message"],
            status=contact["status"],
            response=contact.get("response"),
            responded_by=resolve(contact.get("responded_by")),
            responded_at=contact.get("responded_at"),
            user_id=resolve(contact.get("user_id"), role=True),
            created_at=contact.get("created_at"),
            updated_at=contact.get("updated_at"),
        )
