from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, constr, field_validator

from auth.constants import Role


class UserBase(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=50)
    email: EmailStr
    role: Role = Role.STUDENT

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserCreate(UserBase):
    password: constr(min_length=6)


class UserLogin(BaseModel):
    email: str
    password: str


class UserResponse(UserBase):
    id: str
    registered_events: List[str] = []
    created_events: List[str] = []
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, user: dict) -> "UserResponse":
        return cls(
            id=str(user["_id"]),
            name=user["name"],
            email=user["email"],
            role=user["role"],
            registered_events=[str(e) for e in user.get("registered_events", [])],
            created_events=[str(e) for e in user.get("created_events", [])],
            created_at=user.get("created_at"),
        )


class UserSummary(BaseModel):
    id: str
    name: str
    email: str
    role: Optional[Role] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
