from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, conint, constr

from auth.models import UserSummary
from event.constants import EventCategory, EventStatus


class EventCreate(BaseModel):
    title: constr(strip_whitespace=True, min_length=1, max_length=100)
    description: constr(min_length=1, max_length=1000)
    category: EventCategory
    date: datetime
    time: constr(strip_whitespace=True, min_length=1)
    venue: constr(strip_whitespace=True, min_length=1)
    college: Optional[constr(strip_whitespace=True)] = None
    organizer: Optional[constr(strip_whitespace=True)] = None
    capacity: Optional[conint(ge=1)] = None
    image: Optional[str] = None
    status: EventStatus = EventStatus.UPCOMING


class EventUpdate(BaseModel):
    title: Optional[constr(strip_whitespace=True, min_length=1, max_length=100)] = None
    description: Optional[constr(min_length=1, max_length=1000)] = None
    category: Optional[EventCategory] = None
    date: Optional[datetime] = None
    time: Optional[constr(strip_whitespace=True, min_length=1)] = None
    venue: Optional[constr(strip_whitespace=True, min_length=1)] = None
    college: Optional[constr(strip_whitespace=True, min_length=1)] = None
    organizer: Optional[constr(strip_whitespace=True, min_length=1)] = None
    capacity: Optional[conint(ge=1)] = None
    image: Optional[str] = None
    status: Optional[EventStatus] = None


class RegistrationDetails(BaseModel):
    phone: str = ""
    college: str = ""
    year_of_study: str = ""
    department: str = ""
    special_requirements: str = ""


class RegistrantResponse(RegistrationDetails):
    user: Union[UserSummary, str]
    registered_at: datetime


class EventResponse(BaseModel):
    id: str
    title: str
    description: str
    category: EventCategory
    date: datetime
    time: str
    venue: str
    college: str
    organizer: str
    capacity: int
    image: str
    status: EventStatus
    created_by: Union[UserSummary, str]
    registered_users: List[RegistrantResponse] = []
    registration_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(
        cls, event: dict, users: Optional[Dict] = None, with_roles: bool = False
    ) -> "EventResponse":
        """Build a response, resolving user ids through ``users`` when given."""
        users = users or {}

        def resolve(user_id, role=False):
            user = users.get(user_id)
            if not user:
                return str(user_id)
            return UserSummary(
                id=str(user["_id"]),
                name=user["name"],
                email=user["email"],
                role=user["role"] if role else None,
            )

        registrants = [
            RegistrantResponse(
                user=resolve(entry["user"]),
                registered_at=entry["registered_at"],
                phone=entry.get("phone", ""),
                college=entry.get("college", ""),
                year_of_study=entry.get("year_of_study", ""),
                department=entry.get("department", ""),
                special_requirements=entry.get("special_requirements", ""),
            )
            for entry in event.get("registered_users", [])
        ]
        return cls(
            id=str(event["_id"]),
            title=event["title"],
            description=event["description"],
            category=event["category"],
            date=event["date"],
            time=event["time"],
            venue=event["venue"],
            college=event["college"],
            organizer=event["organizer"],
            capacity=event["capacity"],
            image=event["image"],
            status=event["status"],
            created_by=resolve(event["created_by"], role=with_roles),
            registered_users=registrants,
            registration_count=event.get("registration_count", len(registrants)),
            created_at=event.get("created_at"),
            updated_at=event.get("updated_at"),
        )
