import os
from enum import Enum

from dotenv import load_dotenv

load_dotenv()


class Role(str, Enum):
    STUDENT = "student"
    EVENT_MEMBER = "event-member"
    ADMIN = "admin"

    @classmethod
    def values(cls) -> list[str]:
        return [role.value for role in cls]


class Action(str, Enum):
    CREATE_EVENT = "create_event"
    UPDATE_EVENT = "update_event"
    DELETE_EVENT = "delete_event"
    REGISTER_EVENT = "register_event"
    UNREGISTER_EVENT = "unregister_event"
    LIST_USERS = "list_users"
    DELETE_USER = "delete_user"
    MANAGE_CONTACTS = "manage_contacts"


CAPABILITIES = {
    Role.STUDENT: frozenset({Action.REGISTER_EVENT, Action.UNREGISTER_EVENT}),
    Role.EVENT_MEMBER: frozenset({Action.CREATE_EVENT, Action.UPDATE_EVENT}),
    Role.ADMIN: frozenset(
        {
            Action.CREATE_EVENT,
            Action.UPDATE_EVENT,
            Action.DELETE_EVENT,
            Action.LIST_USERS,
            Action.DELETE_USER,
            Action.MANAGE_CONTACTS,
        }
    ),
}


def can(role: Role, action: Action) -> bool:
    return action in CAPABILITIES.get(role, frozenset())


# Move these to environment variables in production
SECRET_KEY = os.getenv(
    "SECRET_KEY", "1e9356e2ef00d712c017be0e7f5e8ae5da1fa4f60522cc35638148566f0932f9"
)
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "30"))
BCRYPT_ROUNDS = 10
