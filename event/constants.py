from enum import Enum


class EventCategory(str, Enum):
    TECHNICAL = "technical"
    CULTURAL = "cultural"
    SPORTS = "sports"
    WORKSHOP = "workshop"


class EventStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]


DEFAULT_CAPACITY = 100
DEFAULT_COLLEGE = "Unknown College"
DEFAULT_IMAGE = (
    "https://images.unsplash.com/photo-1540575467063-178a50c2df87?w=800&h=400&fit=crop"
)

# Conditional-update attempts before a register/unregister gives up.
REGISTRATION_ATTEMPTS = 3
