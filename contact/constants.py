from enum import Enum


class IssueType(str, Enum):
    EVENT_REGISTRATION = "event-registration"
    ACCOUNT_ACCESS = "account-access"
    EVENT_CANCELLATION = "event-cancellation"
    TECHNICAL_ISSUE = "technical-issue"
    EVENT_INQUIRY = "event-inquiry"
    FEEDBACK = "feedback"
    OTHER = "other"


class ContactStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


DEFAULT_PAGE_SIZE = 50
