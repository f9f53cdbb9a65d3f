from campus_events.schemas.account import (
    AccountResponse,
    AuthResponse,
    ClubCreate,
    ClubResponse,
    ClubUpdate,
    LoginRequest,
    StudentCreate,
)
from campus_events.schemas.audit import AuditLogPage, AuditLogResponse
from campus_events.schemas.event import (
    ClubSummary,
    EventCreate,
    EventResponse,
    EventStats,
    EventUpdate,
    MessageResponse,
)
from campus_events.schemas.purchase import (
    PurchaseReceipt,
    PurchaseRequest,
    PurchaseResponse,
    PurchasedEventResponse,
)

__all__ = [
    "AccountResponse", "AuthResponse", "ClubCreate", "ClubResponse", "ClubUpdate",
    "LoginRequest", "StudentCreate",
    "AuditLogPage", "AuditLogResponse",
    "ClubSummary", "EventCreate", "EventResponse", "EventStats", "EventUpdate", "MessageResponse",
    "PurchaseReceipt", "PurchaseRequest", "PurchaseResponse", "PurchasedEventResponse",
]
