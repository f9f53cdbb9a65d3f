from campus_events.models.account import Account
from campus_events.models.audit_log import AuditLogEntry
from campus_events.models.event import Event, Purchase

__all__ = ["Account", "AuditLogEntry", "Event", "Purchase"]
