"""
Dependency providers wiring repositories and services onto the request's
database session. FastAPI caches each provider per request, so every
service in one request shares a single session and transaction.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.core.config import Settings, get_settings
from campus_events.core.security import TokenProvider, get_token_provider
from campus_events.db.session import get_db
from campus_events.repositories.account_repository import AccountRepository
from campus_events.repositories.audit_repository import AuditLogRepository
from campus_events.repositories.event_repository import EventRepository
from campus_events.services.audit_service import AuditService
from campus_events.services.auth_service import AuthService
from campus_events.services.club_service import ClubService
from campus_events.services.event_service import EventService
from campus_events.services.purchase_service import PurchaseService


def get_event_repository(db: AsyncSession = Depends(get_db)) -> EventRepository:
    return EventRepository(db)


def get_account_repository(db: AsyncSession = Depends(get_db)) -> AccountRepository:
    return AccountRepository(db)


def get_audit_repository(db: AsyncSession = Depends(get_db)) -> AuditLogRepository:
    return AuditLogRepository(db)


def get_audit_service(logs: AuditLogRepository = Depends(get_audit_repository)) -> AuditService:
    return AuditService(logs)


def get_auth_service(
    accounts: AccountRepository = Depends(get_account_repository),
    tokens: TokenProvider = Depends(get_token_provider),
) -> AuthService:
    return AuthService(accounts, tokens)


def get_event_service(
    events: EventRepository = Depends(get_event_repository),
    audit: AuditService = Depends(get_audit_service),
) -> EventService:
    return EventService(events, audit)


def get_purchase_service(
    events: EventRepository = Depends(get_event_repository),
    settings: Settings = Depends(get_settings),
) -> PurchaseService:
    return PurchaseService(events, settings)


def get_club_service(
    accounts: AccountRepository = Depends(get_account_repository),
    events: EventRepository = Depends(get_event_repository),
    audit: AuditService = Depends(get_audit_service),
) -> ClubService:
    return ClubService(accounts, events, audit)
