"""
Admin login and audit log browsing.
"""

from fastapi import APIRouter, Depends, Query

from campus_events.api.deps import get_audit_service, get_auth_service
from campus_events.core.security import Identity, require_admin
from campus_events.models.account import ROLE_ADMIN
from campus_events.schemas.account import AccountResponse, AuthResponse, LoginRequest
from campus_events.schemas.audit import AuditLogPage, AuditLogResponse
from campus_events.services.audit_service import AuditService
from campus_events.services.auth_service import AuthService

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/login", response_model=AuthResponse)
async def admin_login(credentials: LoginRequest, service: AuthService = Depends(get_auth_service)):
    account, token = await service.login(ROLE_ADMIN, credentials)
    return AuthResponse(token=token, account=AccountResponse.model_validate(account))


@router.get("/logs", response_model=AuditLogPage)
async def list_admin_logs(
    page: int = Query(1, ge=1),
    admin: Identity = Depends(require_admin),
    service: AuditService = Depends(get_audit_service),
):
    """Audit log, newest first, ten entries per page."""
    entries, total_pages, current_page = await service.list_logs(page)
    return AuditLogPage(
        logs=[AuditLogResponse.model_validate(e) for e in entries],
        total_pages=total_pages,
        current_page=current_page,
    )


@router.get("/user-activity/{target_type}/{target_id}", response_model=list[AuditLogResponse])
async def target_activity(
    target_type: str,
    target_id: int,
    admin: Identity = Depends(require_admin),
    service: AuditService = Depends(get_audit_service),
):
    """Every audited action against one event or club."""
    return await service.target_activity(target_type, target_id)
