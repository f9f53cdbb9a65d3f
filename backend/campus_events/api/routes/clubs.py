"""
Club sign-up/login, the public club directory and admin club moderation.
"""

from fastapi import APIRouter, Depends, status

from campus_events.api.deps import get_auth_service, get_club_service
from campus_events.core.security import Identity, require_admin
from campus_events.models.account import ROLE_CLUB
from campus_events.schemas.account import (
    AccountResponse,
    AuthResponse,
    ClubCreate,
    ClubResponse,
    ClubUpdate,
    LoginRequest,
)
from campus_events.schemas.event import MessageResponse
from campus_events.services.auth_service import AuthService
from campus_events.services.cache_service import invalidate_event_cache
from campus_events.services.club_service import ClubService

router = APIRouter(prefix="/clubs", tags=["Clubs"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def club_signup(data: ClubCreate, service: AuthService = Depends(get_auth_service)):
    account, token = await service.register_club(data)
    return AuthResponse(token=token, account=AccountResponse.model_validate(account))


@router.post("/login", response_model=AuthResponse)
async def club_login(credentials: LoginRequest, service: AuthService = Depends(get_auth_service)):
    account, token = await service.login(ROLE_CLUB, credentials)
    return AuthResponse(token=token, account=AccountResponse.model_validate(account))


@router.get("/all", response_model=list[ClubResponse])
async def list_clubs(service: ClubService = Depends(get_club_service)):
    """Public club directory, alphabetical."""
    return await service.list_clubs()


@router.get("/admin/all", response_model=list[ClubResponse])
async def admin_list_clubs(
    admin: Identity = Depends(require_admin),
    service: ClubService = Depends(get_club_service),
):
    return await service.list_clubs()


@router.put("/admin/{club_id}", response_model=ClubResponse)
async def admin_update_club(
    club_id: int,
    patch: ClubUpdate,
    admin: Identity = Depends(require_admin),
    service: ClubService = Depends(get_club_service),
):
    club = await service.admin_update_club(admin, club_id, patch)
    await invalidate_event_cache()
    return club


@router.delete("/admin/{club_id}", response_model=MessageResponse)
async def admin_delete_club(
    club_id: int,
    admin: Identity = Depends(require_admin),
    service: ClubService = Depends(get_club_service),
):
    await service.admin_delete_club(admin, club_id)
    await invalidate_event_cache()
    return MessageResponse(message="Club deleted successfully")
