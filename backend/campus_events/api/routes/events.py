"""
Event endpoints: club management, public listing, ticket purchase and
admin moderation. The public listing is cached in Redis; every mutation
here invalidates it.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status

from campus_events.api.deps import get_event_service, get_purchase_service
from campus_events.core.logging import get_logger
from campus_events.core.security import Identity, get_current_identity, require_admin, require_club
from campus_events.schemas.event import EventCreate, EventResponse, EventStats, EventUpdate, MessageResponse
from campus_events.schemas.purchase import PurchaseRequest, PurchaseResponse, PurchasedEventResponse
from campus_events.services.cache_service import (
    get_cached_event_list,
    invalidate_event_cache,
    set_cached_event_list,
)
from campus_events.services.event_service import EventService
from campus_events.services.purchase_service import PurchaseService

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    club: Identity = Depends(require_club),
    service: EventService = Depends(get_event_service),
):
    """Create a new event owned by the calling club."""
    event = await service.create_event(club, event_data)
    await invalidate_event_cache()
    return event


@router.get("/all", response_model=list[EventResponse])
async def list_all_events_endpoint(service: EventService = Depends(get_event_service)):
    """Public listing of every event with its club, newest date first."""
    cached = await get_cached_event_list()
    if cached is not None:
        logger.info("events_list_cache_hit", count=len(cached))
        return cached

    events = await service.list_all_events()
    payload = [EventResponse.model_validate(e).model_dump(mode="json") for e in events]
    await set_cached_event_list(payload)
    return payload


@router.get("/club", response_model=list[EventResponse])
async def list_club_events_endpoint(
    club: Identity = Depends(require_club),
    service: EventService = Depends(get_event_service),
):
    return await service.list_events_for_club(club)


@router.get("/club/stats", response_model=list[EventStats])
async def club_stats_endpoint(
    club: Identity = Depends(require_club),
    service: EventService = Depends(get_event_service),
):
    """Purchase totals and the five most recent buyers per owned event."""
    return await service.club_stats(club)


@router.get("/user/purchased-events", response_model=list[PurchasedEventResponse])
async def purchased_events_endpoint(
    identity: Identity = Depends(get_current_identity),
    service: PurchaseService = Depends(get_purchase_service),
):
    return await service.list_purchased_for_user(identity)


@router.get("/admin/all", response_model=list[EventResponse])
async def admin_list_events_endpoint(
    admin: Identity = Depends(require_admin),
    service: EventService = Depends(get_event_service),
):
    return await service.admin_list_events()


@router.put("/admin/{event_id}", response_model=EventResponse)
async def admin_update_event_endpoint(
    event_id: int,
    patch: EventUpdate,
    admin: Identity = Depends(require_admin),
    service: EventService = Depends(get_event_service),
):
    """Patch any event regardless of owner. Logged as UPDATE_EVENT."""
    event = await service.admin_update_event(admin, event_id, patch)
    await invalidate_event_cache()
    return event


@router.delete("/admin/{event_id}", response_model=MessageResponse)
async def admin_delete_event_endpoint(
    event_id: int,
    admin: Identity = Depends(require_admin),
    service: EventService = Depends(get_event_service),
):
    """Delete any event regardless of owner. Logged as DELETE_EVENT."""
    await service.admin_delete_event(admin, event_id)
    await invalidate_event_cache()
    return MessageResponse(message="Event deleted successfully")


@router.post("/{event_id}/purchase", response_model=PurchaseResponse)
async def purchase_ticket_endpoint(
    event_id: int,
    payload: Optional[PurchaseRequest] = None,
    identity: Identity = Depends(get_current_identity),
    service: PurchaseService = Depends(get_purchase_service),
):
    """
    Buy one ticket for an event.

    A buyer can hold at most one ticket per event; a second attempt, even a
    concurrent one, returns 400 and leaves purchase_count unchanged.
    """
    quantity = payload.quantity if payload else 1
    receipt = await service.purchase(event_id, identity, quantity)
    await invalidate_event_cache()
    return PurchaseResponse.from_receipt(receipt)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(event_id: int, service: EventService = Depends(get_event_service)):
    return await service.get_event(event_id)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event_endpoint(
    event_id: int,
    patch: EventUpdate,
    club: Identity = Depends(require_club),
    service: EventService = Depends(get_event_service),
):
    """Owner-only partial update."""
    event = await service.update_event(club, event_id, patch)
    await invalidate_event_cache()
    return event


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event_endpoint(
    event_id: int,
    club: Identity = Depends(require_club),
    service: EventService = Depends(get_event_service),
):
    """Owner-only delete; other clubs get 404."""
    await service.delete_event(club, event_id)
    await invalidate_event_cache()
    return MessageResponse(message="Event deleted successfully")
