"""
Event management: club-owned create/update/delete, public listings,
per-club purchase stats and the audited admin variants.

Ownership is enforced in the query itself: a club's update or delete only
matches rows where owner_club_id is the caller, so "not yours" and "does
not exist" are indistinguishable to the caller (404).
"""

from collections import defaultdict

from campus_events.core.exceptions import NotFound, ValidationFailed
from campus_events.core.logging import get_logger
from campus_events.core.metrics import record_event_mutation
from campus_events.core.security import Identity
from campus_events.models.audit_log import ACTION_DELETE_EVENT, ACTION_UPDATE_EVENT, TARGET_EVENT
from campus_events.models.event import Event
from campus_events.repositories.event_repository import EventRepository
from campus_events.schemas.event import EventCreate, EventStats, EventUpdate, RecentPurchase
from campus_events.services.audit_service import AuditService

logger = get_logger(__name__)

RECENT_PURCHASES_LIMIT = 5


class EventService:
    def __init__(self, events: EventRepository, audit: AuditService):
        self.events = events
        self.audit = audit

    async def create_event(self, club: Identity, event_data: EventCreate) -> Event:
        if not event_data.name or not event_data.venue:
            raise ValidationFailed("Missing required fields")
        if event_data.price < 0:
            raise ValidationFailed("Price cannot be negative")

        event = await self.events.add(
            Event(
                name=event_data.name,
                date=event_data.date,
                venue=event_data.venue,
                price=event_data.price,
                owner_club_id=club.subject_id,
                purchase_count=0,
            )
        )
        await self.events.commit()
        record_event_mutation("create", "club")
        logger.info("event_created", event_id=event.id, name=event.name, club_id=club.subject_id)
        return event

    async def update_event(self, club: Identity, event_id: int, patch: EventUpdate) -> Event:
        event = await self.events.get_owned(event_id, club.subject_id)
        if event is None:
            raise NotFound("Event not found or not authorized")
        event = await self.events.apply_changes(event, patch.changes())
        await self.events.commit()
        record_event_mutation("update", "club")
        logger.info("event_updated", event_id=event.id, club_id=club.subject_id, fields=sorted(patch.changes()))
        return event

    async def delete_event(self, club: Identity, event_id: int) -> None:
        event = await self.events.get_owned(event_id, club.subject_id)
        if event is None or not await self.events.delete(event_id):
            logger.warning("event_delete_denied", event_id=event_id, club_id=club.subject_id)
            raise NotFound("Event not found or not authorized")
        await self.events.commit()
        record_event_mutation("delete", "club")
        logger.info("event_deleted", event_id=event_id, club_id=club.subject_id)

    async def list_events_for_club(self, club: Identity) -> list[Event]:
        return await self.events.list_by_owner(club.subject_id)

    async def list_all_events(self) -> list[Event]:
        return await self.events.list_all()

    async def get_event(self, event_id: int) -> Event:
        event = await self.events.get(event_id)
        if event is None:
            raise NotFound(f"Event {event_id} not found")
        return event

    async def club_stats(self, club: Identity) -> list[EventStats]:
        events = await self.events.list_by_owner(club.subject_id)
        purchases = await self.events.list_purchases_for_events([e.id for e in events])

        recent = defaultdict(list)
        for purchase in purchases:  # newest first
            if len(recent[purchase.event_id]) < RECENT_PURCHASES_LIMIT:
                recent[purchase.event_id].append(RecentPurchase.model_validate(purchase))

        return [
            EventStats(
                id=event.id,
                name=event.name,
                date=event.date,
                total_purchases=event.purchase_count,
                recent_purchases=recent[event.id],
            )
            for event in events
        ]

    # Admin moderation

    async def admin_list_events(self) -> list[Event]:
        return await self.events.list_recently_created()

    async def admin_update_event(self, admin: Identity, event_id: int, patch: EventUpdate) -> Event:
        event = await self.events.get(event_id)
        if event is None:
            raise NotFound("Event not found")
        event = await self.events.apply_changes(event, patch.changes())
        await self.audit.record(ACTION_UPDATE_EVENT, TARGET_EVENT, event_id, admin)
        await self.events.commit()
        record_event_mutation("update", "admin")
        return event

    async def admin_delete_event(self, admin: Identity, event_id: int) -> None:
        if not await self.events.delete(event_id):
            raise NotFound("Event not found")
        await self.audit.record(ACTION_DELETE_EVENT, TARGET_EVENT, event_id, admin)
        await self.events.commit()
        record_event_mutation("delete", "admin")
