"""
Event store: event rows and their purchase ledger.

Every purchase goes through `append_purchase`, which inserts the ledger row
and bumps `purchase_count` inside the caller's transaction. The unique
ledger constraint makes the duplicate check and the append a single
indivisible step; the counter update is a relative UPDATE so concurrent
buyers on the same event never lose an increment.
"""

from typing import Optional

from sqlalchemy import delete, exists, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.db.base import utcnow
from campus_events.models.event import Event, Purchase


class EventRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, event_id: int) -> Optional[Event]:
        result = await self.db.execute(select(Event).where(Event.id == event_id))
        return result.scalar_one_or_none()

    async def get_owned(self, event_id: int, club_id: int) -> Optional[Event]:
        result = await self.db.execute(
            select(Event).where(Event.id == event_id, Event.owner_club_id == club_id)
        )
        return result.scalar_one_or_none()

    async def add(self, event: Event) -> Event:
        self.db.add(event)
        await self.db.flush()
        await self.db.refresh(event)
        return event

    async def apply_changes(self, event: Event, changes: dict) -> Event:
        for field, value in changes.items():
            setattr(event, field, value)
        event.version = Event.version + 1
        await self.db.flush()
        await self.db.refresh(event)
        return event

    async def delete(self, event_id: int) -> bool:
        """Hard delete; the ledger goes with it (ON DELETE CASCADE)."""
        result = await self.db.execute(delete(Event).where(Event.id == event_id))
        return result.rowcount > 0

    async def list_all(self) -> list[Event]:
        result = await self.db.execute(select(Event).order_by(Event.date.desc(), Event.id.desc()))
        return list(result.scalars().all())

    async def list_recently_created(self) -> list[Event]:
        result = await self.db.execute(select(Event).order_by(Event.created_at.desc(), Event.id.desc()))
        return list(result.scalars().all())

    async def list_by_owner(self, club_id: int) -> list[Event]:
        result = await self.db.execute(
            select(Event)
            .where(Event.owner_club_id == club_id)
            .order_by(Event.date.desc(), Event.id.desc())
        )
        return list(result.scalars().all())

    # Ledger

    async def has_purchase(self, event_id: int, buyer_id: int) -> bool:
        result = await self.db.execute(
            select(exists().where(Purchase.event_id == event_id, Purchase.buyer_id == buyer_id))
        )
        return bool(result.scalar())

    async def append_purchase(self, event: Event, buyer_id: int) -> Optional[Purchase]:
        """
        Record one ticket for `buyer_id` and increment the event's counter.

        Raises IntegrityError when the buyer is already in the ledger (or the
        event row vanished under a foreign-key-enforcing store). Returns None
        when the counter update matched no row; the caller must roll back.
        """
        purchase = Purchase(event_id=event.id, buyer_id=buyer_id, purchased_at=utcnow())
        self.db.add(purchase)
        await self.db.flush()

        result = await self.db.execute(
            update(Event)
            .where(Event.id == event.id)
            .values(
                purchase_count=Event.purchase_count + 1,
                version=Event.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None

        await self.db.refresh(event)
        return purchase

    async def ledger_size(self, event_id: int) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Purchase).where(Purchase.event_id == event_id)
        )
        return result.scalar_one()

    async def list_purchases_for_buyer(self, buyer_id: int) -> list[tuple[Event, Purchase]]:
        result = await self.db.execute(
            select(Event, Purchase)
            .join(Purchase, Purchase.event_id == Event.id)
            .where(Purchase.buyer_id == buyer_id)
            .order_by(Event.date.desc(), Event.id.desc())
        )
        return [(row[0], row[1]) for row in result.all()]

    async def list_purchases_for_events(self, event_ids: list[int]) -> list[Purchase]:
        """Ledger rows for the given events, newest first."""
        if not event_ids:
            return []
        result = await self.db.execute(
            select(Purchase)
            .where(Purchase.event_id.in_(event_ids))
            .order_by(Purchase.purchased_at.desc(), Purchase.id.desc())
        )
        return list(result.scalars().all())

    async def rollback(self) -> None:
        await self.db.rollback()

    async def commit(self) -> None:
        await self.db.commit()

    async def release_purchases_by_buyer(self, buyer_id: int) -> int:
        """
        Take one ticket off every event `buyer_id` holds one for.

        Runs before the buyer's account is deleted, in the same transaction,
        so the counters drop together with the ledger rows the delete
        cascades away. Returns the number of events touched.
        """
        result = await self.db.execute(
            update(Event)
            .where(Event.id.in_(select(Purchase.event_id).where(Purchase.buyer_id == buyer_id)))
            .values(
                purchase_count=Event.purchase_count - 1,
                version=Event.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
