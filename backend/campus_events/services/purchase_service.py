"""
Ticket purchase service.

CONCURRENCY STRATEGY: Unique ledger row + relative counter update
=================================================================

Problem:
  The same student double-clicks "Buy". Two requests both read the ledger,
  both see "not purchased yet", both append and both increment.
  Result: duplicate tickets and a counter that no longer matches the ledger.

Solution:
  1. Cheap pre-check: is the buyer already in the ledger? -> 400 early
  2. INSERT INTO purchases (event_id, buyer_id, ...)
     UNIQUE(event_id, buyer_id) lets exactly one concurrent insert win;
     the loser blocks on the index (or the SQLite write lock) and then
     fails with IntegrityError -> rollback -> DuplicatePurchase
  3. UPDATE events SET purchase_count = purchase_count + 1 WHERE id = :id
     in the same transaction, so the counter can never move without its
     ledger row (and vice versa)
  4. COMMIT before returning, so the route only drops the cached listing
     once the new count is visible to other readers

  If the event is deleted between the read and the write, the insert or
  the counter update fails and the request reports NotFound; the
  transaction is rolled back either way.

Quantity:
  One ticket per buyer per event. The request still carries `quantity`
  for client compatibility; anything other than 1 is rejected rather than
  silently ignored.
"""

import time
from typing import Optional

from sqlalchemy.exc import IntegrityError

from campus_events.core.config import Settings, get_settings
from campus_events.core.exceptions import DuplicatePurchase, Forbidden, NotFound, ValidationFailed
from campus_events.core.logging import get_logger
from campus_events.core.metrics import purchase_latency, record_purchase_attempt
from campus_events.core.security import Identity
from campus_events.models.account import ROLE_STUDENT
from campus_events.repositories.event_repository import EventRepository
from campus_events.schemas.purchase import PurchasedClubRef, PurchasedEventResponse, PurchaseReceipt

logger = get_logger(__name__)

TICKETS_PER_PURCHASE = 1


class PurchaseService:
    def __init__(self, events: EventRepository, settings: Optional[Settings] = None):
        self.events = events
        self.settings = settings or get_settings()

    def _check_buyer(self, buyer: Identity) -> None:
        if self.settings.PURCHASE_STUDENT_ONLY and buyer.role != ROLE_STUDENT:
            record_purchase_attempt("forbidden")
            logger.warning("purchase_rejected_role", buyer_id=buyer.subject_id, role=buyer.role)
            raise Forbidden("Only students can purchase tickets")

    async def purchase(self, event_id: int, buyer: Identity, quantity: int = 1) -> PurchaseReceipt:
        start = time.perf_counter()
        try:
            return await self._purchase(event_id, buyer, quantity)
        finally:
            purchase_latency.observe(time.perf_counter() - start)

    async def _purchase(self, event_id: int, buyer: Identity, quantity: int) -> PurchaseReceipt:
        self._check_buyer(buyer)

        if quantity != TICKETS_PER_PURCHASE:
            record_purchase_attempt("invalid")
            raise ValidationFailed("Only one ticket per buyer can be purchased for an event")

        event = await self.events.get(event_id)
        if event is None:
            record_purchase_attempt("not_found")
            raise NotFound("Event not found")

        if await self.events.has_purchase(event_id, buyer.subject_id):
            record_purchase_attempt("duplicate")
            logger.info("purchase_rejected_duplicate", event_id=event_id, buyer_id=buyer.subject_id)
            raise DuplicatePurchase()

        try:
            purchase = await self.events.append_purchase(event, buyer.subject_id)
        except IntegrityError:
            await self.events.rollback()
            if await self.events.get(event_id) is None:
                record_purchase_attempt("not_found")
                raise NotFound("Event not found")
            record_purchase_attempt("duplicate")
            logger.info(
                "purchase_rejected_duplicate",
                event_id=event_id,
                buyer_id=buyer.subject_id,
                reason="concurrent_insert",
            )
            raise DuplicatePurchase()

        if purchase is None:
            await self.events.rollback()
            record_purchase_attempt("not_found")
            raise NotFound("Event not found")

        await self.events.commit()
        record_purchase_attempt("success")
        logger.info(
            "ticket_purchased",
            event_id=event.id,
            buyer_id=buyer.subject_id,
            purchase_id=purchase.id,
            purchase_count=event.purchase_count,
        )
        return PurchaseReceipt(
            event_id=event.id,
            event_name=event.name,
            event_date=event.date,
            purchase_count=event.purchase_count,
        )

    async def list_purchased_for_user(self, identity: Identity) -> list[PurchasedEventResponse]:
        rows = await self.events.list_purchases_for_buyer(identity.subject_id)
        return [
            PurchasedEventResponse(
                event_id=event.id,
                name=event.name,
                date=event.date,
                venue=event.venue,
                price=event.price,
                club=PurchasedClubRef(id=event.club.id, name=event.club.name, image=event.club.image),
                purchased_at=purchase.purchased_at,
                purchase_id=purchase.id,
            )
            for event, purchase in rows
        ]
