"""
Concurrency tests for ticket purchases.

Each simulated request runs in its own session, so the only thing keeping
buyers apart is the database: the unique ledger constraint and the relative
counter update.
"""

import asyncio

import pytest
from sqlalchemy import select

from campus_events.core.exceptions import DuplicatePurchase
from campus_events.core.security import Identity
from campus_events.models.event import Event
from campus_events.repositories.event_repository import EventRepository
from campus_events.services.purchase_service import PurchaseService


async def _attempt(session_factory, event_id: int, buyer: Identity) -> str:
    async with session_factory() as session:
        service = PurchaseService(EventRepository(session))
        try:
            await service.purchase(event_id, buyer)
        except DuplicatePurchase:
            await session.rollback()
            return "duplicate"
        await session.commit()
        return "ok"


async def _counter_and_ledger(session_factory, event_id: int) -> tuple[int, int]:
    async with session_factory() as session:
        event = (await session.execute(select(Event).where(Event.id == event_id))).scalar_one()
        return event.purchase_count, await EventRepository(session).ledger_size(event_id)


@pytest.mark.asyncio
async def test_same_buyer_concurrent_purchases_single_success(session_factory, student, test_event):
    buyer = Identity(subject_id=student.id, role=student.role)

    results = await asyncio.gather(*[_attempt(session_factory, test_event.id, buyer) for _ in range(10)])

    assert results.count("ok") == 1
    assert results.count("duplicate") == 9
    assert await _counter_and_ledger(session_factory, test_event.id) == (1, 1)


@pytest.mark.asyncio
async def test_distinct_buyers_concurrent_purchases_all_counted(session_factory, test_event, make_students):
    buyers = [Identity(subject_id=s.id, role=s.role) for s in await make_students(8)]

    results = await asyncio.gather(*[_attempt(session_factory, test_event.id, b) for b in buyers])

    assert results == ["ok"] * 8
    assert await _counter_and_ledger(session_factory, test_event.id) == (8, 8)


@pytest.mark.asyncio
async def test_mixed_concurrent_purchases_keep_counter_in_step(session_factory, test_event, make_students):
    """Three buyers each hammering the same event: one ticket apiece."""
    buyers = [Identity(subject_id=s.id, role=s.role) for s in await make_students(3)]
    attempts = [_attempt(session_factory, test_event.id, b) for b in buyers for _ in range(4)]

    results = await asyncio.gather(*attempts)

    assert results.count("ok") == 3
    assert results.count("duplicate") == 9
    assert await _counter_and_ledger(session_factory, test_event.id) == (3, 3)
