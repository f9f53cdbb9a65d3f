"""
Tests for ticket purchases, the purchase ledger and club stats.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from campus_events.core.config import Settings, get_settings
from campus_events.main import app
from campus_events.models.event import Event
from campus_events.repositories.event_repository import EventRepository


async def _ledger_state(session_factory, event_id: int) -> tuple[int, int]:
    """(purchase_count, ledger rows) read through a fresh session."""
    async with session_factory() as session:
        event = (await session.execute(select(Event).where(Event.id == event_id))).scalar_one()
        size = await EventRepository(session).ledger_size(event_id)
        return event.purchase_count, size


@pytest.mark.asyncio
async def test_purchase_ticket(client: AsyncClient, student_headers, test_event, session_factory):
    response = await client.post(
        f"/api/events/{test_event.id}/purchase", json={"quantity": 1}, headers=student_headers
    )
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Ticket purchased successfully"
    assert data["purchase_count"] == 1
    assert data["event"]["id"] == test_event.id
    assert data["event"]["name"] == "Tech Fest"

    assert await _ledger_state(session_factory, test_event.id) == (1, 1)


@pytest.mark.asyncio
async def test_purchase_without_body_defaults_to_one(client: AsyncClient, student_headers, test_event):
    response = await client.post(f"/api/events/{test_event.id}/purchase", headers=student_headers)
    assert response.status_code == 200
    assert response.json()["purchase_count"] == 1


@pytest.mark.asyncio
async def test_duplicate_purchase_rejected(client: AsyncClient, student_headers, test_event, session_factory):
    first = await client.post(f"/api/events/{test_event.id}/purchase", json={"quantity": 1}, headers=student_headers)
    assert first.status_code == 200

    second = await client.post(f"/api/events/{test_event.id}/purchase", json={"quantity": 1}, headers=student_headers)
    assert second.status_code == 400
    assert second.json()["detail"] == "You have already purchased this event"

    assert await _ledger_state(session_factory, test_event.id) == (1, 1)


@pytest.mark.asyncio
async def test_different_students_each_buy(
    client: AsyncClient, student_headers, other_student, test_event, session_factory, headers_for
):
    await client.post(f"/api/events/{test_event.id}/purchase", headers=student_headers)
    response = await client.post(f"/api/events/{test_event.id}/purchase", headers=headers_for(other_student))
    assert response.status_code == 200
    assert response.json()["purchase_count"] == 2

    assert await _ledger_state(session_factory, test_event.id) == (2, 2)


@pytest.mark.asyncio
async def test_purchase_missing_event(client: AsyncClient, student_headers):
    response = await client.post("/api/events/99999/purchase", json={"quantity": 1}, headers=student_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_purchase_unauthenticated(client: AsyncClient, test_event):
    response = await client.post(f"/api/events/{test_event.id}/purchase", json={"quantity": 1})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_purchase_quantity_above_one_rejected(
    client: AsyncClient, student_headers, test_event, session_factory
):
    response = await client.post(f"/api/events/{test_event.id}/purchase", json={"quantity": 3}, headers=student_headers)
    assert response.status_code == 400
    assert await _ledger_state(session_factory, test_event.id) == (0, 0)


@pytest.mark.asyncio
async def test_purchase_quantity_zero_rejected(client: AsyncClient, student_headers, test_event):
    response = await client.post(f"/api/events/{test_event.id}/purchase", json={"quantity": 0}, headers=student_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_club_cannot_purchase_by_default(client: AsyncClient, club_headers, test_event):
    response = await client.post(f"/api/events/{test_event.id}/purchase", headers=club_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_any_role_can_purchase_when_unrestricted(client: AsyncClient, club_headers, test_event):
    app.dependency_overrides[get_settings] = lambda: Settings(PURCHASE_STUDENT_ONLY=False)

    response = await client.post(f"/api/events/{test_event.id}/purchase", headers=club_headers)
    assert response.status_code == 200
    assert response.json()["purchase_count"] == 1


@pytest.mark.asyncio
async def test_list_purchased_events(client: AsyncClient, student_headers, test_event, club_headers):
    other = await client.post(
        "/api/events", json={"name": "Unbought", "date": "2025-06-01T00:00:00Z", "venue": "Hall C", "price": 0},
        headers=club_headers,
    )
    assert other.status_code == 201
    await client.post(f"/api/events/{test_event.id}/purchase", headers=student_headers)

    response = await client.get("/api/events/user/purchased-events", headers=student_headers)
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    row = data[0]
    assert row["event_id"] == test_event.id
    assert row["name"] == "Tech Fest"
    assert row["venue"] == "Hall A"
    assert row["price"] == 100
    assert row["club"]["name"] == "Tech Club"
    assert row["purchase_id"]
    assert row["purchased_at"]


@pytest.mark.asyncio
async def test_list_purchased_events_empty(client: AsyncClient, student_headers, test_event):
    response = await client.get("/api/events/user/purchased-events", headers=student_headers)
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_purchase_reflected_in_public_listing(client: AsyncClient, student_headers, test_event):
    await client.post(f"/api/events/{test_event.id}/purchase", headers=student_headers)
    listing = (await client.get("/api/events/all")).json()
    assert listing[0]["purchase_count"] == 1


@pytest.mark.asyncio
async def test_deleting_event_removes_ledger(
    client: AsyncClient, student_headers, club_headers, test_event, session_factory
):
    await client.post(f"/api/events/{test_event.id}/purchase", headers=student_headers)
    await client.delete(f"/api/events/{test_event.id}", headers=club_headers)

    purchased = await client.get("/api/events/user/purchased-events", headers=student_headers)
    assert purchased.json() == []
    async with session_factory() as session:
        assert await EventRepository(session).ledger_size(test_event.id) == 0


@pytest.mark.asyncio
async def test_club_stats(client: AsyncClient, club_headers, student, test_event, make_students, headers_for):
    buyers = [student] + await make_students(6)
    for buyer in buyers:
        response = await client.post(f"/api/events/{test_event.id}/purchase", headers=headers_for(buyer))
        assert response.status_code == 200

    response = await client.get("/api/events/club/stats", headers=club_headers)
    assert response.status_code == 200
    stats = response.json()
    assert len(stats) == 1
    assert stats[0]["id"] == test_event.id
    assert stats[0]["total_purchases"] == 7
    recent = stats[0]["recent_purchases"]
    assert len(recent) == 5
    # Newest first: the last five buyers, in reverse order of purchase
    assert [r["buyer"]["id"] for r in recent] == [b.id for b in reversed(buyers)][:5]
    assert set(recent[0]["buyer"]) == {"id", "name", "email"}
