"""
Tests for admin moderation, the audit log and the end-to-end Tech Fest flow.
"""

import pytest
from httpx import AsyncClient

from campus_events.core.config import Settings, get_settings
from campus_events.main import app
from campus_events.models.audit_log import AuditLogEntry
from campus_events.repositories.audit_repository import AuditLogRepository
from campus_events.repositories.event_repository import EventRepository


async def _logs(client: AsyncClient, admin_headers, page: int = 1) -> dict:
    response = await client.get(f"/api/admin/logs?page={page}", headers=admin_headers)
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_admin_lists_all_events(client: AsyncClient, admin_headers, club_headers, other_club_headers):
    await client.post(
        "/api/events",
        json={"name": "First", "date": "2026-01-01T00:00:00Z", "venue": "A", "price": 0},
        headers=club_headers,
    )
    await client.post(
        "/api/events",
        json={"name": "Second", "date": "2025-01-01T00:00:00Z", "venue": "B", "price": 0},
        headers=other_club_headers,
    )

    response = await client.get("/api/events/admin/all", headers=admin_headers)
    assert response.status_code == 200
    assert [e["name"] for e in response.json()] == ["Second", "First"]


@pytest.mark.asyncio
@pytest.mark.parametrize("method,path", [
    ("get", "/api/events/admin/all"),
    ("delete", "/api/events/admin/1"),
    ("get", "/api/admin/logs"),
    ("get", "/api/clubs/admin/all"),
])
async def test_admin_routes_reject_club(client: AsyncClient, club_headers, method, path):
    response = await client.request(method.upper(), path, headers=club_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Access denied. Admin authorization required"


@pytest.mark.asyncio
async def test_admin_updates_any_event(client: AsyncClient, admin, admin_headers, test_event):
    response = await client.put(
        f"/api/events/admin/{test_event.id}", json={"price": 0, "venue": "Main Hall"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["venue"] == "Main Hall"
    assert response.json()["owner_club_id"] == test_event.owner_club_id

    logs = (await _logs(client, admin_headers))["logs"]
    assert len(logs) == 1
    assert logs[0]["action"] == "UPDATE_EVENT"
    assert logs[0]["target_type"] == "event"
    assert logs[0]["target_id"] == test_event.id
    assert logs[0]["admin"]["id"] == admin.id


@pytest.mark.asyncio
async def test_admin_update_cannot_reassign_owner(client: AsyncClient, admin_headers, other_club, test_event):
    response = await client.put(
        f"/api/events/admin/{test_event.id}", json={"owner_club_id": other_club.id}, headers=admin_headers
    )
    assert response.status_code == 400
    assert (await _logs(client, admin_headers))["logs"] == []


@pytest.mark.asyncio
async def test_admin_update_missing_event(client: AsyncClient, admin_headers):
    response = await client.put("/api/events/admin/99999", json={"name": "Ghost"}, headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_admin_deletes_event(client: AsyncClient, admin_headers, test_event):
    response = await client.delete(f"/api/events/admin/{test_event.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Event deleted successfully"

    assert (await client.get("/api/events/all")).json() == []
    logs = (await _logs(client, admin_headers))["logs"]
    assert [(log["action"], log["target_id"]) for log in logs] == [("DELETE_EVENT", test_event.id)]


@pytest.mark.asyncio
async def test_admin_delete_missing_event_not_logged(client: AsyncClient, admin_headers):
    response = await client.delete("/api/events/admin/99999", headers=admin_headers)
    assert response.status_code == 404
    assert (await _logs(client, admin_headers))["total_pages"] == 0


@pytest.mark.asyncio
async def test_logs_paginated(client: AsyncClient, admin, admin_headers, db_session):
    repo = AuditLogRepository(db_session)
    for i in range(23):
        await repo.append(
            AuditLogEntry(action="UPDATE_EVENT", target_type="event", target_id=i, actor_admin_id=admin.id)
        )
    await db_session.commit()

    first = await _logs(client, admin_headers, page=1)
    assert first["total_pages"] == 3
    assert first["current_page"] == 1
    assert len(first["logs"]) == 10
    assert first["logs"][0]["target_id"] == 22

    last = await _logs(client, admin_headers, page=3)
    assert last["current_page"] == 3
    assert [log["target_id"] for log in last["logs"]] == [2, 1, 0]


@pytest.mark.asyncio
async def test_logs_page_must_be_positive(client: AsyncClient, admin_headers):
    response = await client.get("/api/admin/logs?page=0", headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_target_activity(client: AsyncClient, admin_headers, test_event):
    await client.put(f"/api/events/admin/{test_event.id}", json={"name": "Tech Fest 2"}, headers=admin_headers)
    await client.delete(f"/api/events/admin/{test_event.id}", headers=admin_headers)

    response = await client.get(f"/api/admin/user-activity/event/{test_event.id}", headers=admin_headers)
    assert response.status_code == 200
    assert [log["action"] for log in response.json()] == ["DELETE_EVENT", "UPDATE_EVENT"]

    other = await client.get(f"/api/admin/user-activity/club/{test_event.id}", headers=admin_headers)
    assert other.json() == []


@pytest.mark.asyncio
async def test_target_activity_rejects_unknown_type(client: AsyncClient, admin_headers):
    response = await client.get("/api/admin/user-activity/student/1", headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_admin_updates_club(client: AsyncClient, admin_headers, club):
    response = await client.put(
        f"/api/clubs/admin/{club.id}", json={"description": "Hardware and software"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["description"] == "Hardware and software"
    assert response.json()["name"] == "Tech Club"

    logs = (await _logs(client, admin_headers))["logs"]
    assert [(log["action"], log["target_type"]) for log in logs] == [("UPDATE_CLUB", "club")]


@pytest.mark.asyncio
async def test_admin_update_club_rejects_unknown_field(client: AsyncClient, admin_headers, club):
    response = await client.put(f"/api/clubs/admin/{club.id}", json={"role": "admin"}, headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_admin_update_missing_club(client: AsyncClient, admin_headers, student):
    """Student ids are not club ids."""
    response = await client.put(f"/api/clubs/admin/{student.id}", json={"name": "X"}, headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Club not found"


@pytest.mark.asyncio
async def test_admin_deletes_club_and_its_events(
    client: AsyncClient, admin_headers, club, student_headers, test_event
):
    await client.post(f"/api/events/{test_event.id}/purchase", headers=student_headers)

    response = await client.delete(f"/api/clubs/admin/{club.id}", headers=admin_headers)
    assert response.status_code == 200

    assert (await client.get("/api/clubs/all")).json() == []
    assert (await client.get("/api/events/all")).json() == []
    assert (await client.get("/api/events/user/purchased-events", headers=student_headers)).json() == []

    activity = await client.get(f"/api/admin/user-activity/club/{club.id}", headers=admin_headers)
    assert [log["action"] for log in activity.json()] == ["DELETE_CLUB"]


@pytest.mark.asyncio
async def test_deleting_club_releases_tickets_it_bought(
    client: AsyncClient, admin_headers, student_headers, other_club, test_event, session_factory, headers_for
):
    app.dependency_overrides[get_settings] = lambda: Settings(PURCHASE_STUDENT_ONLY=False)

    assert (await client.post(f"/api/events/{test_event.id}/purchase", headers=student_headers)).status_code == 200
    bought = await client.post(f"/api/events/{test_event.id}/purchase", headers=headers_for(other_club))
    assert bought.status_code == 200
    assert bought.json()["purchase_count"] == 2

    response = await client.delete(f"/api/clubs/admin/{other_club.id}", headers=admin_headers)
    assert response.status_code == 200

    async with session_factory() as session:
        events = EventRepository(session)
        event = await events.get(test_event.id)
        assert event.purchase_count == 1
        assert await events.ledger_size(test_event.id) == 1
    listing = (await client.get("/api/events/all")).json()
    assert listing[0]["purchase_count"] == 1


@pytest.mark.asyncio
async def test_tech_fest_scenario(client: AsyncClient, club_headers, student_headers, admin_headers):
    created = await client.post(
        "/api/events",
        json={"name": "Tech Fest", "date": "2025-05-01T00:00:00Z", "venue": "Hall A", "price": 100},
        headers=club_headers,
    )
    assert created.status_code == 201
    event_id = created.json()["id"]

    listing = (await client.get("/api/events/all")).json()
    assert [(e["id"], e["purchase_count"]) for e in listing] == [(event_id, 0)]

    bought = await client.post(f"/api/events/{event_id}/purchase", json={"quantity": 1}, headers=student_headers)
    assert bought.status_code == 200
    assert bought.json()["purchase_count"] == 1

    purchased = (await client.get("/api/events/user/purchased-events", headers=student_headers)).json()
    assert [p["event_id"] for p in purchased] == [event_id]

    again = await client.post(f"/api/events/{event_id}/purchase", json={"quantity": 1}, headers=student_headers)
    assert again.status_code == 400
    assert (await client.get(f"/api/events/{event_id}")).json()["purchase_count"] == 1

    deleted = await client.delete(f"/api/events/admin/{event_id}", headers=admin_headers)
    assert deleted.status_code == 200
    assert (await client.get("/api/events/all")).json() == []

    logs = (await _logs(client, admin_headers))["logs"]
    assert [(log["action"], log["target_id"]) for log in logs] == [("DELETE_EVENT", event_id)]
