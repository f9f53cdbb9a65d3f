"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags duplicate    # Same buyer, many simultaneous purchases
  locust -f locustfile.py --tags throughput   # Cached event listing
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests
"""

import random
import string
from datetime import datetime, timedelta, timezone

from locust import HttpUser, between, events, tag, task

PASSWORD = "loadtest-password"

# Shared state
EVENT_IDS = []
TARGET_EVENT_ID = None


def random_email():
    return "load_" + "".join(random.choices(string.ascii_lowercase + string.digits, k=10)) + "@campus.edu"


def signup(client, kind, **extra):
    """Register a student or club and return bearer headers (empty on failure)."""
    resp = client.post(f"/api/{kind}/signup", json={
        "name": f"Load {kind} {random.randint(1, 99999)}",
        "email": random_email(),
        "password": PASSWORD,
        **extra,
    }, name=f"/api/{kind}/signup")
    if resp.status_code != 201:
        return {}
    return {"Authorization": f"Bearer {resp.json()['token']}"}


def future_date(days):
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("SETUP: first club user creates the shared target event")
    print("=" * 60)


class DuplicatePurchaseUser(HttpUser):
    """
    TEST 1: Duplicate purchases - every user clicks "Buy" repeatedly

    Run: locust -f locustfile.py --tags duplicate -u 100 -r 50 --run-time 30s

    Each user may own at most one ticket, so afterwards:
      SELECT purchase_count FROM events WHERE id = X;
      SELECT COUNT(*) FROM purchases WHERE event_id = X;
    Both numbers must match and never exceed the number of users.
    """
    wait_time = between(0, 0.05)

    def on_start(self):
        global TARGET_EVENT_ID
        if TARGET_EVENT_ID is None:
            club_headers = signup(self.client, "clubs", description="Load test club")
            resp = self.client.post("/api/events", json={
                "name": "Load Test Fest",
                "date": future_date(30),
                "venue": "Main Hall",
                "price": 0,
            }, headers=club_headers)
            if resp.status_code == 201 and TARGET_EVENT_ID is None:
                TARGET_EVENT_ID = resp.json()["id"]
                print(f"\nCreated target event {TARGET_EVENT_ID}\n")

        self.headers = signup(self.client, "students", course="Load Testing")
        self.owns_ticket = False

    @tag("duplicate")
    @task
    def buy_same_ticket(self):
        if not TARGET_EVENT_ID or not self.headers:
            return

        with self.client.post(f"/api/events/{TARGET_EVENT_ID}/purchase",
            json={"quantity": 1},
            headers=self.headers,
            name="/api/events/{id}/purchase",
            catch_response=True,
        ) as resp:
            if resp.status_code == 200:
                if self.owns_ticket:
                    resp.failure("Second ticket sold to the same buyer")
                else:
                    self.owns_ticket = True
                    resp.success()
            elif resp.status_code == 400:
                resp.success()  # Expected: already purchased
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false, run again

    Compare avg response time, requests/sec and P95/P99 latency.
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events_cached(self):
        resp = self.client.get("/api/events/all", name="/api/events/all [cached]")
        if resp.status_code == 200:
            for event in resp.json()[:50]:
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @tag("throughput", "read")
    @task(3)
    def get_event_detail(self):
        if EVENT_IDS:
            self.client.get(f"/api/events/{random.choice(EVENT_IDS)}", name="/api/events/{id}")

    @tag("throughput", "read")
    @task(2)
    def list_clubs(self):
        self.client.get("/api/clubs/all")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    The service must answer with proper error codes, never 500.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = signup(self.client, "students", course="Edge Cases")

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def missing_event(self):
        with self.client.post("/api/events/999999/purchase", json={"quantity": 1},
            headers=self.headers, name="/api/events/[missing]/purchase", catch_response=True) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def bad_quantity(self):
        event_id = random.choice(EVENT_IDS) if EVENT_IDS else 1
        with self.client.post(f"/api/events/{event_id}/purchase", json={"quantity": random.choice([0, -5, 3])},
            headers=self.headers, name="/api/events/{id}/purchase [bad quantity]", catch_response=True) as resp:
            self._expect(resp, [400, 404])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/api/events/1/purchase", data="not json at all",
            headers={**self.headers, "Content-Type": "application/json"},
            name="/api/events/{id}/purchase [malformed]", catch_response=True) as resp:
            self._expect(resp, [400, 404])

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post("/api/events/1/purchase", json={"quantity": 1},
            name="/api/events/{id}/purchase [no auth]", catch_response=True) as resp:
            self._expect(resp, [401])

    @tag("edge")
    @task
    def student_creates_event(self):
        with self.client.post("/api/events", json={
            "name": "Nope", "date": future_date(1), "venue": "Nowhere", "price": 1,
        }, headers=self.headers, name="/api/events [as student]", catch_response=True) as resp:
            self._expect(resp, [403])


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Mostly browsing, some purchases, the occasional club creating an event.
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = signup(self.client, "students", course="Browsing")
        self.club_headers = signup(self.client, "clubs") if random.random() < 0.1 else {}

    @task(50)
    def browse_events(self):
        resp = self.client.get("/api/events/all")
        if resp.status_code == 200:
            for event in resp.json()[:50]:
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(20)
    def view_event(self):
        if EVENT_IDS:
            self.client.get(f"/api/events/{random.choice(EVENT_IDS)}", name="/api/events/{id}")

    @task(10)
    def buy_ticket(self):
        if EVENT_IDS and self.headers:
            with self.client.post(f"/api/events/{random.choice(EVENT_IDS)}/purchase",
                json={"quantity": 1}, headers=self.headers,
                name="/api/events/{id}/purchase", catch_response=True) as resp:
                if resp.status_code in (200, 400, 404):
                    resp.success()

    @task(5)
    def my_tickets(self):
        if self.headers:
            self.client.get("/api/events/user/purchased-events", headers=self.headers)

    @task(3)
    def create_event(self):
        if self.club_headers:
            resp = self.client.post("/api/events", json={
                "name": f"Event {random.randint(1, 10000)}",
                "date": future_date(random.randint(1, 90)),
                "venue": "Venue",
                "price": random.choice([0, 50, 100]),
            }, headers=self.club_headers)
            if resp.status_code == 201:
                EVENT_IDS.append(resp.json()["id"])
