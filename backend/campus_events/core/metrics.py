"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Purchase metrics
purchase_attempts = Counter(
    'ticket_purchase_attempts_total',
    'Total ticket purchase attempts',
    ['status']  # success, duplicate, not_found, invalid, forbidden
)

purchase_latency = Histogram(
    'ticket_purchase_latency_seconds',
    'Ticket purchase latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Event lifecycle metrics
event_mutations = Counter(
    'event_mutations_total',
    'Event create/update/delete operations',
    ['operation', 'actor']  # create/update/delete, club/admin
)

# Moderation metrics
admin_actions = Counter(
    'admin_actions_total',
    'Audited administrative mutations',
    ['action']
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set/invalidate, hit/miss/error
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_purchase_attempt(status: str):
    """Status: success, duplicate, not_found, invalid, forbidden"""
    purchase_attempts.labels(status=status).inc()


def record_event_mutation(operation: str, actor: str):
    event_mutations.labels(operation=operation, actor=actor).inc()


def record_admin_action(action: str):
    admin_actions.labels(action=action).inc()


def record_cache_operation(operation: str, result: str):
    cache_operations.labels(operation=operation, result=result).inc()
