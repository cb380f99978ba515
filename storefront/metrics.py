from functools import wraps
from flask import request
from prometheus_client import CollectorRegistry, Histogram, Counter
from sqlalchemy import event
import time

from models import db
from storefront.services.errors import StorefrontError

# Collectors are shared by every app in the process and registered into each
# app's own registry, see collector_registry().

# Histogram buckets for DB query durations
DB_QUERY_DURATION = Histogram(
    "db_query_duration_seconds",
    "Database query duration in seconds",
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
    registry=None,
)

# Counter for HTTP errors
ERROR_COUNTER = Counter(
    "flask_error_total",
    "Count of HTTP responses with status >= 400",
    ["endpoint", "method", "code"],
    registry=None,
)

CHECKOUT_COUNTER = Counter(
    "checkout_total",
    "Checkout attempts by outcome (success or business error kind)",
    ["result"],
    registry=None,
)

CART_MUTATION_COUNTER = Counter(
    "cart_mutation_total",
    "Cart mutations by operation and outcome",
    ["operation", "result"],
    registry=None,
)

STOREFRONT_COLLECTORS = (DB_QUERY_DURATION, ERROR_COUNTER, CHECKOUT_COUNTER, CART_MUTATION_COUNTER)


def collector_registry():
    """Registry for one app: the exporter's request metrics plus the storefront collectors."""
    registry = CollectorRegistry()
    for collector in STOREFRONT_COLLECTORS:
        registry.register(collector)
    return registry


def track(counter, *labels):
    """Count a view's outcome: ``success`` or the business error kind it raised."""

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                resp = fn(*args, **kwargs)
            except StorefrontError as e:
                counter.labels(*labels, e.kind).inc()
                raise
            counter.labels(*labels, "success").inc()
            return resp
        return wrapper

    return decorator


def init_app(app):
    """Attach metric hooks to the app and database."""

    with app.app_context():
        engine = db.engine

        @event.listens_for(engine, "before_cursor_execute")
        def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            conn.info.setdefault("_query_start_time", []).append(time.time())

        @event.listens_for(engine, "after_cursor_execute")
        def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            starts = conn.info.get("_query_start_time")
            if starts:
                DB_QUERY_DURATION.observe(time.time() - starts.pop(-1))

    @app.after_request
    def track_errors(resp):
        if resp.status_code >= 400:
            endpoint = request.endpoint or "unknown"
            ERROR_COUNTER.labels(endpoint, request.method, resp.status_code).inc()
        return resp
