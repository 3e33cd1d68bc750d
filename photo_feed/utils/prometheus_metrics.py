"""
Prometheus metrics for stability, availability and business events.

- FastAPI: request count, latency (Instrumentator)
- Node/instance: app_info
- Stability: exceptions_total, db_errors_total
- HA: ready gauge (1=up, 0=shutting down), in_flight_requests
- Identity: registration/login/recovery/rename outcomes, login latency
- Catalog: photo uploads, like toggles
"""
import socket

from prometheus_client import REGISTRY, Counter, Gauge, Histogram
from prometheus_fastapi_instrumentator import Instrumentator

from photo_feed.config import get_settings

# --- Stability ---
exceptions_total = Counter(
    "photo_feed_exceptions_total",
    "Total unhandled exceptions",
    registry=REGISTRY,
)
db_errors_total = Counter(
    "photo_feed_db_errors_total",
    "Total database session/transaction errors",
    registry=REGISTRY,
)

# --- HA ---
ready = Gauge(
    "photo_feed_ready",
    "Application ready (1=up, 0=shutting down)",
    registry=REGISTRY,
)

# 진행 중인 요청 수 (Graceful shutdown용)
in_flight_requests = Gauge(
    "photo_feed_in_flight_requests",
    "Number of requests currently being processed",
    registry=REGISTRY,
)

# --- Rate Limiting ---
rate_limit_hits_total = Counter(
    "photo_feed_rate_limit_hits_total",
    "Total number of rate limit hits (requests blocked)",
    ["endpoint"],
    registry=REGISTRY,
)

# --- Auth ---
login_duration_seconds = Histogram(
    "photo_feed_login_duration_seconds",
    "Login request duration in seconds",
    ["result"],  # success | not_found | wrong_password | error
    buckets=(0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 3.0, 5.0),
    registry=REGISTRY,
)
user_registration_total = Counter(
    "photo_feed_user_registration_total",
    "Total user registration attempts",
    ["result"],  # success | conflict
    registry=REGISTRY,
)
user_login_total = Counter(
    "photo_feed_user_login_total",
    "Total login attempts",
    ["result"],  # success | not_found | wrong_password | error
    registry=REGISTRY,
)
user_recovery_total = Counter(
    "photo_feed_user_recovery_total",
    "Total recovery-by-answer attempts",
    ["result"],  # success | failure
    registry=REGISTRY,
)
user_rename_total = Counter(
    "photo_feed_user_rename_total",
    "Total username change attempts",
    ["result"],  # renamed | noop | conflict | not_found
    registry=REGISTRY,
)

# --- Catalog ---
photo_upload_total = Counter(
    "photo_feed_photo_upload_total",
    "Total photo upload attempts",
    ["result"],  # success | failure
    registry=REGISTRY,
)
photo_upload_file_size_bytes = Histogram(
    "photo_feed_photo_upload_file_size_bytes",
    "Size of stored upload files in bytes",
    ["field"],  # photo | profilePic
    buckets=(64 * 1024, 256 * 1024, 1024 * 1024, 4 * 1024 * 1024, 10 * 1024 * 1024),
    registry=REGISTRY,
)
like_toggle_total = Counter(
    "photo_feed_like_toggle_total",
    "Total like toggles by outcome",
    ["result"],  # liked | unliked | not_found
    registry=REGISTRY,
)

app_info = Gauge(
    "photo_feed_app_info",
    "Application and node identity (labels only, value is 1)",
    ["node", "app", "version", "environment"],
    registry=REGISTRY,
)


def _node_identity() -> str:
    """Node/instance identifier: INSTANCE_IP env or hostname."""
    settings = get_settings()
    if settings.instance_ip:
        return settings.instance_ip
    try:
        return socket.gethostname()
    except OSError:
        return "unknown"


def setup_prometheus(app) -> None:
    """
    Register Prometheus instrumentation and expose /metrics.
    Must be called once per process (metrics live in the global REGISTRY).
    """
    settings = get_settings()
    app_info.labels(
        node=_node_identity(),
        app=settings.app_name,
        version=settings.app_version,
        environment=settings.environment.value,
    ).set(1)

    # status 라벨을 2xx 대신 구체 코드(200, 201, 404, 500 등)로 노출
    Instrumentator(should_group_status_codes=False).instrument(app).expose(
        app, endpoint="/metrics"
    )
