"""
Prometheus metrics for the Fraterny influencer service
Following standard naming conventions: https://prometheus.io/docs/practices/naming/
"""
import time
from contextlib import contextmanager
from typing import Optional

from prometheus_client import Counter, Gauge, Histogram, Info

# ============================================================================
# HTTP Metrics
# ============================================================================

http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint'],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

http_response_size_bytes = Histogram(
    'http_response_size_bytes',
    'HTTP response size in bytes',
    ['method', 'endpoint'],
    buckets=[100, 1000, 10000, 100000, 1000000, 10000000]
)

# ============================================================================
# Influencer Metrics
# ============================================================================

# result: created, duplicate, invalid, error
influencer_creations_total = Counter(
    'influencer_creations_total',
    'Influencer creation attempts by result',
    ['result']
)

# result: success, error
influencer_list_requests_total = Counter(
    'influencer_list_requests_total',
    'Influencer list queries by result',
    ['result']
)

influencer_list_rows = Histogram(
    'influencer_list_rows',
    'Rows returned per influencer list page',
    buckets=[0, 1, 5, 10, 25, 50, 100, 250]
)

# ============================================================================
# Database Metrics
# ============================================================================

database_query_duration_seconds = Histogram(
    'database_query_duration_seconds',
    'Database query execution time in seconds',
    ['query_type', 'table'],
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# ============================================================================
# Application Info & Health
# ============================================================================

app_info = Info(
    'app',
    'Application information'
)

app_uptime_seconds = Gauge(
    'app_uptime_seconds',
    'Application uptime in seconds'
)

# check_type: database
health_check_status = Gauge(
    'health_check_status',
    'Health check status (1 = healthy, 0 = unhealthy)',
    ['check_type']
)

# ============================================================================
# Helper Functions
# ============================================================================

@contextmanager
def track_database_query(query_type: str, table: str):
    """Time the enclosed statement into database_query_duration_seconds"""
    started = time.perf_counter()
    try:
        yield
    finally:
        database_query_duration_seconds.labels(query_type=query_type, table=table).observe(
            time.perf_counter() - started
        )


def observe_http_request(method: str, endpoint: str, status: int, duration: float,
                         size: Optional[str] = None):
    """Record one served request; size is the raw content-length header"""
    http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)
    if size and size.isdigit():
        http_response_size_bytes.labels(method=method, endpoint=endpoint).observe(int(size))


def set_app_info(name: str, version: str, environment: str):
    app_info.info({
        'version': version,
        'name': name,
        'environment': environment
    })


# Initialize app start time for uptime tracking
APP_START_TIME = time.time()

def update_uptime():
    """Update application uptime metric"""
    app_uptime_seconds.set(time.time() - APP_START_TIME)
