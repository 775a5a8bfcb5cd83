from prometheus_client import Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST
import time
from functools import wraps

# Store Metrics
tokens_total = Gauge("tokenkeep_tokens_total", "Total number of tokens")
tokens_enabled_total = Gauge("tokenkeep_tokens_enabled_total", "Number of enabled tokens")

# Authentication Metrics
token_checks_total = Counter("tokenkeep_token_checks_total", "Token authentication attempts", ["result"])

# Lifecycle Metrics
token_lifecycle_total = Counter(
    "tokenkeep_token_lifecycle_total", "Token lifecycle operations", ["operation", "status"]
)

# Listing Metrics
listing_duration_seconds = Histogram("tokenkeep_listing_duration_seconds", "Token listing duration")


def track_lifecycle(operation):
    """Count a lifecycle operation as success or error"""

    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                result = f(*args, **kwargs)
            except Exception:
                token_lifecycle_total.labels(operation=operation, status="error").inc()
                raise
            token_lifecycle_total.labels(operation=operation, status="success").inc()
            return result

        return wrapper

    return decorator


def track_duration(histogram):
    """Observe the wall time of the wrapped call"""

    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return f(*args, **kwargs)
            finally:
                histogram.observe(time.time() - start_time)

        return wrapper

    return decorator


def update_token_metrics():
    """Refresh store gauges; needs an application context."""
    from tokenkeep.models import Token

    tokens_total.set(Token.query.count())
    tokens_enabled_total.set(Token.query.filter(Token.enabled.is_(True)).count())


def metrics_snapshot():
    """Prometheus text exposition of the tokenkeep metrics"""
    update_token_metrics()
    return generate_latest(), CONTENT_TYPE_LATEST
