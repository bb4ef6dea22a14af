"""Prometheus metrics for webhook authentication.

Metrics Defined:
- webhook_deliveries_total: Counter of deliveries by outcome
- webhook_authentication_duration_seconds: Histogram of time spent in
  authenticate(), including body capture
- webhook_payload_bytes: Histogram of accepted payload sizes

Outcomes are "accepted" or the snake_case name of the rejection class,
e.g. "invalid_signature".
"""

import logging
import re
from typing import Optional

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


logger = logging.getLogger(__name__)


DEFAULT_DURATION_BUCKETS = (
    0.001,
    0.005,
    0.01,
    0.05,
    0.1,
    0.5,
    1.0,
    5.0,
    10.0,
)

DEFAULT_PAYLOAD_BUCKETS = (
    256,
    1024,
    4096,
    16384,
    65536,
    262144,
    1048576,
    26214400,
)

ACCEPTED = "accepted"


def outcome_for(error: BaseException) -> str:
    """Map a rejection to its outcome label, e.g. InvalidSignatureError -> invalid_signature."""
    name = type(error).__name__
    if name.endswith("Error"):
        name = name[: -len("Error")]
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


class AuthMetrics:
    """Container for webhook authentication metrics.

    Pass a custom registry for testing.

    Attributes:
        registry: The Prometheus registry for these metrics.
        deliveries_total: Counter of deliveries, labelled by outcome.
        duration_seconds: Histogram of authentication time.
        payload_bytes: Histogram of accepted payload sizes.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or REGISTRY

        self.deliveries_total = Counter(
            "webhook_deliveries_total",
            "Total number of webhook deliveries by authentication outcome",
            labelnames=["outcome"],
            registry=self.registry,
        )

        self.duration_seconds = Histogram(
            "webhook_authentication_duration_seconds",
            "Time spent authenticating webhook deliveries in seconds",
            buckets=DEFAULT_DURATION_BUCKETS,
            registry=self.registry,
        )

        self.payload_bytes = Histogram(
            "webhook_payload_bytes",
            "Size of accepted webhook payloads in bytes",
            buckets=DEFAULT_PAYLOAD_BUCKETS,
            registry=self.registry,
        )

    def record_accepted(self, payload_size: int, duration_seconds: float) -> None:
        self.deliveries_total.labels(outcome=ACCEPTED).inc()
        self.payload_bytes.observe(payload_size)
        self.duration_seconds.observe(duration_seconds)

    def record_rejected(self, error: BaseException, duration_seconds: float) -> None:
        self.deliveries_total.labels(outcome=outcome_for(error)).inc()
        self.duration_seconds.observe(duration_seconds)


# Global metrics instance for the default registry
_default_metrics: Optional[AuthMetrics] = None


def get_metrics(registry: Optional[CollectorRegistry] = None) -> AuthMetrics:
    """Get the global metrics instance, or a new one for a custom registry."""
    global _default_metrics

    if registry is not None:
        return AuthMetrics(registry=registry)

    if _default_metrics is None:
        _default_metrics = AuthMetrics()

    return _default_metrics


def generate_metrics_output(registry: Optional[CollectorRegistry] = None) -> bytes:
    """Generate Prometheus text output for the /metrics endpoint."""
    return generate_latest(registry or REGISTRY)
