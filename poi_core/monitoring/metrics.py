"""
Metrics module for poi-consensus with its own Prometheus registry.
"""
import threading
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest


class MetricsManager:
    """Singleton metrics manager that handles the Prometheus registry."""

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if hasattr(self, "_initialized") and self._initialized:
            return

        self._initialized = True
        self._registry = None
        self._metrics = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Setup metrics on a fresh registry."""
        self._registry = CollectorRegistry()

        self._metrics = {
            "weight_submissions_total": Counter(
                "weight_submissions_total",
                "Weight submissions by outcome",
                ["status"],
                registry=self._registry,
            ),
            "finalizations_total": Counter(
                "finalizations_total",
                "Epoch finalize attempts by outcome",
                ["status"],
                registry=self._registry,
            ),
            "finalize_duration_seconds": Histogram(
                "finalize_duration_seconds",
                "Duration of successful finalizations in seconds",
                registry=self._registry,
            ),
            "finalized_miners": Gauge(
                "finalized_miners",
                "Miner consensus entries in the last finalized epoch",
                registry=self._registry,
            ),
            "finalized_validators": Gauge(
                "finalized_validators",
                "Validator trust entries in the last finalized epoch",
                registry=self._registry,
            ),
        }

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def get_registry(self):
        """Get the metrics registry."""
        return self._registry

    def reset_metrics(self):
        """Reset all metrics - useful for testing."""
        with self._lock:
            self._setup_metrics()

    def record_submission(self, status: str):
        self._metrics["weight_submissions_total"].labels(status=status).inc()

    def record_finalization(self, status: str, duration: Optional[float] = None):
        self._metrics["finalizations_total"].labels(status=status).inc()
        if duration is not None:
            self._metrics["finalize_duration_seconds"].observe(duration)

    def update_epoch_sizes(self, miners: int, validators: int):
        self._metrics["finalized_miners"].set(miners)
        self._metrics["finalized_validators"].set(validators)

    def export(self) -> bytes:
        """Prometheus text exposition of the registry."""
        return generate_latest(self._registry)


def get_metrics_manager() -> MetricsManager:
    return MetricsManager()
