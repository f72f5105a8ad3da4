"""
Prometheus metrics collection.
"""

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
)

from lsp_queue.constants import (
    METRIC_DISPATCH_CYCLES,
    METRIC_JOBS_COALESCED,
    METRIC_JOBS_DISPATCHED,
    METRIC_JOBS_SUBMITTED,
    METRIC_QUEUE_DEPTH,
    METRIC_RESOURCE_LOAD_FAILURES,
    METRIC_SHUTDOWNS,
)

# Global metrics instance
_metrics: "MetricsCollector | None" = None


class MetricsCollector:
    """
    Prometheus metrics collector for the job queue.

    Collects metrics for:
    - Lane depth
    - Job submissions, coalescing and dispatch
    - Resource load failures
    - Dispatch cycles and shutdowns
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """
        Initialize the metrics collector.

        Args:
            registry: Optional custom registry. Uses default if not provided.
        """
        self._registry = registry or REGISTRY

        self.queue_depth = Gauge(
            METRIC_QUEUE_DEPTH,
            "Number of jobs waiting in a lane",
            ["queue", "lane"],
            registry=self._registry,
        )

        self.jobs_submitted = Counter(
            METRIC_JOBS_SUBMITTED,
            "Total number of jobs submitted",
            ["request", "lane"],
            registry=self._registry,
        )

        self.jobs_coalesced = Counter(
            METRIC_JOBS_COALESCED,
            "Total number of pending priority jobs replaced by a newer one",
            ["request"],
            registry=self._registry,
        )

        self.jobs_dispatched = Counter(
            METRIC_JOBS_DISPATCHED,
            "Total number of jobs handed to the transport",
            ["request"],
            registry=self._registry,
        )

        self.resource_load_failures = Counter(
            METRIC_RESOURCE_LOAD_FAILURES,
            "Total number of jobs skipped because a resource could not be read",
            ["request"],
            registry=self._registry,
        )

        self.dispatch_cycles = Counter(
            METRIC_DISPATCH_CYCLES,
            "Total number of dispatch cycles started",
            registry=self._registry,
        )

        self.shutdowns = Counter(
            METRIC_SHUTDOWNS,
            "Total number of completed queue shutdowns",
            registry=self._registry,
        )

    def record_job_submitted(self, request: str, lane: str) -> None:
        """Record a job submission."""
        self.jobs_submitted.labels(request=request, lane=lane).inc()

    def record_job_coalesced(self, request: str) -> None:
        """Record a pending job being superseded."""
        self.jobs_coalesced.labels(request=request).inc()

    def record_job_dispatched(self, request: str) -> None:
        """Record a job sent to the worker."""
        self.jobs_dispatched.labels(request=request).inc()

    def record_resource_load_failure(self, request: str) -> None:
        """Record a job dropped because its resource was unreadable."""
        self.resource_load_failures.labels(request=request).inc()

    def record_dispatch_cycle(self) -> None:
        """Record the start of a dispatch cycle."""
        self.dispatch_cycles.inc()

    def record_shutdown(self) -> None:
        """Record a completed shutdown."""
        self.shutdowns.inc()

    def update_queue_depth(self, queue: str, lane: str, depth: int) -> None:
        """Update the depth of one lane of a named queue."""
        self.queue_depth.labels(queue=queue, lane=lane).set(depth)


def setup_metrics() -> MetricsCollector:
    """
    Set up and return the metrics collector.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def get_metrics() -> MetricsCollector:
    """
    Get the metrics collector instance, creating it on first use.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    if _metrics is None:
        return setup_metrics()
    return _metrics
