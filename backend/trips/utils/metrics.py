"""Prometheus metrics for schedule generation and component cleanup."""

from prometheus_client import Counter, Histogram

# Schedule generation metrics
schedule_generation_ms = Histogram(
    "schedule_generation_ms",
    "Derived schedule generation latency in milliseconds",
    ["kind"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)

schedule_children_created_total = Counter(
    "schedule_children_created_total",
    "Total derived child components created",
    ["kind"],
)

schedule_children_deleted_total = Counter(
    "schedule_children_deleted_total",
    "Total derived child components deleted by regeneration",
    ["kind"],
)

component_cleanup_failures_total = Counter(
    "component_cleanup_failures_total",
    "Total failed post-delete attachment cleanups",
)


class PrometheusScheduleMetrics:
    """Prometheus-based schedule metrics implementation."""

    def record_generation(self, kind: str, latency_ms: float, created: int, deleted: int) -> None:
        """Record one generation pass."""
        schedule_generation_ms.labels(kind=kind).observe(latency_ms)
        schedule_children_created_total.labels(kind=kind).inc(created)
        schedule_children_deleted_total.labels(kind=kind).inc(deleted)

    def inc_cleanup_failure(self) -> None:
        component_cleanup_failures_total.inc()
