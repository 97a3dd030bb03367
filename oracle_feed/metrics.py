"""Prometheus-backed and no-op metrics for price pulls."""
from __future__ import annotations

from typing import Protocol

from prometheus_client import CollectorRegistry, Counter, Histogram


class PullMetrics(Protocol):
    """Capability a puller reports its calls, latency and failures to."""

    def record_call(self, provider: str) -> None: ...

    def observe_latency(self, provider: str, seconds: float) -> None: ...

    def record_failure(self, provider: str, reason: str) -> None: ...


class NoopMetrics:
    """Discards everything; the default for pullers and tests."""

    def record_call(self, provider: str) -> None:
        pass

    def observe_latency(self, provider: str, seconds: float) -> None:
        pass

    def record_failure(self, provider: str, reason: str) -> None:
        pass


class PrometheusPullMetrics:
    """Collects pull metrics in a Prometheus registry."""

    def __init__(self, *, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.pull_calls_total = Counter(
            "oracle_feed_pull_calls_total",
            "Total count of asset pair pulls started.",
            ("provider",),
            registry=self.registry,
        )
        self.pull_failures_total = Counter(
            "oracle_feed_pull_failures_total",
            "Total count of failed asset pair pulls, by failure reason.",
            ("provider", "reason"),
            registry=self.registry,
        )
        self.pull_latency_seconds = Histogram(
            "oracle_feed_pull_latency_seconds",
            "Wall time of a single asset pair pull.",
            ("provider",),
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, float("inf")),
            registry=self.registry,
        )

    def record_call(self, provider: str) -> None:
        self.pull_calls_total.labels(provider=provider).inc()

    def observe_latency(self, provider: str, seconds: float) -> None:
        self.pull_latency_seconds.labels(provider=provider).observe(seconds)

    def record_failure(self, provider: str, reason: str) -> None:
        self.pull_failures_total.labels(provider=provider, reason=reason).inc()
