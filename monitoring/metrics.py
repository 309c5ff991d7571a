"""
Prometheus metrics for the simulated resource service.

Tracks:
- Resources created by kind
- Idempotency replays
- Simulated completions by outcome and their delays
- Simulated deletions
- Backpressure decisions and in-flight counter
- Outstanding background simulations
"""
from prometheus_client import Counter, Gauge, Histogram

# Resource metrics
resources_created_total = Counter(
    "resources_created_total",
    "Total number of resources created",
    ["kind"],
)

resource_deletions_total = Counter(
    "resource_deletions_total",
    "Total number of resources removed by simulated deletion",
    ["kind"],
)

# Idempotency metrics
idempotency_replays_total = Counter(
    "idempotency_replays_total",
    "Total create requests answered from the idempotency cache",
    ["kind"],
)

# Simulation metrics
simulated_completions_total = Counter(
    "simulated_completions_total",
    "Total simulated completions",
    ["kind", "outcome"],  # completed, failed, cancelled, skipped
)

simulated_completion_delay_seconds = Histogram(
    "simulated_completion_delay_seconds",
    "Drawn delay of simulated completions in seconds",
    ["kind"],
    buckets=(0.0, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0),
)

pending_simulations = Gauge(
    "pending_simulations",
    "Number of outstanding background simulations",
    ["kind"],
)

# Backpressure metrics
backpressure_decisions_total = Counter(
    "backpressure_decisions_total",
    "Total backpressure admission decisions",
    ["decision"],  # accepted, rejected
)

backpressure_in_flight = Gauge(
    "backpressure_in_flight",
    "Current value of the backpressure counter",
)


class MetricsCollector:
    """Helper class for collecting metrics."""

    @staticmethod
    def record_resource_created(kind: str) -> None:
        """Record a newly created resource."""
        resources_created_total.labels(kind=kind).inc()

    @staticmethod
    def record_idempotency_replay(kind: str) -> None:
        """Record a create request answered from the idempotency cache."""
        idempotency_replays_total.labels(kind=kind).inc()

    @staticmethod
    def record_completion(kind: str, outcome: str, delay_seconds: float) -> None:
        """Record a finished simulated completion."""
        simulated_completions_total.labels(kind=kind, outcome=outcome).inc()
        simulated_completion_delay_seconds.labels(kind=kind).observe(delay_seconds)

    @staticmethod
    def record_deletion(kind: str) -> None:
        resource_deletions_total.labels(kind=kind).inc()

    @staticmethod
    def set_pending_simulations(kind: str, count: int) -> None:
        pending_simulations.labels(kind=kind).set(count)

    @staticmethod
    def record_backpressure_decision(decision: str, current: int) -> None:
        """Record an admission decision and the counter value it saw."""
        backpressure_decisions_total.labels(decision=decision).inc()
        backpressure_in_flight.set(current)

    @staticmethod
    def set_backpressure_in_flight(current: int) -> None:
        backpressure_in_flight.set(current)


# Export singleton instance
metrics = MetricsCollector()
