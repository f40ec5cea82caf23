"""Prometheus metrics for monitoring transfers, applications and calculator usage"""

from prometheus_client import Counter, Histogram

# Transfer metrics
transfer_counter = Counter(
    "stonebridge_transfer_total",
    "Transfers attempted",
    ["outcome"],  # completed | insufficient_funds | not_found | invalid | error
)

transfer_amount_histogram = Histogram(
    "stonebridge_transfer_amount_dollars",
    "Amount moved by completed transfers",
    buckets=[10, 50, 100, 500, 1_000, 5_000, 10_000, 50_000],
)

retired_funds_counter = Counter(
    "stonebridge_transfer_retired_cents_total",
    "Cents debited toward account numbers that do not exist",
)

# Application metrics
application_counter = Counter(
    "stonebridge_application_total",
    "Loan and mortgage applications",
    ["kind", "outcome"],  # kind: loan | mortgage; outcome: submitted | out_of_range | not_found
)

# Calculator metrics
calculation_counter = Counter(
    "stonebridge_calculation_total",
    "Amortization calculations served",
    ["kind", "outcome"],  # kind: loan | mortgage; outcome: ok | invalid
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transfer(outcome: str, amount_cents: int = 0, retired: bool = False) -> None:
    """Record a transfer attempt; amounts only for completed transfers"""
    transfer_counter.labels(outcome=outcome).inc()
    if outcome != "completed":
        return

    transfer_amount_histogram.observe(amount_cents / 100)
    if retired:
        retired_funds_counter.inc(amount_cents)
