"""Prometheus metrics for postings, rejections and HTTP latency"""

from prometheus_client import Counter, Histogram

transactions_posted_counter = Counter(
    "split_ledger_transactions_posted_total",
    "Transactions posted to the ledger",
    ["kind"],  # GROUP | SETTLEMENT
)

transaction_amount_histogram = Histogram(
    "split_ledger_transaction_amount_dollars",
    "Posted transaction amounts",
    ["kind"],
    buckets=[1, 5, 10, 25, 50, 100, 250, 500, 1000, 5000],
)

rejections_counter = Counter(
    "split_ledger_rejections_total",
    "Posting requests rejected before any entry was appended",
    ["reason"],  # invalid_amount | self_settlement | over_settlement | idempotency_conflict | ...
)

idempotent_replay_counter = Counter(
    "split_ledger_idempotent_replays_total",
    "Requests answered from the idempotency cache",
)

seed_counter = Counter(
    "split_ledger_seed_total",
    "Ledger resets with seeded wallets",
)

request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_posting(kind: str, amount_cents: int) -> None:
    """Record a successful posting"""
    transactions_posted_counter.labels(kind=kind).inc()
    transaction_amount_histogram.labels(kind=kind).observe(amount_cents / 100)


def record_rejection(reason: str) -> None:
    rejections_counter.labels(reason=reason).inc()
