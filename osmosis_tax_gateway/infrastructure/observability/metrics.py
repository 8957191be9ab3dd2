"""Prometheus metrics for ledger paging, classification, and report exports"""

from prometheus_client import Counter, Histogram

from osmosis_tax_gateway.domain.models import TransactionType

# Ledger metrics
ledger_page_latency_histogram = Histogram(
    "ledger_page_latency_seconds",
    "Ledger transaction search page response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ledger_page_failures_counter = Counter(
    "ledger_page_failures_total",
    "Search page requests that failed and ended pagination early",
)

# Classification metrics
transactions_classified_counter = Counter(
    "transactions_classified_total",
    "Transactions normalized from ledger records",
    ["type"],  # swap | transfer | stake | ... | unknown
)

# Export metrics
report_exports_counter = Counter(
    "report_exports_total",
    "Tax reports generated",
    ["complete"],  # true | false
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_classified(tx_type: TransactionType) -> None:
    transactions_classified_counter.labels(type=tx_type.value).inc()


def record_export(complete: bool) -> None:
    """Count exports, split by whether pagination finished"""
    report_exports_counter.labels(complete=str(complete).lower()).inc()
