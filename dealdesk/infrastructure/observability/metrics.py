"""Prometheus metrics for monitoring underwriting verdicts and affordability searches"""

from prometheus_client import Counter, Histogram

# Underwriting metrics
underwriting_counter = Counter(
    "dealdesk_underwriting_total",
    "Total deals underwritten",
    ["verdict"],  # APPROVE | COUNTER | DECLINE
)

ltv_bucket_counter = Counter(
    "dealdesk_ltv_bucket",
    "Underwritten deals by LTV bucket",
    ["bucket"],  # cash, <=100%, 100-140%, 140-175%, >175%
)

# Affordability metrics
affordability_counter = Counter(
    "dealdesk_affordability_total",
    "Total affordability searches",
    ["outcome"],  # found | none
)

affordability_candidates_histogram = Histogram(
    "dealdesk_affordability_candidates",
    "Grid candidates evaluated per affordability search",
    buckets=[1, 10, 50, 100, 500, 1000, 5000, 10000],
)

invalid_input_counter = Counter(
    "dealdesk_invalid_input_total",
    "Requests rejected as invalid input",
    ["source"],  # schema | core
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_underwriting(verdict: str, ltv: float | None) -> None:
    """Record verdict distribution and LTV spread"""
    underwriting_counter.labels(verdict=verdict).inc()

    if ltv is None or ltv <= 0:
        bucket = "cash"
    elif ltv <= 1.0:
        bucket = "<=100%"
    elif ltv <= 1.4:
        bucket = "100-140%"
    elif ltv <= 1.75:
        bucket = "140-175%"
    else:
        bucket = ">175%"

    ltv_bucket_counter.labels(bucket=bucket).inc()


def record_affordability(found: bool, candidates_evaluated: int) -> None:
    affordability_counter.labels(outcome="found" if found else "none").inc()
    affordability_candidates_histogram.observe(candidates_evaluated)
