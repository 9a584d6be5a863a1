"""Prometheus metrics for analysis volume, forecast outcomes and ledger API health"""

from prometheus_client import Counter, Histogram

# Analysis metrics
analysis_counter = Counter(
    "ledger_insights_analysis_total",
    "Total analyses served",
    ["analysis"],  # recurring | cash_flow_forecast | spending_trends | scheduled_preview
)

forecast_status_counter = Counter(
    "ledger_insights_forecast_status_total",
    "Cash-flow forecasts by resulting status",
    ["status"],  # healthy | caution | warning
)

# Ledger API metrics
ledger_latency_histogram = Histogram(
    "ledger_request_latency_seconds",
    "Ledger API response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ledger_fetch_failures_counter = Counter(
    "ledger_fetch_failures_total",
    "Failed ledger API calls (after retries)",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_analysis(analysis: str) -> None:
    analysis_counter.labels(analysis=analysis).inc()


def record_forecast(status: str) -> None:
    """Count a completed forecast and its status"""
    record_analysis("cash_flow_forecast")
    forecast_status_counter.labels(status=status).inc()
