"""Prometheus metrics for report volume, oracle health and cache efficiency"""

from prometheus_client import Counter, Histogram

from banking_intel.domain.models import Report

# Report metrics
report_counter = Counter(
    "banking_intel_reports_total",
    "Total reports generated",
    ["format", "detailed"],
)

section_fallback_counter = Counter(
    "banking_intel_section_fallbacks_total",
    "Report sections rendered from local fallback text",
    ["section"],
)

# Oracle metrics
oracle_latency_histogram = Histogram(
    "oracle_latency_seconds",
    "Text-generation oracle response time",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

oracle_failure_counter = Counter(
    "oracle_failures_total",
    "Failed text-generation calls",
    ["section"],
)

# Bank API metrics
bank_fetch_failures_counter = Counter(
    "bank_fetch_failures_total",
    "Failed bank API calls",
)

# Cache and bulk metrics
cache_lookup_counter = Counter(
    "report_cache_lookups_total",
    "Report cache lookups",
    ["result"],  # hit | miss
)

bulk_outcome_counter = Counter(
    "bulk_report_outcomes_total",
    "Per-user outcomes of bulk report runs",
    ["outcome"],  # success | failure
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_report(report: Report, detailed: bool) -> None:
    """Record report volume and which sections fell back to local text"""
    report_counter.labels(format=report.format.value, detailed=str(detailed).lower()).inc()

    for section in report.sections:
        if section.used_fallback:
            section_fallback_counter.labels(section=section.id).inc()
