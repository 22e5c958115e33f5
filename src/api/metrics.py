from prometheus_client import Counter, Histogram, REGISTRY


# Already-registered metrics are reused so reloads and repeated test imports don't fail.
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "lecture_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "lecture_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

TASKS_EXTRACTED_TOTAL = get_or_create_metric(
    "lecture_tasks_extracted_total",
    "Total tasks extracted from lecture transcripts",
    Counter,
    labelnames=["strategy"],
)

EXTRACTION_FALLBACKS_TOTAL = get_or_create_metric(
    "lecture_extraction_fallbacks_total",
    "AI extractions replaced by the rule-based strategy",
    Counter,
)

PROCESSING_FAILURES_TOTAL = get_or_create_metric(
    "lecture_processing_failures_total",
    "Lectures marked failed, by processing step",
    Counter,
    labelnames=["step"],
)
