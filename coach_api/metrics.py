from prometheus_client import Counter, Histogram


# HTTP request metrics
HTTP_REQUESTS_TOTAL = Counter(
    "speechcoach_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status_class"],
)
HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "speechcoach_http_request_duration_seconds",
    "Duration of HTTP requests in seconds",
    ["method", "path"],
)

ANALYSES_TOTAL = Counter(
    "speechcoach_analyses_total",
    "Voice recordings analyzed",
    ["provider"],
)

# source: ai | fallback_no_credentials | fallback_error
MENTOR_RESPONSES_TOTAL = Counter(
    "speechcoach_mentor_responses_total",
    "Mentor chat replies by source",
    ["source"],
)
MENTOR_UPSTREAM_SECONDS = Histogram(
    "speechcoach_mentor_upstream_seconds",
    "Duration of upstream chat completion calls in seconds",
    ["provider", "model"],
)
