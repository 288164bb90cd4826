from prometheus_client import Counter, Gauge, Histogram


NAMESPACE = "pr_service"

HTTP_REQUESTS = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "path", "status"],
    namespace=NAMESPACE
)

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path", "status"],
    namespace=NAMESPACE,
    buckets=(0.01, 0.05, 0.1, 0.2, 0.3, 0.5, 1.0)
)

PR_CREATED = Counter(
    "pr_created_total",
    "Total number of created pull requests",
    namespace=NAMESPACE
)

PR_MERGED = Counter(
    "pr_merged_total",
    "Total number of merged pull requests",
    namespace=NAMESPACE
)

REVIEWERS_ASSIGNED = Histogram(
    "pr_reviewers_assigned_count",
    "Number of reviewers assigned to a new PR",
    ["team"],
    namespace=NAMESPACE,
    buckets=(0, 1, 2)
)

TEAM_MEMBERS = Gauge(
    "team_members_count",
    "Number of members in a team",
    ["team_name"],
    namespace=NAMESPACE
)

BUSINESS_ERRORS = Counter(
    "business_errors_total",
    "Business rule rejections by type",
    ["error_type"],
    namespace=NAMESPACE
)
