from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "path", "status"],
)
REQUEST_ERRORS = Counter(
    "http_request_errors_total",
    "HTTP requests answered with a 5xx status",
    ["method", "path", "status"],
)

# Billing core
WEBHOOK_EVENTS = Counter(
    "asaas_webhook_events_total",
    "Asaas webhook deliveries by event type and outcome",
    ["event", "outcome"],
)
CHECKOUT_PAYMENTS = Counter(
    "checkout_payments_total",
    "PIX checkout charges by outcome",
    ["outcome"],
)
