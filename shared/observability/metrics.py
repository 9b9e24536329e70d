from prometheus_client import Counter, Histogram

# Business Metrics
pg_payment_total = Counter(
    "pg_payment_total",
    "Payment attempts that reached a persisted terminal state",
    ["status"] # Labels: 'APPROVED', 'DECLINED', ...
)

pg_payment_rejected_total = Counter(
    "pg_payment_rejected_total",
    "Payment attempts aborted before persistence",
    ["reason"] # Labels: 'UNKNOWN_PARTNER', 'NO_FEE_POLICY', 'PROCESSOR_FAULT', ...
)

pg_approval_duration_seconds = Histogram(
    "pg_approval_duration_seconds",
    "Processor approval call duration in seconds",
    ["processor"]
)

pg_query_total = Counter(
    "pg_query_total",
    "Payment history queries served",
    ["cursor"] # Labels: 'none', 'valid', 'invalid'
)
