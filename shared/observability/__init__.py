from .setup import setup_observability
from .metrics import (
    pg_payment_total,
    pg_payment_rejected_total,
    pg_approval_duration_seconds,
    pg_query_total,
)
