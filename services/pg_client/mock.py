import uuid
from datetime import datetime, timezone

import structlog

from .base import Approved, PgApproveRequest, PgClient

logger = structlog.get_logger(__name__)


class MockPgClient(PgClient):
    """Local development processor: approves everything for odd partner ids."""

    name = "mock_pg"

    def supports(self, partner_id: int) -> bool:
        return partner_id % 2 == 1

    async def approve(self, request: PgApproveRequest) -> Approved:
        # Simulate payment processing logic
        approval_code = f"MOCK-{uuid.uuid4().hex[:12].upper()}"
        logger.info("mock_pg_approved", partner_id=request.partner_id, approval_code=approval_code)
        return Approved(
            approval_code=approval_code,
            approved_at=datetime.now(timezone.utc),
        )
