"""
Payment use cases.

pay(): partner -> fee policy -> fee -> processor -> approve -> persist.
Every step before persistence may abort the attempt; nothing is written
unless the processor returned an approval or an explicit decline.

query(): one page plus a summary over the whole filtered set.
"""
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import structlog

from services.partner_service.fee_policy import FeePolicyResolver, calculate_fee
from services.partner_service.repository import PartnerRepository
from services.pg_client.base import (
    Approved,
    CardData,
    ConfigurationError,
    Declined,
    PgApproveRequest,
    TransportFault,
)
from services.pg_client.registry import PgClientRegistry
from shared.errors import (
    InactivePartnerError,
    PaymentError,
    ProcessorConfigurationError,
    ProcessorFaultError,
    UnknownPartnerError,
)
from shared.observability.metrics import (
    pg_approval_duration_seconds,
    pg_payment_rejected_total,
    pg_payment_total,
    pg_query_total,
)

from .cursor import decode_cursor, encode_cursor, truncate_to_millis
from .models import Payment, PaymentStatus
from .repository import (
    PaymentQuery,
    PaymentRepository,
    PaymentSummaryFilter,
    PaymentSummaryProjection,
)
from .schemas import PaymentCreate

logger = structlog.get_logger(__name__)


class PaymentService:

    def __init__(
        self,
        partner_repository: PartnerRepository,
        fee_policy_resolver: FeePolicyResolver,
        payment_repository: PaymentRepository,
        pg_registry: PgClientRegistry,
    ):
        self.partner_repository = partner_repository
        self.fee_policy_resolver = fee_policy_resolver
        self.payment_repository = payment_repository
        self.pg_registry = pg_registry

    async def pay(self, command: PaymentCreate) -> Payment:
        try:
            return await self._pay(command)
        except PaymentError as exc:
            pg_payment_rejected_total.labels(reason=exc.code).inc()
            raise

    async def _pay(self, command: PaymentCreate) -> Payment:
        log = logger.bind(partner_id=command.partner_id)

        # 1. Partner
        partner = await self.partner_repository.find_by_id(command.partner_id)
        if partner is None:
            log.warning("payment_rejected", reason="unknown_partner")
            raise UnknownPartnerError(command.partner_id)
        if not partner.active:
            log.warning("payment_rejected", reason="inactive_partner")
            raise InactivePartnerError(partner.id)

        # 2-3. Fee, captured now so later policy changes never touch this record
        policy = await self.fee_policy_resolver.resolve(partner.id)
        fee = calculate_fee(command.amount, policy)

        # 4. Processor
        pg_client = self.pg_registry.select(partner.id)

        # 5. Approval
        card = CardData(
            card_number=command.card_number,
            birth_date=command.birth_date,
            expiry=command.expiry,
            password=command.password,
        )
        started = time.perf_counter()
        outcome = await pg_client.approve(
            PgApproveRequest(partner_id=partner.id, amount=command.amount, card=card)
        )
        pg_approval_duration_seconds.labels(processor=pg_client.name).observe(time.perf_counter() - started)

        if isinstance(outcome, ConfigurationError):
            log.error("processor_misconfigured", processor=pg_client.name, detail=outcome.detail)
            raise ProcessorConfigurationError(outcome.detail)
        if isinstance(outcome, TransportFault):
            log.error("processor_fault", processor=pg_client.name, detail=outcome.detail)
            raise ProcessorFaultError(outcome.detail)

        # 6. Persist exactly once
        now = truncate_to_millis(datetime.now(timezone.utc))
        payment = Payment(
            partner_id=partner.id,
            amount=command.amount,
            applied_fee_rate=fee.rate,
            fee_amount=fee.fee,
            net_amount=fee.net,
            card_bin=card.bin,
            card_last4=card.last4,
            created_at=now,
            updated_at=now,
        )
        if isinstance(outcome, Approved):
            payment.status = outcome.status
            payment.approval_code = outcome.approval_code
            payment.approved_at = outcome.approved_at
        elif isinstance(outcome, Declined):
            log.warning("payment_declined", processor=pg_client.name,
                        reason=outcome.reason, error_code=outcome.error_code)
            payment.status = PaymentStatus.DECLINED
        else:
            raise TypeError(f"Unknown approval outcome: {outcome!r}")

        saved = await self.payment_repository.save(payment)
        pg_payment_total.labels(status=saved.status.value).inc()
        log.info(
            "payment_recorded",
            payment_id=saved.id,
            processor=pg_client.name,
            status=saved.status.value,
            amount=str(saved.amount),
            fee_amount=str(saved.fee_amount),
            net_amount=str(saved.net_amount),
        )
        # 7.
        return saved


@dataclass(frozen=True)
class QueryFilter:
    partner_id: Optional[int] = None
    status: Optional[PaymentStatus] = None
    from_: Optional[datetime] = None
    to: Optional[datetime] = None
    cursor: Optional[str] = None
    limit: int = 20


@dataclass(frozen=True)
class QueryResult:
    items: list
    summary: PaymentSummaryProjection
    next_cursor: Optional[str]
    has_next: bool


class QueryPaymentsService:
    """
    Payment history with statistics.

    The summary is fetched with the same filter minus cursor/limit, so it is
    the same for every page. Page and summary are two reads; payments are
    append-only, so a few milliseconds of skew between them is accepted.
    """

    def __init__(self, payment_repository: PaymentRepository):
        self.payment_repository = payment_repository

    async def query(self, query_filter: QueryFilter) -> QueryResult:
        cursor_created_at, cursor_id = decode_cursor(query_filter.cursor)
        if query_filter.cursor and query_filter.cursor.strip() and cursor_id is None:
            logger.info("payment_cursor_ignored", reason="malformed")
            pg_query_total.labels(cursor="invalid").inc()
        else:
            pg_query_total.labels(cursor="valid" if cursor_id is not None else "none").inc()

        page = await self.payment_repository.find_by(
            PaymentQuery(
                partner_id=query_filter.partner_id,
                status=query_filter.status,
                from_=query_filter.from_,
                to=query_filter.to,
                limit=query_filter.limit,
                cursor_created_at=cursor_created_at,
                cursor_id=cursor_id,
            )
        )
        summary = await self.payment_repository.summary(
            PaymentSummaryFilter(
                partner_id=query_filter.partner_id,
                status=query_filter.status,
                from_=query_filter.from_,
                to=query_filter.to,
            )
        )

        next_cursor = encode_cursor(page.next_cursor_created_at, page.next_cursor_id)
        return QueryResult(
            items=page.items,
            summary=summary,
            next_cursor=next_cursor,
            has_next=page.has_next and next_cursor is not None,
        )
