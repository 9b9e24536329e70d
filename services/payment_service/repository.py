from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Payment, PaymentStatus


@dataclass(frozen=True)
class PaymentSummaryFilter:
    partner_id: Optional[int] = None
    status: Optional[PaymentStatus] = None
    from_: Optional[datetime] = None
    to: Optional[datetime] = None


@dataclass(frozen=True)
class PaymentQuery:
    partner_id: Optional[int] = None
    status: Optional[PaymentStatus] = None
    from_: Optional[datetime] = None
    to: Optional[datetime] = None
    limit: int = 20
    cursor_created_at: Optional[datetime] = None
    cursor_id: Optional[int] = None


@dataclass(frozen=True)
class PaymentPage:
    items: list
    has_next: bool
    next_cursor_created_at: Optional[datetime] = None
    next_cursor_id: Optional[int] = None


@dataclass(frozen=True)
class PaymentSummaryProjection:
    count: int
    total_amount: Decimal
    total_net_amount: Decimal


def _filter_conditions(partner_id, status, from_, to) -> list:
    # from is inclusive, to is exclusive
    conditions = []
    if partner_id is not None:
        conditions.append(Payment.partner_id == partner_id)
    if status is not None:
        conditions.append(Payment.status == status)
    if from_ is not None:
        conditions.append(Payment.created_at >= from_)
    if to is not None:
        conditions.append(Payment.created_at < to)
    return conditions


class PaymentRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(self, payment: Payment) -> Payment:
        self.db.add(payment)
        await self.db.commit()
        await self.db.refresh(payment)
        return payment

    async def find_by(self, query: PaymentQuery) -> PaymentPage:
        """One page ordered by created_at DESC, id DESC, resuming after the cursor."""
        conditions = _filter_conditions(query.partner_id, query.status, query.from_, query.to)
        if query.cursor_created_at is not None and query.cursor_id is not None:
            conditions.append(
                or_(
                    Payment.created_at < query.cursor_created_at,
                    and_(Payment.created_at == query.cursor_created_at, Payment.id < query.cursor_id),
                )
            )

        stmt = select(Payment)
        if conditions:
            stmt = stmt.where(*conditions)
        stmt = stmt.order_by(Payment.created_at.desc(), Payment.id.desc()).limit(query.limit + 1)

        result = await self.db.execute(stmt)
        rows = list(result.scalars().all())

        has_next = len(rows) > query.limit
        items = rows[: query.limit]
        if not has_next:
            return PaymentPage(items=items, has_next=False)

        last = items[-1]
        return PaymentPage(
            items=items,
            has_next=True,
            next_cursor_created_at=last.created_at,
            next_cursor_id=last.id,
        )

    async def summary(self, summary_filter: PaymentSummaryFilter) -> PaymentSummaryProjection:
        """Aggregates over the whole filtered set; no cursor, no limit."""
        conditions = _filter_conditions(
            summary_filter.partner_id, summary_filter.status, summary_filter.from_, summary_filter.to
        )
        stmt = select(
            func.count(Payment.id),
            func.coalesce(func.sum(Payment.amount), 0),
            func.coalesce(func.sum(Payment.net_amount), 0),
        )
        if conditions:
            stmt = stmt.where(*conditions)

        result = await self.db.execute(stmt)
        count, total_amount, total_net_amount = result.one()
        return PaymentSummaryProjection(
            count=int(count),
            total_amount=Decimal(str(total_amount)),
            total_net_amount=Decimal(str(total_net_amount)),
        )
