import os

os.environ.setdefault("INTERNAL_API_KEY", "test-internal-key")

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from shared.config.database import DB_SCHEMA, Base
from services.partner_service.models import FeePolicy, Partner
from services.payment_service.models import Payment, PaymentStatus
from services.pg_client.base import PgClient


@pytest.fixture
async def db_session(tmp_path):
    """Real SQL against SQLite; the Postgres schema is translated away."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'pg_gateway.db'}",
        execution_options={"schema_translate_map": {DB_SCHEMA: None}},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


def make_partner(partner_id: int = 1, active: bool = True) -> Partner:
    return Partner(id=partner_id, code=f"P{partner_id}", name=f"Partner {partner_id}", active=active)


def make_policy(partner_id: int, percentage: str, fixed_fee=None,
                effective_from: datetime = datetime(2020, 1, 1, tzinfo=timezone.utc)) -> FeePolicy:
    return FeePolicy(
        partner_id=partner_id,
        effective_from=effective_from,
        percentage=Decimal(percentage),
        fixed_fee=Decimal(fixed_fee) if fixed_fee is not None else None,
    )


def make_payment(payment_id=None, partner_id: int = 1, amount: str = "10000",
                 created_at: datetime = datetime(2026, 1, 14, 12, 0, tzinfo=timezone.utc),
                 payment_status: PaymentStatus = PaymentStatus.APPROVED) -> Payment:
    gross = Decimal(amount)
    fee = (gross * Decimal("0.0235")).quantize(Decimal("1"))
    return Payment(
        id=payment_id,
        partner_id=partner_id,
        amount=gross,
        applied_fee_rate=Decimal("0.0235"),
        fee_amount=fee,
        net_amount=gross - fee,
        card_bin="111111",
        card_last4="1111",
        approval_code=f"APPROVAL-{payment_id}",
        approved_at=created_at,
        status=payment_status,
        created_at=created_at,
        updated_at=created_at,
    )


class StubPgClient(PgClient):
    """Processor double: fixed outcome, partner predicate, records requests."""

    def __init__(self, outcome, predicate=lambda partner_id: True, name="stub_pg"):
        self.outcome = outcome
        self.predicate = predicate
        self.name = name
        self.requests = []

    def supports(self, partner_id: int) -> bool:
        return self.predicate(partner_id)

    async def approve(self, request):
        self.requests.append(request)
        return self.outcome
