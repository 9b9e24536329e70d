"""
Explicit wiring of the payment use cases.

The processor registry is built once at startup and shared read-only by
every request; repositories are bound to the request's session.
"""
from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from services.partner_service.fee_policy import FeePolicyResolver
from services.partner_service.repository import FeePolicyRepository, PartnerRepository
from services.pg_client.registry import PgClientRegistry, build_pg_registry
from shared.config.database import get_db
from shared.config.settings import PgSettings, load_pg_settings

from .repository import PaymentRepository
from .service import PaymentService, QueryPaymentsService

_pg_registry: Optional[PgClientRegistry] = None


def init_pg_registry(settings: Optional[PgSettings] = None) -> PgClientRegistry:
    global _pg_registry
    if _pg_registry is None:
        _pg_registry = build_pg_registry(settings or load_pg_settings())
    return _pg_registry


async def close_pg_registry() -> None:
    global _pg_registry
    if _pg_registry is not None:
        await _pg_registry.aclose()
        _pg_registry = None


def get_pg_registry() -> PgClientRegistry:
    if _pg_registry is None:
        raise RuntimeError("Processor registry is not initialised; the startup hook has not run")
    return _pg_registry


async def get_payment_service(
    db: AsyncSession = Depends(get_db),
    pg_registry: PgClientRegistry = Depends(get_pg_registry),
) -> PaymentService:
    return PaymentService(
        partner_repository=PartnerRepository(db),
        fee_policy_resolver=FeePolicyResolver(FeePolicyRepository(db)),
        payment_repository=PaymentRepository(db),
        pg_registry=pg_registry,
    )


async def get_query_service(db: AsyncSession = Depends(get_db)) -> QueryPaymentsService:
    return QueryPaymentsService(PaymentRepository(db))
