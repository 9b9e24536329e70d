from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from shared.config.database import DB_SCHEMA, Base, engine
from shared.errors import PaymentError
from shared.observability import setup_observability
from shared.security import limiter

from services.partner_service.models import FeePolicy, Partner  # noqa: F401  registers models with Base
from .dependencies import close_pg_registry, init_pg_registry
from .models import Payment  # noqa: F401
from .router import router, public_router


payment_app = FastAPI(
    title="Payment Service",
    version="1.0.0",
    description="Partner payments: fee policy, processor dispatch, history with statistics.",
)

# Structured logs, /metrics, optional OTLP traces
setup_observability(payment_app, "payment_service")

# --- SECURITY SETUP ---
payment_app.state.limiter = limiter
payment_app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def payment_error_handler(request: Request, exc: PaymentError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )

payment_app.add_exception_handler(PaymentError, payment_error_handler)

payment_app.include_router(public_router)
payment_app.include_router(router)


@payment_app.on_event("startup")
async def startup_event():
    async with engine.begin() as conn:
        await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {DB_SCHEMA}"))
        await conn.run_sync(Base.metadata.create_all)
    init_pg_registry()


@payment_app.on_event("shutdown")
async def shutdown_event():
    await close_pg_registry()
