from fastapi import FastAPI

from services.payment_service.main import payment_app
from services.payment_service.main import shutdown_event as payment_shutdown
from services.payment_service.main import startup_event as payment_startup

app = FastAPI(title="PG Gateway")

# Mounted apps do not receive lifespan events; run the payment hooks from here.
app.add_event_handler("startup", payment_startup)
app.add_event_handler("shutdown", payment_shutdown)

app.mount("/api/v1/payments", payment_app)
