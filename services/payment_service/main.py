from fastapi import FastAPI

from shared.observability.setup import setup_observability

from .models import Payment  # noqa: F401 (registers model with SQLAlchemy Base)
from .router import router, public_router


payment_app = FastAPI(title="Payment Service", version="1.0.0")

setup_observability(payment_app, "payment_service")

payment_app.include_router(router)
payment_app.include_router(public_router)
