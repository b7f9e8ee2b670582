from fastapi import FastAPI

from shared.observability.setup import setup_observability

from .models import KeyValueEntry  # noqa: F401 (registers model with SQLAlchemy Base)
from .router import router, public_router

cart_app = FastAPI(title="Cart Service", version="1.0.0")

setup_observability(cart_app, "cart_service")

cart_app.include_router(public_router)
cart_app.include_router(router)
