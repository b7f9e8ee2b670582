from fastapi import FastAPI

from shared.observability.setup import setup_observability

from .models import User  # noqa: F401 (registers model with SQLAlchemy Base)
from .router import router, public_router

auth_app = FastAPI(
    title="Auth Service",
    version="1.0.0",
    description="Shopper accounts: register, login, token validation.",
)

setup_observability(auth_app, "auth_service")

auth_app.include_router(router)
auth_app.include_router(public_router)
