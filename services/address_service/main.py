from fastapi import FastAPI

from shared.observability import setup_observability

from .models import SavedAddress  # noqa: F401 (registers models with Base)
from .router import router, public_router

address_app = FastAPI(title="Address Service", version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(address_app, "address_service")

address_app.include_router(public_router)
address_app.include_router(router)
