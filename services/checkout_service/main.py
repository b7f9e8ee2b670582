from fastapi import FastAPI
from shared.observability import setup_observability
from shared.security import setup_rate_limiting
from .router import router

checkout_app = FastAPI(
    title="Checkout Service",
    version="1.0.0"
)

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(checkout_app, "checkout_service")

# --- SECURITY SETUP ---
setup_rate_limiting(checkout_app)

checkout_app.include_router(router)
