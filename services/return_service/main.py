from fastapi import FastAPI

from shared.observability import setup_observability

from .models import ReturnItem, ReturnRequest  # noqa: F401 (registers models with Base)
from .router import router, public_router

return_app = FastAPI(title="Return Service", version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(return_app, "return_service")

return_app.include_router(public_router)
return_app.include_router(router)
