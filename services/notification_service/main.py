from fastapi import FastAPI

from shared.observability.setup import setup_observability

from .models import AdminNotification, Notification  # noqa: F401 (registers models with Base)
from .router import router, public_router

notification_app = FastAPI(title="Notification Service", version="1.0.0")

setup_observability(notification_app, "notification_service")

notification_app.include_router(public_router)
notification_app.include_router(router)
