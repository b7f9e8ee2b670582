from fastapi import FastAPI

from shared.observability.setup import setup_observability

from .models import Coupon, CouponUsage  # noqa: F401 (registers models with Base)
from .router import router, public_router

coupon_app = FastAPI(title="Coupon Service", version="1.0.0")

setup_observability(coupon_app, "coupon_service")

coupon_app.include_router(public_router)
coupon_app.include_router(router)
