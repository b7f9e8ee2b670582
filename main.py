from fastapi import FastAPI
from shared.config.database import create_tables

# IMPORTANT: import models so they register with Base
from services.address_service import models as address_models  # noqa: F401
from services.auth_service import models as auth_models  # noqa: F401
from services.cart_service import models as cart_models  # noqa: F401
from services.coupon_service import models as coupon_models  # noqa: F401
from services.notification_service import models as notification_models  # noqa: F401
from services.order_service import models as order_models  # noqa: F401
from services.payment_service import models as payment_models  # noqa: F401
from services.return_service import models as return_models  # noqa: F401

from services.address_service.main import address_app
from services.auth_service.main import auth_app
from services.cart_service.main import cart_app
from services.checkout_service.main import checkout_app
from services.coupon_service.main import coupon_app
from services.notification_service.main import notification_app
from services.order_service.main import order_app
from services.payment_service.main import payment_app
from services.return_service.main import return_app

app = FastAPI(title="PowerFuel Storefront")

@app.on_event("startup")
async def startup_event():
    # Sub-apps don't receive lifespan events when mounted, so tables are created here
    await create_tables()

@app.get("/health")
async def health_check():
    return {"service": "storefront", "status": "running"}

app.mount("/addresses", address_app)
app.mount("/auth", auth_app)
app.mount("/cart", cart_app)
app.mount("/checkout", checkout_app)
app.mount("/coupons", coupon_app)
app.mount("/notifications", notification_app)
app.mount("/orders", order_app)
app.mount("/payments", payment_app)
app.mount("/returns", return_app)
