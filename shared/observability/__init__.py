from .setup import setup_observability
from .metrics import (
    storefront_checkout_total,
    storefront_checkout_duration_seconds,
    storefront_saga_compensation_total,
    storefront_notification_failures_total,
    storefront_order_status_updates_total,
)
