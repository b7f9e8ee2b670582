from prometheus_client import Counter, Histogram

# Business Metrics
storefront_checkout_total = Counter(
    "storefront_checkout_total",
    "Total checkout attempts processed",
    ["status"] # Labels: 'success', 'rejected', 'payment_failed', 'error'
)

storefront_checkout_duration_seconds = Histogram(
    "storefront_checkout_duration_seconds",
    "Checkout duration in seconds"
)

storefront_saga_compensation_total = Counter(
    "storefront_saga_compensation_total",
    "Total saga compensations triggered",
    ["step_name"] # Labels: 'create_order', 'charge_payment', etc.
)

storefront_notification_failures_total = Counter(
    "storefront_notification_failures_total",
    "Notifications that could not be written",
    ["kind"] # Labels: 'order_confirmation', 'admin_alert', 'status_update'
)

storefront_order_status_updates_total = Counter(
    "storefront_order_status_updates_total",
    "Order status changes applied by operators",
    ["status"]
)
