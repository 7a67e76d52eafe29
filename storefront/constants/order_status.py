from storefront.models.order import OrderStatus, PaymentStatus

# forward-only fulfilment flow, cancelled is reachable before processing only
ORDER_TRANSITIONS = {
    OrderStatus.pending: {OrderStatus.confirmed, OrderStatus.cancelled},
    OrderStatus.confirmed: {OrderStatus.processing, OrderStatus.cancelled},
    OrderStatus.processing: {OrderStatus.shipped},
    OrderStatus.shipped: {OrderStatus.delivered},
    OrderStatus.delivered: set(),
    OrderStatus.cancelled: set(),
}

PAYMENT_TRANSITIONS = {
    PaymentStatus.pending: {PaymentStatus.paid, PaymentStatus.failed},
    PaymentStatus.paid: {PaymentStatus.refunded},
    PaymentStatus.failed: set(),
    PaymentStatus.refunded: set(),
}

CANCELLABLE_STATUSES = {OrderStatus.pending, OrderStatus.confirmed}

STATUS_TIMESTAMPS = {
    OrderStatus.confirmed: "confirmed_at",
    OrderStatus.processing: "processing_at",
    OrderStatus.shipped: "shipped_at",
    OrderStatus.delivered: "delivered_at",
    OrderStatus.cancelled: "cancelled_at",
}
