# storefront/domain/order_status.py
from __future__ import annotations

from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def display(self) -> str:
        return _STATUS_DISPLAY[self]


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def display(self) -> str:
        return _PAYMENT_DISPLAY[self]


_STATUS_DISPLAY = {
    OrderStatus.PENDING: "Pending",
    OrderStatus.CONFIRMED: "Confirmed",
    OrderStatus.PROCESSING: "Being prepared",
    OrderStatus.OUT_FOR_DELIVERY: "Out for delivery",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
}

_PAYMENT_DISPLAY = {
    PaymentStatus.PENDING: "Pending",
    PaymentStatus.PROCESSING: "Processing",
    PaymentStatus.COMPLETED: "Paid",
    PaymentStatus.FAILED: "Failed",
    PaymentStatus.CANCELLED: "Cancelled",
}

# single-step forward transitions: target -> required predecessor
FORWARD_PREDECESSOR: dict[OrderStatus, OrderStatus] = {
    OrderStatus.CONFIRMED: OrderStatus.PENDING,
    OrderStatus.PROCESSING: OrderStatus.CONFIRMED,
    OrderStatus.OUT_FOR_DELIVERY: OrderStatus.PROCESSING,
    OrderStatus.DELIVERED: OrderStatus.OUT_FOR_DELIVERY,
}

CANCELLABLE_STATUSES = (OrderStatus.PENDING, OrderStatus.CONFIRMED)


def status_display(value: str) -> str:
    try:
        return OrderStatus(value).display
    except ValueError:
        return "Unknown"


def payment_status_display(value: str | None) -> str:
    try:
        return PaymentStatus(value).display
    except ValueError:
        return "Unknown"
