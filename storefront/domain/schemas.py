# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Literal
from decimal import Decimal
from datetime import date as Date, datetime

from storefront.utils.settings import MAX_CART_LINE_QUANTITY


# =====================================================
# CART
# =====================================================
class AddItemIn(BaseModel):
    """Adding a product to the cart."""

    product_id: int = Field(..., gt=0, description="Product ID (> 0)")
    quantity: int = Field(1, ge=1, le=MAX_CART_LINE_QUANTITY, description="Units to add")


class UpdateItemIn(BaseModel):
    """Setting the exact quantity of a cart line (0 removes it)."""

    quantity: int = Field(..., ge=0, le=MAX_CART_LINE_QUANTITY)


class CartItemOut(BaseModel):
    product_id: int
    name: str
    quantity: int
    price: Decimal
    line_total: Decimal
    stock_quantity: int | None = None
    exceeds_stock: bool = False


class CartTotalsOut(BaseModel):
    subtotal: Decimal
    total: Decimal
    total_items: int
    distinct_items: int


class CartOut(BaseModel):
    items: List[CartItemOut]
    totals: CartTotalsOut


class CartMutationOut(BaseModel):
    message: str
    totals: CartTotalsOut


class MessageOut(BaseModel):
    message: str


# =====================================================
# USERS / LOGIN
# =====================================================
class UserCreate(BaseModel):
    """Registering a user."""

    id: int = Field(..., gt=0, description="User ID (> 0)")
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: str | None = Field(None, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$", description="Contact address for order mail")


class UserRead(BaseModel):
    id: int
    name: str
    email: str | None = None

    model_config = ConfigDict(from_attributes=True)


class LoginIn(BaseModel):
    user_id: int = Field(..., gt=0)


class LoginOut(BaseModel):
    user: UserRead
    cart_migrated: bool
    migrated_lines: int = 0


# =====================================================
# DELIVERY SLOTS / CHECKOUT
# =====================================================
class DeliverySlotOut(BaseModel):
    id: int
    start_time: str
    end_time: str
    time_display: str
    price: Decimal
    total_capacity: int
    remaining_capacity: int


class DeliveryDayOut(BaseModel):
    date: Date
    day_name: str
    formatted_date: str
    slots: List[DeliverySlotOut]


class CheckoutIn(BaseModel):
    delivery_slot_id: int = Field(..., gt=0)
    payment_method: Literal["ideal", "card", "cash"]
    order_notes: str | None = Field(None, max_length=500)
    delivery_address: dict | None = None


class OrderPlacedOut(BaseModel):
    message: str
    order_id: int
    order_number: str
    total: Decimal


# =====================================================
# ORDERS
# =====================================================
class OrderSlotOut(BaseModel):
    id: int
    date: Date
    start_time: str
    end_time: str
    formatted_date: str
    formatted_time: str


class OrderSummaryOut(BaseModel):
    id: int
    order_number: str
    status: str
    status_display: str
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal
    item_count: int
    total_items: int
    first_item_name: str | None = None
    created_at: datetime
    delivery_slot: OrderSlotOut | None = None
    can_cancel: bool
    can_track: bool


class OrderListOut(BaseModel):
    orders: List[OrderSummaryOut]
    page: int
    per_page: int
    total: int


class OrderItemOut(BaseModel):
    id: int
    product_id: int | None = None
    product_name: str
    quantity: int
    price: Decimal
    total: Decimal


class OrderDetailOut(OrderSummaryOut):
    payment_method: str | None = None
    payment_status: str
    payment_status_display: str
    order_notes: str | None = None
    delivery_address: dict | None = None
    updated_at: datetime
    estimated_delivery: str | None = None
    items: List[OrderItemOut]


class TrackingStepOut(BaseModel):
    title: str
    description: str
    status: Literal["completed", "current", "pending", "cancelled"]
    icon: str
    date: datetime | None = None


class TrackingOut(BaseModel):
    id: int
    order_number: str
    status: str
    status_display: str
    estimated_delivery: str | None = None
    delivery_slot: OrderSlotOut | None = None
    steps: List[TrackingStepOut]
    current_step: int


class CancelOut(BaseModel):
    message: str
    order: OrderSummaryOut
