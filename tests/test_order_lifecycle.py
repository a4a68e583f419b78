"""Order status machine and cancellation side effects."""

from datetime import datetime, time, timedelta, timezone

import pytest

from storefront.domain.errors import CancellationWindowClosedError, InvalidTransitionError, NotFoundError
from storefront.domain.order_status import OrderStatus, PaymentStatus
from storefront.services.order_lifecycle import OrderLifecycle, can_cancel


def _slot_midnight(slot):
    return datetime.combine(slot.date, time.min, tzinfo=timezone.utc)


@pytest.fixture
def setup(make_user, make_product, make_slot, place_order):
    make_user(1)
    product = make_product(stock=10)
    slot = make_slot(days_ahead=5, capacity=4)
    order = place_order(1, [(product, 3)], slot)
    return order, product, slot


class TestForwardTransitions:

    def test_full_happy_path(self, db, setup):
        order, _, _ = setup
        lifecycle = OrderLifecycle(db)

        assert order.status == OrderStatus.CONFIRMED
        assert lifecycle.mark_as_processing(order.id)
        assert lifecycle.mark_as_out_for_delivery(order.id)
        assert lifecycle.mark_as_delivered(order.id)

        db.refresh(order)
        assert order.status == OrderStatus.DELIVERED

    def test_pending_to_confirmed(self, db, setup):
        order, _, _ = setup
        order.status = OrderStatus.PENDING.value
        db.commit()

        assert OrderLifecycle(db).mark_as_confirmed(order.id)

    def test_steps_cannot_be_skipped(self, db, setup):
        order, _, _ = setup
        lifecycle = OrderLifecycle(db)

        assert not lifecycle.mark_as_delivered(order.id)
        db.refresh(order)
        assert order.status == OrderStatus.CONFIRMED

    def test_no_backward_moves(self, db, setup):
        order, _, _ = setup
        lifecycle = OrderLifecycle(db)
        lifecycle.mark_as_processing(order.id)

        assert not lifecycle.mark_as_confirmed(order.id)
        db.refresh(order)
        assert order.status == OrderStatus.PROCESSING


class TestCancellation:

    def test_cancel_restores_stock_and_slot(self, db, setup):
        order, product, slot = setup
        db.refresh(product)
        db.refresh(slot)
        assert product.stock_quantity == 7
        assert slot.consumed_capacity == 1

        now = _slot_midnight(slot) - timedelta(days=3)
        cancelled = OrderLifecycle(db).mark_as_cancelled(order.id, now=now)

        assert cancelled.status == OrderStatus.CANCELLED
        assert cancelled.payment_status == PaymentStatus.CANCELLED
        db.refresh(product)
        db.refresh(slot)
        assert product.stock_quantity == 10
        assert slot.consumed_capacity == 0

    def test_second_cancel_restores_nothing(self, db, setup):
        order, product, slot = setup
        now = _slot_midnight(slot) - timedelta(days=3)
        lifecycle = OrderLifecycle(db)
        lifecycle.mark_as_cancelled(order.id, now=now)

        with pytest.raises(InvalidTransitionError):
            lifecycle.mark_as_cancelled(order.id, now=now)

        db.refresh(product)
        assert product.stock_quantity == 10

    def test_too_close_to_delivery(self, db, setup):
        order, product, slot = setup
        now = _slot_midnight(slot) - timedelta(hours=10)

        assert not can_cancel(order, now)
        with pytest.raises(CancellationWindowClosedError, match="too late"):
            OrderLifecycle(db).mark_as_cancelled(order.id, now=now)

        db.refresh(order)
        db.refresh(product)
        assert order.status == OrderStatus.CONFIRMED
        assert product.stock_quantity == 7

    def test_processing_order_cannot_be_cancelled(self, db, setup):
        order, _, slot = setup
        lifecycle = OrderLifecycle(db)
        lifecycle.mark_as_processing(order.id)

        with pytest.raises(InvalidTransitionError) as exc:
            lifecycle.mark_as_cancelled(order.id, now=_slot_midnight(slot) - timedelta(days=3))
        assert not isinstance(exc.value, CancellationWindowClosedError)

    def test_inactive_product_is_not_restocked(self, db, setup):
        order, product, slot = setup
        db.refresh(product)
        product.is_active = False
        db.commit()

        OrderLifecycle(db).mark_as_cancelled(order.id, now=_slot_midnight(slot) - timedelta(days=3))

        db.refresh(product)
        db.refresh(slot)
        assert product.stock_quantity == 7
        assert slot.consumed_capacity == 0

    def test_unknown_order(self, db):
        with pytest.raises(NotFoundError):
            OrderLifecycle(db).mark_as_cancelled(12345)
