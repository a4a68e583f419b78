"""Unit tests for promotion-aware price resolution and cart totals."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from storefront.domain.cart import CartLine, compute_totals
from storefront.domain.pricing import promotion_applies, resolve_price

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


@dataclass
class Product:
    price: Decimal


@dataclass
class Promo:
    is_active: bool = True
    start_date: datetime | None = None
    end_date: datetime | None = None


class TestPromotionApplies:

    def test_open_ended_active_promotion_applies(self):
        assert promotion_applies(Promo(), NOW)

    def test_inactive_promotion_never_applies(self):
        assert not promotion_applies(Promo(is_active=False), NOW)

    def test_window_not_started(self):
        assert not promotion_applies(Promo(start_date=NOW + timedelta(hours=1)), NOW)

    def test_window_ended(self):
        assert not promotion_applies(Promo(end_date=NOW - timedelta(seconds=1)), NOW)

    def test_naive_dates_are_treated_as_utc(self):
        promo = Promo(start_date=datetime(2026, 3, 1), end_date=datetime(2026, 3, 31))
        assert promotion_applies(promo, NOW)


class TestResolvePrice:

    def test_list_price_without_offers(self):
        assert resolve_price(Product(Decimal("4.5")), [], NOW) == Decimal("4.50")

    def test_lowest_running_discount_wins(self):
        offers = [
            (Promo(), Decimal("3.00")),
            (Promo(), Decimal("2.75")),
            (Promo(end_date=NOW - timedelta(days=1)), Decimal("1.00")),
        ]
        assert resolve_price(Product(Decimal("4.50")), offers, NOW) == Decimal("2.75")

    def test_expired_offers_fall_back_to_list_price(self):
        offers = [(Promo(end_date=NOW - timedelta(days=1)), Decimal("1.00"))]
        assert resolve_price(Product(Decimal("4.50")), offers, NOW) == Decimal("4.50")


class TestCartTotals:

    def test_empty_cart(self):
        totals = compute_totals([])
        assert totals.subtotal == Decimal("0.00")
        assert totals.total_items == 0
        assert totals.distinct_items == 0

    def test_totals_sum_line_snapshots(self):
        lines = [
            CartLine(product_id=1, quantity=3, unit_price=Decimal("1.10")),
            CartLine(product_id=2, quantity=1, unit_price=Decimal("7.95")),
        ]
        totals = compute_totals(lines)
        assert totals.subtotal == Decimal("11.25")
        assert totals.total == totals.subtotal
        assert totals.total_items == 4
        assert totals.distinct_items == 2

    def test_exceeds_stock_flag(self):
        assert CartLine(1, 6, Decimal("1"), stock_quantity=5).exceeds_stock
        assert not CartLine(1, 5, Decimal("1"), stock_quantity=5).exceeds_stock
        assert not CartLine(1, 500, Decimal("1"), stock_quantity=None).exceeds_stock
