# storefront/domain/pricing.py
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Protocol


class PricedProduct(Protocol):
    price: Decimal


class PromotionWindow(Protocol):
    is_active: bool
    start_date: datetime | None
    end_date: datetime | None


def _aware(value: datetime) -> datetime:
    # sqlite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def promotion_applies(promotion: PromotionWindow, now: datetime) -> bool:
    if not promotion.is_active:
        return False
    if promotion.start_date is not None and _aware(promotion.start_date) > now:
        return False
    if promotion.end_date is not None and _aware(promotion.end_date) < now:
        return False
    return True


def resolve_price(
    product: PricedProduct,
    offers: Iterable[tuple[PromotionWindow, Decimal]],
    now: datetime,
) -> Decimal:
    """Effective unit price of ``product`` at ``now``.

    ``offers`` pairs each promotion with the discount price it sets for this
    product. The lowest discount among running promotions wins; with none
    running the list price is returned.
    """
    now = _aware(now)
    running = [Decimal(price) for promo, price in offers if promotion_applies(promo, now)]
    if running:
        return min(running).quantize(Decimal("0.01"))
    return Decimal(product.price).quantize(Decimal("0.01"))
