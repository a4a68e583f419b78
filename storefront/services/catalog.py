# storefront/services/catalog.py
from datetime import datetime, timezone
from decimal import Decimal

from storefront.data.models.product import ProductModel
from storefront.domain.pricing import resolve_price
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CatalogReader:
    """Read side of the product catalog as seen by carts and orders."""

    def __init__(self, repo: ProductRepo):
        self.repo = repo

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.repo.get_product(product_id)

    def get_current_price(self, product: ProductModel, now: datetime | None = None) -> Decimal:
        """Promotion-aware price; any failure resolving promotions falls back to list price."""
        now = now or datetime.now(timezone.utc)
        try:
            return resolve_price(product, self.repo.get_offers(product.id), now)
        except Exception as e:
            logger.warning(
                f"Could not resolve current price for product {product.id}, "
                f"falling back to list price: {e}"
            )
            return Decimal(product.price).quantize(Decimal("0.01"))
