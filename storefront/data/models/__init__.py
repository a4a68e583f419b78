# import every model so SQLAlchemy registers it on Base.metadata

from storefront.data.models.user import UserModel
from storefront.data.models.product import ProductModel
from storefront.data.models.promotion import PromotionModel, PromotionProductModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.delivery_slot import DeliverySlotModel
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel

__all__ = [
    "UserModel",
    "ProductModel",
    "PromotionModel",
    "PromotionProductModel",
    "CartItemModel",
    "DeliverySlotModel",
    "OrderModel",
    "OrderItemModel",
]
