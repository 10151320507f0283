# Models package - import every table so Base.metadata is complete
from .discounts import DiscountCode, DiscountType
from .orders import Order, OrderItem, OrderStatus, PaymentStatus
from .admin import AdminUser

__all__ = [
    "DiscountCode",
    "DiscountType",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "AdminUser",
]
