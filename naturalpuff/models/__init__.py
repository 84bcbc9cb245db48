from .contact import ContactMessage
from .coupon import Coupon
from .error_log import ErrorLog
from .offer import MarketingOffer
from .order import ORDER_STATUSES, Order, OrderItem
from .product import Product
from .review import ProductReview, ReviewVote
from .user import User

__all__ = [
    "ContactMessage",
    "Coupon",
    "ErrorLog",
    "MarketingOffer",
    "ORDER_STATUSES",
    "Order",
    "OrderItem",
    "Product",
    "ProductReview",
    "ReviewVote",
    "User",
]
