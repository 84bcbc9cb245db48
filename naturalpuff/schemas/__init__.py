from .admin import ContactUpdate, CouponIn, CouponPatch, OfferIn, OrderStatusUpdate, ProductIn, ProductPatch
from .auth import Token, UserCreate, UserLogin, UserOrderSummary, UserResponse, UserUpdate
from .catalog import ContactCreate, CouponCheckResponse, OfferOut, ProductOut, StockInfo
from .notification import OrderNotificationRequest
from .order import CartLineIn, OrderCreate, OrderItemOut, OrderOut, OrderPlaced
from .payment import PaymentStatusRequest, PaymentVerifyRequest, PaymentVerifyResponse, RazorpayOrderRequest
from .review import ReviewCreate, ReviewEligibility, ReviewOut, ReviewSummary
from .shipping import CourierOptionOut, PaymentLinkRequest, ServiceabilityRequest, ShipOrderRequest

__all__ = [
    "CartLineIn",
    "ContactCreate",
    "ContactUpdate",
    "CouponCheckResponse",
    "CouponIn",
    "CouponPatch",
    "CourierOptionOut",
    "OfferIn",
    "OfferOut",
    "OrderCreate",
    "OrderItemOut",
    "OrderNotificationRequest",
    "OrderOut",
    "OrderPlaced",
    "OrderStatusUpdate",
    "PaymentLinkRequest",
    "PaymentStatusRequest",
    "PaymentVerifyRequest",
    "PaymentVerifyResponse",
    "ProductIn",
    "ProductOut",
    "ProductPatch",
    "RazorpayOrderRequest",
    "ReviewCreate",
    "ReviewEligibility",
    "ReviewOut",
    "ReviewSummary",
    "ServiceabilityRequest",
    "ShipOrderRequest",
    "StockInfo",
    "Token",
    "UserCreate",
    "UserLogin",
    "UserOrderSummary",
    "UserResponse",
    "UserUpdate",
]
