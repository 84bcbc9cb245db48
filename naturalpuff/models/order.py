"""Order + line items. Status is only moved to "paid" by payment verification / webhook / status check."""
import uuid
from datetime import datetime

from sqlmodel import Field, SQLModel

ORDER_STATUSES = ("pending", "created", "paid", "failed", "cancelled", "shipped")


def _new_order_id() -> str:
    return str(uuid.uuid4())


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: str = Field(default_factory=_new_order_id, primary_key=True, max_length=36)
    user_id: int | None = Field(default=None, index=True)  # None: guest checkout
    total_amount: int  # Rupees, after discount and shipping
    subtotal: int = 0
    discount_amount: int = 0
    shipping_cost: int = 0
    status: str = Field(default="pending", index=True)
    payment_method: str = "online"  # "online" | "cod"
    payment_id: str | None = Field(default=None, index=True)  # Razorpay pay_...
    razorpay_order_id: str | None = Field(default=None, index=True)  # Razorpay order_...
    customer_name: str
    customer_email: str | None = None
    customer_phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = Field(default=None, max_length=10)
    coupon_code: str | None = Field(default=None, max_length=64)
    courier_name: str | None = None
    shipping_details: str | None = None  # JSON: shiprocket_order_id, shiprocket_shipment_id, tracking_url
    paid_at: datetime | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    id: int | None = Field(default=None, primary_key=True)
    order_id: str = Field(foreign_key="orders.id", index=True)
    product_id: int
    product_name: str
    quantity: int
    price: int  # Unit price in rupees at the time of the order
    created_at: datetime = Field(default_factory=datetime.utcnow)
