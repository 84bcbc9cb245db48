from pydantic import BaseModel


class RazorpayOrderRequest(BaseModel):
    """Proxy body; amount in paise. Missing amount is answered with 400, not 422."""
    amount: int | None = None
    currency: str = "INR"
    receipt: str = ""
    notes: dict = {}


class PaymentVerifyRequest(BaseModel):
    razorpay_payment_id: str | None = None
    razorpay_order_id: str | None = None
    razorpay_signature: str | None = None


class PaymentVerifyResponse(BaseModel):
    success: bool
    message: str
    order_id: str


class PaymentStatusRequest(BaseModel):
    order_id: str | None = None
