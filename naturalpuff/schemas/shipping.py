from pydantic import BaseModel, Field


class ServiceabilityRequest(BaseModel):
    delivery_pincode: str = Field(min_length=6, max_length=6)
    pickup_pincode: str | None = None
    weight: float = Field(default=0.5, gt=0)
    cod: bool = False


class CourierOptionOut(BaseModel):
    courier_name: str
    courier_code: str
    rate: float
    etd: str
    serviceability_type: str


class ShipOrderRequest(BaseModel):
    weight: float = Field(default=0.5, gt=0)
    length: float = Field(default=10, gt=0)
    breadth: float = Field(default=10, gt=0)
    height: float = Field(default=10, gt=0)


class PaymentLinkRequest(BaseModel):
    order_id: str
    purpose: str = "Natural Puff order"
