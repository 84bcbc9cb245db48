from pydantic import BaseModel, EmailStr


class OrderNotificationRequest(BaseModel):
    """Field names follow the storefront client (camelCase). Required ones are checked in the router."""
    orderId: str | int | None = None
    customerName: str | None = None
    amount: int | float | str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    items: list[dict] | None = None
