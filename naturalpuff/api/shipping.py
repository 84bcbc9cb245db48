"""Storefront shipping: courier options for a pincode and shipment tracking."""
from fastapi import APIRouter, HTTPException

from naturalpuff.core.config import settings
from naturalpuff.schemas import CourierOptionOut, ServiceabilityRequest
from naturalpuff.services import shiprocket

router = APIRouter(prefix="/api/shipping", tags=["shipping"])


def shiprocket_http_error(e: shiprocket.ShiprocketError) -> HTTPException:
    """Missing credentials -> 503, anything from Shiprocket itself -> 502."""
    if isinstance(e, shiprocket.ShiprocketNotConfigured):
        return HTTPException(status_code=503, detail=e.message)
    return HTTPException(status_code=502, detail=e.message)


@router.post("/serviceability", response_model=list[CourierOptionOut])
def serviceability(body: ServiceabilityRequest):
    pickup = (body.pickup_pincode or settings.shiprocket_pickup_pincode or "").strip()
    if not pickup:
        raise HTTPException(status_code=503, detail="Pickup pincode is not configured")
    if not body.delivery_pincode.isdigit():
        raise HTTPException(status_code=400, detail="Please enter a valid 6-digit pincode.")
    try:
        options = shiprocket.check_serviceability(pickup, body.delivery_pincode, body.weight, body.cod)
    except shiprocket.ShiprocketError as e:
        raise shiprocket_http_error(e)
    return [CourierOptionOut(**o._asdict()) for o in sorted(options, key=lambda o: o.rate)]


@router.get("/track/{shipment_id}")
def track(shipment_id: str):
    try:
        return shiprocket.track_shipment(shipment_id)
    except shiprocket.ShiprocketError as e:
        raise shiprocket_http_error(e)
