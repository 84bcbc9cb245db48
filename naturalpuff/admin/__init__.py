"""Admin JSON API under /admin; every route requires X-Admin-Secret."""
from fastapi import APIRouter, Depends

from naturalpuff.admin.deps import require_admin
from naturalpuff.admin.routers import (
    contact,
    coupons,
    dashboard,
    errors,
    offers,
    orders,
    permissions,
    products,
    shipping,
    users,
)

admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

admin_router.include_router(dashboard.router)
admin_router.include_router(products.router, prefix="/products", tags=["admin-products"])
admin_router.include_router(coupons.router, prefix="/coupons", tags=["admin-coupons"])
admin_router.include_router(offers.router, prefix="/offers", tags=["admin-offers"])
admin_router.include_router(orders.router, prefix="/orders", tags=["admin-orders"])
admin_router.include_router(contact.router, prefix="/contact-messages", tags=["admin-contact"])
admin_router.include_router(users.router, prefix="/users", tags=["admin-users"])
admin_router.include_router(shipping.router, prefix="/shipping", tags=["admin-shipping"])
admin_router.include_router(permissions.router, prefix="/permissions", tags=["admin-permissions"])
admin_router.include_router(errors.router, prefix="/errors", tags=["admin-errors"])
