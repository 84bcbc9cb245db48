"""Access-policy repair. Each call re-applies the declared policies; safe to repeat."""
import logging

from fastapi import APIRouter, HTTPException, Query

from naturalpuff.services.access_policy import (
    PolicyRepairError,
    TABLE_POLICIES,
    policy_statements,
    repair_tables,
    repair_with_fallback,
    setup_contact_messages,
)

router = APIRouter()
log = logging.getLogger("naturalpuff.permissions")


@router.get("")
def policies_overview():
    """Declared policies and the SQL that installs them."""
    return {table: policy_statements(table) for table in TABLE_POLICIES}


@router.post("/fix")
def fix_permissions(dry_run: bool = Query(False)):
    try:
        results = repair_tables(["products", "coupons", "orders"], dry_run=dry_run)
    except PolicyRepairError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "success": True,
        "message": "Permissions configured successfully",
        "tables": [r.as_dict() for r in results],
    }


@router.post("/fix-orders")
def fix_order_permissions(dry_run: bool = Query(False)):
    try:
        results = repair_tables(["orders", "order_items"], dry_run=dry_run)
    except PolicyRepairError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "success": True,
        "message": "Order permissions fixed successfully",
        "tables": [r.as_dict() for r in results],
    }


def _fallback_response(result: dict, label: str) -> dict:
    if not result["success"]:
        log.error("%s permission repair failed: %s", label, result.get("aggregate_error"))
        raise HTTPException(status_code=400, detail=f"Failed to fix {label} permissions: {result.get('aggregate_error')}")
    if result["partial"]:
        result["message"] = f"{label.capitalize()} permissions partially fixed"
    else:
        result["message"] = f"{label.capitalize()} permissions fixed successfully"
    return result


@router.post("/fix-coupons")
def fix_coupon_permissions(dry_run: bool = Query(False)):
    return _fallback_response(repair_with_fallback(["coupons"], dry_run=dry_run), "coupon")


@router.post("/fix-all")
def fix_all_permissions(dry_run: bool = Query(False)):
    return _fallback_response(
        repair_with_fallback(["orders", "order_items", "products", "coupons"], dry_run=dry_run), "all"
    )


@router.post("/setup-contact-messages")
def setup_contact_messages_table(dry_run: bool = Query(False)):
    try:
        result = setup_contact_messages(dry_run=dry_run)
    except PolicyRepairError as e:
        raise HTTPException(status_code=400, detail=str(e))
    result["message"] = f"contact_messages table {result['table']}"
    return result
