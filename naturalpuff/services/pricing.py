"""Price display (INR) and stock status for the storefront."""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import NamedTuple

from naturalpuff.core.config import settings

# Rows imported before the catalog fix stored rupees x10 (2940 for 294).
# Only whole multiples of 10 from this value up are treated as inflated.
TENFOLD_THRESHOLD = 1000


def _to_decimal(value: int | float | str | None) -> Decimal:
    if value is None or value == "":
        return Decimal(0)
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid price: {value!r}") from None


def is_amount(value: int | float | str | None) -> bool:
    """Finite, non-negative number (or numeric text) small enough to format."""
    if isinstance(value, bool) or value is None or value == "":
        return False
    try:
        amount = _to_decimal(value)
    except ValueError:
        return False
    return amount.is_finite() and amount >= 0 and amount.adjusted() < 15


def display_price(value: int | float | str | None, tenfold_correction: bool | None = None) -> int | float:
    """
    Price as shown to the customer.
    With the legacy correction on (PRICE_TENFOLD_CORRECTION), 2940 -> 294 while 295 and 990 stay.
    """
    if tenfold_correction is None:
        tenfold_correction = settings.price_tenfold_correction
    amount = _to_decimal(value)
    if tenfold_correction and amount >= TENFOLD_THRESHOLD and amount % 10 == 0:
        amount = amount / 10
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def _group_indian(digits: str) -> str:
    """1234567 -> 12,34,567 (last three, then pairs)."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs) + "," + tail


def format_inr(amount: int | float | str | None, decimals: int = 0, symbol: bool = True) -> str:
    """en-IN currency text: format_inr(123456) -> '₹1,23,456'."""
    value = _to_decimal(amount)
    quant = Decimal(1).scaleb(-decimals) if decimals > 0 else Decimal(1)
    value = value.quantize(quant, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    text = f"{abs(value):.{decimals}f}"
    whole, _, frac = text.partition(".")
    out = _group_indian(whole)
    if frac:
        out = f"{out}.{frac}"
    return f"{sign}{'₹' if symbol else ''}{out}"


class StockStatus(NamedTuple):
    level: str  # out_of_stock | low_stock | in_stock
    text: str
    available: bool
    message: str
    count: int


def stock_status(stock: int | None, low_threshold: int | None = None) -> StockStatus:
    threshold = settings.low_stock_threshold if low_threshold is None else low_threshold
    if not stock or stock <= 0:
        return StockStatus("out_of_stock", "Out of Stock", False, "Currently out of stock", 0)
    if stock <= threshold:
        return StockStatus("low_stock", f"Low Stock ({stock})", True, f"Hurry! Only {stock} left", stock)
    return StockStatus("in_stock", "In Stock", True, "Available", stock)
