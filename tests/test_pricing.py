"""Price display heuristic, INR formatting, stock status."""
import pytest

from naturalpuff.services.pricing import display_price, format_inr, is_amount, stock_status


@pytest.mark.parametrize(
    "stored, shown",
    [
        (2940, 294),
        (295, 295),
        (1005, 1005),
        (990, 990),
        (1000, 100),
        (0, 0),
    ],
)
def test_display_price_tenfold_correction(stored, shown):
    assert display_price(stored, tenfold_correction=True) == shown


def test_display_price_correction_off():
    assert display_price(2940, tenfold_correction=False) == 2940


def test_display_price_keeps_fractions():
    assert display_price("149.50", tenfold_correction=True) == 149.5
    assert display_price(None) == 0


def test_display_price_rejects_garbage():
    with pytest.raises(ValueError):
        display_price("abc")


def test_format_inr_indian_grouping():
    assert format_inr(294) == "₹294"
    assert format_inr(123456) == "₹1,23,456"
    assert format_inr(12345678) == "₹1,23,45,678"
    assert format_inr(1299.5, decimals=2) == "₹1,299.50"
    assert format_inr(1000, symbol=False) == "1,000"


@pytest.mark.parametrize(
    "stock, level, available",
    [
        (None, "out_of_stock", False),
        (0, "out_of_stock", False),
        (-3, "out_of_stock", False),
        (5, "low_stock", True),
        (10, "low_stock", True),
        (11, "in_stock", True),
        (50, "in_stock", True),
    ],
)
def test_stock_status_levels(stock, level, available):
    s = stock_status(stock, low_threshold=10)
    assert s.level == level
    assert s.available is available


def test_low_stock_messages():
    s = stock_status(3, low_threshold=10)
    assert s.text == "Low Stock (3)"
    assert s.message == "Hurry! Only 3 left"
    assert stock_status(0).text == "Out of Stock"


def test_is_amount():
    assert is_amount(299)
    assert is_amount("1299.50")
    assert is_amount(0)
    assert not is_amount("abc")
    assert not is_amount(-1)
    assert not is_amount("NaN")
    assert not is_amount(None)
    assert not is_amount(True)
