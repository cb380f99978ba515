import pytest
from storefront.services.money import (
    to_minor_units,
    to_quantity,
    line_subtotal,
    sum_minor_units,
    format_minor_units,
)


def test_to_minor_units_accepts_ints_and_integral_strings():
    assert to_minor_units(1999) == 1999
    assert to_minor_units(" 250 ") == 250
    assert to_minor_units(0) == 0


@pytest.mark.parametrize("bad", [19.99, True, -1, "12.50", None, "abc"])
def test_to_minor_units_rejects_non_integral_and_negative(bad):
    with pytest.raises(ValueError):
        to_minor_units(bad)


def test_to_quantity_lower_bound():
    assert to_quantity(0) == 0
    assert to_quantity(3, minimum=1) == 3
    with pytest.raises(ValueError):
        to_quantity(0, minimum=1)
    with pytest.raises(ValueError):
        to_quantity(False, minimum=0)


def test_line_subtotal_and_sum():
    assert line_subtotal(3, 1000) == 3000
    assert sum_minor_units([]) == 0
    assert sum_minor_units([3000, 1499]) == 4499


def test_format_minor_units():
    assert format_minor_units(3499) == "34.99 PLN"
    assert format_minor_units(5, "EUR") == "0.05 EUR"
