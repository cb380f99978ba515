from typing import Iterable


def _as_int(value, what: str) -> int:
    # bool is an int subclass; a price of True is a bug, not a value
    if isinstance(value, bool):
        raise ValueError(f"{what} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValueError(f"{what} must be an integer")


def to_minor_units(value) -> int:
    """Validate an amount expressed in minor units (cents/grosze)."""
    amount = _as_int(value, "Amount")
    if amount < 0:
        raise ValueError("Amount cannot be negative")
    return amount


def to_quantity(value, minimum: int = 0) -> int:
    qty = _as_int(value, "Quantity")
    if qty < minimum:
        raise ValueError(f"Quantity must be at least {minimum}")
    return qty


def line_subtotal(quantity: int, unit_price: int) -> int:
    return to_quantity(quantity) * to_minor_units(unit_price)


def sum_minor_units(values: Iterable[int]) -> int:
    total = 0
    for v in values:
        total += to_minor_units(v)
    return total


def format_minor_units(value: int, currency: str = "PLN") -> str:
    major, minor = divmod(to_minor_units(value), 100)
    return f"{major}.{minor:02d} {currency}"
