"""
Soft stock reservation rules shared by the cart and the checkout.

Nothing here holds stock. The rules only refuse requests for more units than
are presently available; checkout applies them again as the binding check.
"""
from .errors import OutOfStock, InsufficientStock


def max_addable(current_stock: int, already_held: int) -> int:
    return max(0, current_stock - already_held)


def can_satisfy(requested: int, current_stock: int, already_held: int) -> bool:
    return requested <= max_addable(current_stock, already_held)


def check_addable(product, requested: int, already_held: int = 0) -> None:
    """Raise OutOfStock / InsufficientStock unless ``requested`` more units fit."""
    stock = product.stock or 0
    if stock <= 0:
        raise OutOfStock(
            "Product unavailable, out of stock",
            product_id=product.id,
            product_name=product.name,
        )
    if not can_satisfy(requested, stock, already_held):
        left = max_addable(stock, already_held)
        raise InsufficientStock(
            f"Cannot add more of {product.name}, only {left} left",
            left=left,
            product_id=product.id,
            product_name=product.name,
        )


def check_holdable(product, quantity: int) -> None:
    """Absolute check used when a line is set to ``quantity`` or checked out."""
    stock = product.stock or 0
    if stock <= 0:
        raise OutOfStock(
            "Product unavailable, out of stock",
            product_id=product.id,
            product_name=product.name,
        )
    if quantity > stock:
        raise InsufficientStock(
            f"Not enough {product.name} in stock, only {stock} left",
            left=stock,
            product_id=product.id,
            product_name=product.name,
        )
