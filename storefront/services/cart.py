"""
Cart store: the mutable, per-session set of lines a visitor intends to buy.

Functions here never commit; callers wrap them in ``transactional``. Stock is
never decremented by cart mutations, only checked (see ``stock``).
"""
import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError
from models import db
from models.cart import Cart, CartItem
from . import catalog
from .errors import NotFound, Forbidden, ProductUnavailable, ValidationFailed
from .money import to_quantity, line_subtotal, sum_minor_units
from .stock import check_addable, check_holdable

logger = logging.getLogger(__name__)


def _quantity(value, minimum):
    try:
        return to_quantity(value, minimum=minimum)
    except ValueError as e:
        raise ValidationFailed(str(e), field="quantity")


def find_cart(session_key: Optional[str]) -> Optional[Cart]:
    if not session_key:
        return None
    return Cart.query.filter_by(session_key=session_key).first()


def get_or_create_cart(session_key: str) -> Cart:
    """
    Return the open cart for ``session_key``, creating an anonymous one if needed.
    The insert runs in a savepoint: a lost race on the unique session key
    undoes only that insert and re-reads the winner's row.
    """
    if not session_key:
        raise ValidationFailed("Session identifier is required", field="session_id")
    cart = find_cart(session_key)
    if cart:
        return cart
    cart = Cart(session_key=session_key, user_id=None)
    try:
        with db.session.begin_nested():
            db.session.add(cart)
    except IntegrityError:
        cart = find_cart(session_key)
        if cart is None:
            raise
    else:
        logger.info({"event": "cart_created", "cart_id": cart.id})
    return cart


def attach_user(cart: Cart, user_id) -> None:
    if user_id and cart.user_id is None:
        cart.user_id = user_id


def _items(cart: Cart):
    return CartItem.query.filter_by(cart_id=cart.id).order_by(CartItem.id).all()


def add_item(cart: Cart, product_id, requested_qty=1) -> CartItem:
    qty = _quantity(requested_qty, minimum=1)
    product = catalog.get_product(product_id)
    if not product or not product.active:
        raise ProductUnavailable("Product is not available", product_id=product_id)

    item = CartItem.query.filter_by(cart_id=cart.id, product_id=product.id).first()
    held = item.quantity if item else 0
    check_addable(product, qty, held)

    if item:
        item.quantity = held + qty
    else:
        item = CartItem(
            cart_id=cart.id,
            product_id=product.id,
            quantity=qty,
            unit_price=product.price,
        )
        db.session.add(item)
    db.session.flush()
    logger.info({
        "event": "cart_item_added",
        "cart_id": cart.id,
        "product_id": product.id,
        "quantity": item.quantity,
    })
    return item


def _owned_item(cart_item_id, session_key) -> CartItem:
    item = db.session.get(CartItem, cart_item_id)
    if not item:
        raise NotFound("Cart item not found", item_id=cart_item_id)
    if not session_key or item.cart.session_key != session_key:
        logger.warning({"event": "cart_item_foreign_session", "item_id": cart_item_id})
        raise Forbidden("You do not have access to this cart")
    return item


def set_quantity(cart_item_id, new_qty, session_key: str) -> dict:
    """Absolute set of a line's quantity; 0 removes the line. Returns the cart view."""
    qty = _quantity(new_qty, minimum=0)
    item = _owned_item(cart_item_id, session_key)
    cart = item.cart

    if qty == 0:
        db.session.delete(item)
        db.session.flush()
        return render_cart(cart)

    product = catalog.get_product(item.product_id)
    if not product:
        raise ProductUnavailable("Product is not available", product_id=item.product_id)
    check_holdable(product, qty)
    item.quantity = qty
    db.session.flush()
    return render_cart(cart)


def remove_item(cart_item_id, session_key: str) -> None:
    item = _owned_item(cart_item_id, session_key)
    db.session.delete(item)
    db.session.flush()


def clear_cart(session_key: str) -> None:
    cart = find_cart(session_key)
    if not cart:
        return
    for item in _items(cart):
        db.session.delete(item)
    db.session.delete(cart)
    db.session.flush()


def _line(item: CartItem) -> dict:
    product = item.product
    return {
        "item_id": item.id,
        "product_id": item.product_id,
        "name": product.name if product else None,
        "slug": product.slug if product else None,
        "unit_price": item.unit_price,
        "images": list(product.images or []) if product else [],
        "stock": product.stock if product else 0,
        "quantity": item.quantity,
        "subtotal": line_subtotal(item.quantity, item.unit_price),
    }


def render_cart(cart: Optional[Cart]) -> dict:
    if cart is None:
        return {"cart_id": None, "items": [], "total": 0, "item_count": 0}
    lines = [_line(i) for i in _items(cart)]
    return {
        "cart_id": cart.id,
        "items": lines,
        "total": sum_minor_units(line["subtotal"] for line in lines),
        "item_count": sum(line["quantity"] for line in lines),
    }


__all__ = [
    "find_cart",
    "get_or_create_cart",
    "attach_user",
    "add_item",
    "set_quantity",
    "remove_item",
    "clear_cart",
    "render_cart",
]
