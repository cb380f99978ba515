import logging
from typing import Optional
from flask import current_app
from opentelemetry import trace
from sqlalchemy import update, select
from models import db
from models.cart import CartItem
from models.order import Order, OrderItem, OrderStatusLog, DELIVERY_METHODS, PAYMENT_METHODS
from models.product import Product
from models.user import User
from . import catalog
from .cart import find_cart
from .errors import (
    EmptyCart,
    ProductGone,
    InsufficientStock,
    UnknownDeliveryMethod,
    UnknownPaymentMethod,
    ValidationFailed,
)
from .money import to_minor_units, line_subtotal, sum_minor_units
from .stock import can_satisfy, max_addable

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

DEFAULT_DELIVERY_SURCHARGES = {"courier": 1499, "locker": 1299, "pickup": 0}

CONTACT_FIELDS = ("customer_name", "customer_email", "customer_phone")
ADDRESS_FIELDS = ("address_line1", "city", "postal_code", "country")


def delivery_surcharge(method: str) -> int:
    if method not in DELIVERY_METHODS:
        raise UnknownDeliveryMethod(method)
    table = current_app.config.get("DELIVERY_SURCHARGES") or DEFAULT_DELIVERY_SURCHARGES
    return to_minor_units(table.get(method, DEFAULT_DELIVERY_SURCHARGES[method]))


def _snapshot(contact: dict, address: dict) -> dict:
    fields = {}
    for key in CONTACT_FIELDS:
        fields[key] = (contact.get(key) or "").strip()
    for key in ADDRESS_FIELDS:
        fields[key] = (address.get(key) or "").strip()
    for key, value in fields.items():
        if not value:
            raise ValidationFailed(f"{key} is required", field=key)
    fields["address_line2"] = (address.get("address_line2") or "").strip() or None
    return fields


def _revalidate(items) -> dict:
    """
    Lock and re-read every product; stock must still cover each line.
    Rows are locked in ascending product id so concurrent checkouts of the
    same products always queue in one order.
    """
    products = {}
    for item in sorted(items, key=lambda i: i.product_id):
        product = catalog.get_product_for_update(item.product_id)
        if product is None:
            raise ProductGone(product_id=item.product_id)
        stock = product.stock or 0
        if not can_satisfy(item.quantity, stock, 0):
            raise InsufficientStock(
                f"Not enough {product.name} in stock",
                left=max_addable(stock, 0),
                product_id=product.id,
                product_name=product.name,
            )
        products[product.id] = product
    return products


def _decrement_stock(product: Product, quantity: int) -> None:
    # Conditional decrement: zero rows means another checkout took the stock
    # after our re-validation read.
    result = db.session.execute(
        update(Product)
        .where(Product.id == product.id, Product.stock >= quantity)
        .values(stock=Product.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        remaining = db.session.execute(
            select(Product.stock).where(Product.id == product.id)
        ).scalar()
        raise InsufficientStock(
            f"Not enough {product.name} in stock",
            left=max(0, remaining or 0),
            product_id=product.id,
            product_name=product.name,
        )
    db.session.expire(product, ["stock"])


def checkout(
    session_key: str,
    contact: dict,
    address: dict,
    delivery_method: str,
    payment_method: str,
    user_id: Optional[int] = None,
) -> Order:
    """
    Convert the session's cart into a pending order.
    Does NOT commit; run it inside ``transactional`` so the order, its items,
    the stock decrements and the cart deletion land together or not at all.
    """
    cart = find_cart(session_key)
    items = CartItem.query.filter_by(cart_id=cart.id).order_by(CartItem.id).all() if cart else []
    if not items:
        raise EmptyCart("Cart is empty")
    if delivery_method not in DELIVERY_METHODS:
        raise UnknownDeliveryMethod(delivery_method)
    if payment_method not in PAYMENT_METHODS:
        raise UnknownPaymentMethod(payment_method)
    fields = _snapshot(contact or {}, address or {})
    if user_id is not None and db.session.get(User, user_id) is None:
        raise ValidationFailed("Unknown user", field="user_id")

    with tracer.start_as_current_span("checkout.revalidate_stock") as span:
        span.set_attribute("cart.lines", len(items))
        products = _revalidate(items)

    surcharge = delivery_surcharge(delivery_method)
    items_total = sum_minor_units(line_subtotal(i.quantity, i.unit_price) for i in items)
    grand_total = items_total + surcharge

    order = Order(
        user_id=user_id,
        session_key=session_key,
        status="pending",
        delivery_method=delivery_method,
        payment_method=payment_method,
        delivery_price=surcharge,
        total_amount=grand_total,
        **fields,
    )
    db.session.add(order)
    db.session.flush()
    db.session.add(OrderStatusLog(order_id=order.id, from_status=None, status="pending", updated_by="checkout"))

    for item in items:
        product = products[item.product_id]
        db.session.add(
            OrderItem(
                order_id=order.id,
                product_id=product.id,
                product_name=product.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
                subtotal=line_subtotal(item.quantity, item.unit_price),
            )
        )
        _decrement_stock(product, item.quantity)

    for item in items:
        db.session.delete(item)
    db.session.delete(cart)
    db.session.flush()

    logger.info({
        "event": "order_placed",
        "order_id": order.id,
        "items": len(items),
        "total_amount": grand_total,
        "delivery_method": delivery_method,
        "payment_method": payment_method,
    })
    return order


def checkout_defaults(user: User) -> dict:
    """Pre-fill values for the checkout form: latest order first, then the profile."""
    last = (
        Order.query.filter_by(user_id=user.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .first()
    )
    if last:
        return {
            "customer_name": last.customer_name,
            "customer_email": last.customer_email,
            "customer_phone": last.customer_phone,
            "address_line1": last.address_line1,
            "address_line2": last.address_line2,
            "city": last.city,
            "postal_code": last.postal_code,
            "country": last.country,
            "delivery_method": last.delivery_method or "courier",
            "payment_method": last.payment_method or "transfer",
        }
    return {
        "customer_name": user.name or "",
        "customer_email": user.email or "",
        "customer_phone": "",
        "address_line1": "",
        "address_line2": "",
        "city": "",
        "postal_code": "",
        "country": current_app.config.get("DEFAULT_COUNTRY", "Poland"),
        "delivery_method": "courier",
        "payment_method": "transfer",
    }


__all__ = ["checkout", "checkout_defaults", "delivery_surcharge", "DEFAULT_DELIVERY_SURCHARGES"]
