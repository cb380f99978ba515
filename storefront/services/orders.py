"""
Order ledger: read models and status maintenance for placed orders.

Orders and their items are write-once. The only mutation offered here is the
status, and every status assignment is appended to ``order_status_log``.
"""
import logging
from datetime import date, datetime, time, timedelta
from models import db
from models.order import (
    Order,
    OrderStatusLog,
    ORDER_STATUSES,
    ORDER_TRANSITIONS,
)
from models.user import User
from .errors import NotFound, Forbidden, ValidationFailed, InvalidTransition
from .checkout import DEFAULT_DELIVERY_SURCHARGES

logger = logging.getLogger(__name__)

SORT_KEYS = ("id", "user_name", "customer_email", "status", "total_amount", "created_at")

_SORT_COLUMNS = {
    "id": Order.id,
    "customer_email": Order.customer_email,
    "status": Order.status,
    "total_amount": Order.total_amount,
    "created_at": Order.created_at,
}


def is_allowed_transition(current: str, new: str) -> bool:
    return new in ORDER_TRANSITIONS.get(current, ())


def _parse_date(value, field):
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationFailed(f"{field} must be a date (YYYY-MM-DD)", field=field)


def _check_status(status, field="status"):
    if status not in ORDER_STATUSES:
        raise ValidationFailed(f"Unknown status: {status}", field=field)


def list_orders(status=None, date_from=None, date_to=None, sort="created_at", direction="desc"):
    """
    Filtered, sorted order list for the back-office.
    Returns ``(orders, applied)`` where ``applied`` echoes the effective
    filters and sort so the caller can render its controls.
    """
    start = _parse_date(date_from, "date_from")
    end = _parse_date(date_to, "date_to")
    if sort not in SORT_KEYS:
        sort = "created_at"
    direction = "asc" if str(direction or "").lower() == "asc" else "desc"

    query = Order.query
    if status:
        _check_status(status)
        query = query.filter(Order.status == status)
    if start:
        query = query.filter(Order.created_at >= datetime.combine(start, time.min))
    if end:
        # inclusive whole day
        query = query.filter(Order.created_at < datetime.combine(end + timedelta(days=1), time.min))

    if sort == "user_name":
        query = query.outerjoin(User, Order.user_id == User.id)
        column = User.name
    else:
        column = _SORT_COLUMNS[sort]
    if direction == "asc":
        query = query.order_by(column.asc(), Order.id.asc())
    else:
        query = query.order_by(column.desc(), Order.id.desc())

    applied = {
        "status": status or None,
        "date_from": start.isoformat() if start else None,
        "date_to": end.isoformat() if end else None,
        "sort": sort,
        "dir": direction,
    }
    return query.all(), applied


def get_order(order_id) -> Order:
    order = db.session.get(Order, order_id)
    if not order:
        raise NotFound("Order not found", order_id=order_id)
    return order


def orders_for_user(user_id):
    return (
        Order.query.filter_by(user_id=user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def get_order_for_user(order_id, user_id) -> Order:
    order = get_order(order_id)
    if order.user_id is None or order.user_id != user_id:
        raise Forbidden("You do not have access to this order")
    return order


def _record(order, new_status, actor, note=None):
    db.session.add(
        OrderStatusLog(
            order_id=order.id,
            from_status=order.status,
            status=new_status,
            updated_by=str(actor),
            note=note,
        )
    )
    order.status = new_status


def update_status(order_id, new_status, actor) -> Order:
    """
    Administrative status edit. Any known status is accepted; moves outside the
    lifecycle table are applied, logged at WARNING and marked in the status log.
    """
    _check_status(new_status)
    order = get_order(order_id)
    current = order.status
    if current == new_status:
        return order
    note = None
    if not is_allowed_transition(current, new_status):
        note = "administrative override"
        logger.warning({
            "event": "order_status_override",
            "order_id": order.id,
            "from": current,
            "to": new_status,
            "actor": str(actor),
        })
    _record(order, new_status, actor, note)
    db.session.flush()
    logger.info({"event": "order_status_updated", "order_id": order.id, "status": new_status})
    return order


def advance_status(order_id, new_status, actor) -> Order:
    """Strict lifecycle move; refuses anything outside the transition table."""
    _check_status(new_status)
    order = get_order(order_id)
    if not is_allowed_transition(order.status, new_status):
        raise InvalidTransition(order.status, new_status)
    _record(order, new_status, actor)
    db.session.flush()
    return order


def _delivery_price(order):
    if order.delivery_price is not None:
        return order.delivery_price
    return DEFAULT_DELIVERY_SURCHARGES.get(order.delivery_method, 0)


def serialize_order(order: Order, with_items=True, with_history=False) -> dict:
    data = {
        "id": order.id,
        "status": order.status,
        "total_amount": order.total_amount,
        "delivery_method": order.delivery_method,
        "delivery_price": _delivery_price(order),
        "payment_method": order.payment_method,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "customer_phone": order.customer_phone,
        "address_line1": order.address_line1,
        "address_line2": order.address_line2,
        "city": order.city,
        "postal_code": order.postal_code,
        "country": order.country,
        "user": (
            {"id": order.user.id, "name": order.user.name, "email": order.user.email}
            if order.user
            else None
        ),
    }
    if with_items:
        data["items"] = [oi.to_dict() for oi in order.items]
    if with_history:
        data["history"] = [entry.to_dict() for entry in order.status_log]
    return data


def summarize_order(order: Order) -> dict:
    """Row shape for the back-office order table."""
    return {
        "id": order.id,
        "user_name": order.user.name if order.user else None,
        "customer_email": order.customer_email,
        "status": order.status,
        "total_amount": order.total_amount,
        "created_at": order.created_at.strftime("%Y-%m-%d %H:%M") if order.created_at else None,
    }


__all__ = [
    "SORT_KEYS",
    "is_allowed_transition",
    "list_orders",
    "get_order",
    "orders_for_user",
    "get_order_for_user",
    "update_status",
    "advance_status",
    "serialize_order",
    "summarize_order",
]
