from flask import Blueprint, g
from storefront.version import API_PREFIX
from storefront.services.orders import (
    orders_for_user,
    get_order_for_user,
    serialize_order,
)
from storefront.utils import ok, auth_required

orders_bp = Blueprint("orders", __name__, url_prefix=f"{API_PREFIX}/orders")


@orders_bp.before_request
@auth_required
def _enforce_customer():
    """Ensure the requester is authenticated."""
    return None


@orders_bp.route("", methods=["GET"])
def my_orders():
    orders = orders_for_user(g.user_id)
    return ok({"orders": [serialize_order(o, with_items=False) for o in orders]})


@orders_bp.route("/<int:order_id>", methods=["GET"])
def my_order(order_id):
    order = get_order_for_user(order_id, g.user_id)
    return ok({"order": serialize_order(order)})
