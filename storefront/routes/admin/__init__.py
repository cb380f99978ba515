from flask import Blueprint, request, g
from storefront.version import API_PREFIX
from storefront.schemas.orders import OrderStatusRequest
from storefront.services.orders import (
    list_orders as query_orders,
    get_order,
    update_status,
    serialize_order,
    summarize_order,
)
from storefront.utils import (
    ok,
    auth_required,
    role_required,
    validate_schema,
    transactional,
)

admin_bp = Blueprint("admin", __name__, url_prefix=f"{API_PREFIX}/admin")


@admin_bp.before_request
@auth_required
@role_required("admin")
def _enforce_admin_role():
    """Ensure the requester is an authenticated admin."""
    return None


@admin_bp.route("/orders", methods=["GET"])
def list_orders():
    """Back-office order list
    ---
    tags: [Admin]
    parameters:
      - {name: status, in: query, type: string}
      - {name: date_from, in: query, type: string, format: date}
      - {name: date_to, in: query, type: string, format: date}
      - {name: sort, in: query, type: string}
      - {name: dir, in: query, type: string, enum: [asc, desc]}
    responses:
      200: {description: Orders with the filters and sort actually applied}
    """
    args = request.args
    orders, applied = query_orders(
        status=args.get("status") or None,
        date_from=args.get("date_from"),
        date_to=args.get("date_to"),
        sort=args.get("sort", "created_at"),
        direction=args.get("dir", "desc"),
    )
    return ok({"orders": [summarize_order(o) for o in orders], "filters": applied})


@admin_bp.route("/orders/<int:order_id>", methods=["GET"])
def show_order(order_id):
    order = get_order(order_id)
    return ok({"order": serialize_order(order, with_history=True)})


@admin_bp.route("/orders/<int:order_id>/status", methods=["PATCH"])
@validate_schema(OrderStatusRequest)
def change_status(order_id):
    data = request.validated_data
    with transactional("Failed to update order status"):
        order = update_status(order_id, data.status, actor=g.user_id)
        status = order.status
    return ok({"order_id": order_id, "status": status}, message="Order status updated")
