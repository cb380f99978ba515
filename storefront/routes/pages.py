from flask import Blueprint, current_app
from storefront.services.money import format_minor_units
from storefront.services.orders import get_order
from storefront.utils import ok

pages_bp = Blueprint("pages", __name__)


@pages_bp.route("/order-success/<int:order_id>", methods=["GET"])
def order_success(order_id):
    """Confirmation target that checkout redirects to."""
    order = get_order(order_id)
    return ok({
        "order_id": order.id,
        "status": order.status,
        "total_amount": order.total_amount,
        "total_display": format_minor_units(order.total_amount, current_app.config["CURRENCY"]),
    })
