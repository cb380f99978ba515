from flask import Blueprint, request, g, current_app, url_for, jsonify
from flask_limiter.util import get_remote_address
from extensions import limiter
from storefront.version import API_PREFIX
from storefront.metrics import CHECKOUT_COUNTER, track
from storefront.schemas.checkout import CheckoutRequest
from storefront.services.checkout import checkout, checkout_defaults
from storefront.services.errors import EmptyCart
from storefront.utils import (
    ok,
    transactional,
    auth_optional,
    auth_required,
    validate_schema,
    resolve_session_key,
)

checkout_bp = Blueprint("checkout", __name__, url_prefix=f"{API_PREFIX}/checkout")


@checkout_bp.route("", methods=["POST"])
@limiter.limit(
    lambda: current_app.config["CHECKOUT_LIMIT_PER_IP"],
    key_func=get_remote_address,
    error_message="Too many checkout attempts from this IP, rate limit exceeded",
)
@auth_optional
@validate_schema(CheckoutRequest)
@track(CHECKOUT_COUNTER)
def place_order():
    """Convert the session's cart into an order
    ---
    tags: [Checkout]
    responses:
      201: {description: Order placed; body carries order_id and redirect_url}
      404: {description: A product vanished from the catalog}
      422: {description: "Empty cart, unknown method, invalid field or insufficient stock"}
    """
    data = request.validated_data
    session_key = resolve_session_key()
    if not session_key:
        raise EmptyCart("Cart is empty")
    # an authenticated caller always owns the order
    user_id = g.user_id if g.user_id is not None else data.user_id
    with transactional("Checkout failed"):
        order = checkout(
            session_key,
            contact=data.contact(),
            address=data.address(),
            delivery_method=data.delivery_method,
            payment_method=data.payment_method,
            user_id=user_id,
        )
    return jsonify({
        "status": "success",
        "message": "Order placed successfully",
        "data": {
            "order_id": order.id,
            "total_amount": order.total_amount,
            "redirect_url": url_for("pages.order_success", order_id=order.id),
        },
    }), 201


@checkout_bp.route("/defaults", methods=["GET"])
@auth_required
def form_defaults():
    return ok(checkout_defaults(request.user))
