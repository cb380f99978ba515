from flask import Blueprint, request
from storefront.version import API_PREFIX
from storefront.metrics import CART_MUTATION_COUNTER, track
from storefront.schemas.cart import CartAddRequest, CartUpdateRequest
from storefront.services.cart import (
    find_cart,
    get_or_create_cart,
    attach_user,
    add_item,
    set_quantity,
    remove_item,
    clear_cart,
    render_cart,
)
from storefront.utils import (
    ok,
    transactional,
    auth_optional,
    validate_schema,
    resolve_session_key,
)

cart_bp = Blueprint("cart", __name__, url_prefix=f"{API_PREFIX}/cart")


@cart_bp.route("", methods=["GET"])
def view_cart():
    """Current cart for the caller's session
    ---
    tags: [Cart]
    responses:
      200: {description: "Cart lines with locked prices, subtotals and total"}
    """
    session_key = resolve_session_key()
    return ok(render_cart(find_cart(session_key)))


@cart_bp.route("/add", methods=["POST"])
@auth_optional
@validate_schema(CartAddRequest)
@track(CART_MUTATION_COUNTER, "add")
def add_to_cart():
    """Add a product to the cart
    ---
    tags: [Cart]
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [product_id]
          properties:
            product_id: {type: integer}
            quantity: {type: integer, default: 1}
    responses:
      200: {description: Item added}
      404: {description: Product unavailable}
      422: {description: Out of stock or insufficient stock}
    """
    data = request.validated_data
    session_key = resolve_session_key(create=True)
    with transactional("Failed to add to cart"):
        cart = get_or_create_cart(session_key)
        attach_user(cart, request.user.id if request.user else None)
        item = add_item(cart, data.product_id, data.quantity)
        result = {"item_id": item.id, "quantity": item.quantity}
    result["cart"] = render_cart(cart)
    return ok(result, message="Item added to cart")


@cart_bp.route("/items/<int:item_id>", methods=["PATCH"])
@validate_schema(CartUpdateRequest)
@track(CART_MUTATION_COUNTER, "update")
def update_cart_item(item_id):
    data = request.validated_data
    session_key = resolve_session_key()
    with transactional("Failed to update cart quantity"):
        view = set_quantity(item_id, data.quantity, session_key)
    return ok(view, message="Cart updated")


@cart_bp.route("/items/<int:item_id>", methods=["DELETE"])
@track(CART_MUTATION_COUNTER, "remove")
def remove_cart_item(item_id):
    session_key = resolve_session_key()
    with transactional("Failed to remove cart item"):
        remove_item(item_id, session_key)
    return ok(render_cart(find_cart(session_key)), message="Item removed")


@cart_bp.route("/clear", methods=["POST"])
@track(CART_MUTATION_COUNTER, "clear")
def clear():
    session_key = resolve_session_key()
    with transactional("Failed to clear cart"):
        clear_cart(session_key)
    return ok(render_cart(None), message="Cart cleared")
