import pytest
from models import db
from models.cart import CartItem
from models.order import Order, OrderItem, OrderStatusLog
from models.product import Product
from models.user import User
from storefront.services import checkout as checkout_service
from storefront.services import catalog
from storefront.services.cart import get_or_create_cart, add_item, find_cart, render_cart
from storefront.services.checkout import checkout, checkout_defaults, delivery_surcharge
from storefront.services.errors import (
    EmptyCart,
    InsufficientStock,
    ProductGone,
    UnknownDeliveryMethod,
    UnknownPaymentMethod,
    ValidationFailed,
)
from storefront.utils.db import transactional

CONTACT = {
    "customer_name": "Jan Kowalski",
    "customer_email": "jan@example.com",
    "customer_phone": "+48 600 100 200",
}
ADDRESS = {
    "address_line1": "ul. Sportowa 1",
    "city": "Kraków",
    "postal_code": "30-001",
    "country": "Poland",
}


def _fill(session_key, *lines):
    cart = get_or_create_cart(session_key)
    for product, qty in lines:
        add_item(cart, product.id, qty)
    db.session.commit()
    return cart


def _checkout(session_key, delivery="courier", payment="transfer", user_id=None, contact=None):
    with transactional("checkout failed"):
        order = checkout(
            session_key,
            contact=contact or CONTACT,
            address=ADDRESS,
            delivery_method=delivery,
            payment_method=payment,
            user_id=user_id,
        )
    return order


def test_courier_checkout_totals_and_clears_cart(app, make_product):
    p = make_product(name="Mata do jogi", price=1000, stock=5)
    _fill("s-b", (p, 2))

    order = _checkout("s-b")

    assert order.status == "pending"
    assert order.total_amount == 3499
    assert order.delivery_price == 1499
    assert db.session.get(Product, p.id).stock == 3
    assert find_cart("s-b") is None
    assert CartItem.query.count() == 0

    items = OrderItem.query.filter_by(order_id=order.id).all()
    assert [(i.product_name, i.unit_price, i.quantity, i.subtotal) for i in items] == [
        ("Mata do jogi", 1000, 2, 2000)
    ]
    log = OrderStatusLog.query.filter_by(order_id=order.id).all()
    assert [(entry.from_status, entry.status) for entry in log] == [(None, "pending")]


@pytest.mark.parametrize("method,surcharge", [("courier", 1499), ("locker", 1299), ("pickup", 0)])
def test_delivery_surcharges(app, make_product, method, surcharge):
    p = make_product(price=2500, stock=5)
    _fill("s-d", (p, 1))
    order = _checkout("s-d", delivery=method)
    assert order.total_amount == 2500 + surcharge
    assert delivery_surcharge(method) == surcharge


def test_surcharge_table_is_configurable(app, make_product, monkeypatch):
    monkeypatch.setitem(app.config, "DELIVERY_SURCHARGES", {"courier": 999, "locker": 1299, "pickup": 0})
    p = make_product(price=1000, stock=5)
    _fill("s-cfg", (p, 1))
    assert _checkout("s-cfg").total_amount == 1999


def test_empty_cart(app):
    with pytest.raises(EmptyCart):
        _checkout("nobody")
    get_or_create_cart("empty")
    db.session.commit()
    with pytest.raises(EmptyCart):
        _checkout("empty")
    assert Order.query.count() == 0


def test_stock_dropped_below_cart_quantity(app, make_product):
    p = make_product(name="Hantle 10kg", price=1000, stock=4)
    _fill("s-d4", (p, 4))
    p.stock = 2
    db.session.commit()

    with pytest.raises(InsufficientStock) as exc:
        _checkout("s-d4")

    assert exc.value.extra["product_name"] == "Hantle 10kg"
    assert exc.value.left == 2
    assert Order.query.count() == 0
    view = render_cart(find_cart("s-d4"))
    assert [(i["product_id"], i["quantity"]) for i in view["items"]] == [(p.id, 4)]
    assert db.session.get(Product, p.id).stock == 2


def test_unknown_methods_leave_cart_untouched(app, make_product):
    p = make_product(stock=3)
    _fill("s-m", (p, 1))
    with pytest.raises(UnknownDeliveryMethod) as exc:
        _checkout("s-m", delivery="drone")
    assert exc.value.extra["field"] == "delivery_method"
    with pytest.raises(UnknownPaymentMethod):
        _checkout("s-m", payment="barter")
    assert Order.query.count() == 0
    assert len(render_cart(find_cart("s-m"))["items"]) == 1


def test_blank_contact_field_is_rejected(app, make_product):
    p = make_product(stock=3)
    _fill("s-blank", (p, 1))
    with pytest.raises(ValidationFailed) as exc:
        _checkout("s-blank", contact={**CONTACT, "customer_phone": "   "})
    assert exc.value.extra["field"] == "customer_phone"


def test_unknown_user_id_is_rejected(app, make_product):
    p = make_product(stock=3)
    _fill("s-user", (p, 1))
    with pytest.raises(ValidationFailed):
        _checkout("s-user", user_id=4242)


def test_vanished_product(app, make_product):
    keep = make_product(stock=5)
    gone = make_product(stock=5)
    _fill("s-gone", (keep, 1), (gone, 1))
    db.session.execute(Product.__table__.delete().where(Product.id == gone.id))
    db.session.commit()
    db.session.expunge_all()

    with pytest.raises(ProductGone):
        _checkout("s-gone")
    assert Order.query.count() == 0
    assert db.session.get(Product, keep.id).stock == 5


def test_no_oversell_across_sessions(app, make_product):
    p = make_product(price=1000, stock=3)
    sessions = [f"buyer-{n}" for n in range(5)]
    for key in sessions:
        _fill(key, (p, 1))

    placed, refused = 0, 0
    for key in sessions:
        try:
            _checkout(key)
            placed += 1
        except InsufficientStock:
            refused += 1

    assert (placed, refused) == (3, 2)
    assert db.session.get(Product, p.id).stock == 0
    assert Order.query.count() == 3


def test_rows_are_locked_in_product_id_order(app, make_product, monkeypatch):
    low = make_product(name="Mata", stock=5)
    high = make_product(name="Hantle", stock=5)
    _fill("s-lock", (high, 1), (low, 1))

    locked = []
    real_lock = catalog.get_product_for_update

    def recording_lock(product_id):
        locked.append(product_id)
        return real_lock(product_id)

    monkeypatch.setattr(catalog, "get_product_for_update", recording_lock)
    order = _checkout("s-lock")

    assert locked == [low.id, high.id]
    # snapshots keep the cart order
    assert [i.product_id for i in order.items] == [high.id, low.id]


def test_conditional_decrement_rolls_back_whole_checkout(app, make_product, monkeypatch):
    a = make_product(name="Gumy oporowe", price=500, stock=5)
    b = make_product(name="Kettlebell", price=9000, stock=1)
    _fill("s-race", (a, 2), (b, 1))
    # another checkout took the last kettlebell after the re-validation read
    b.stock = 0
    db.session.commit()

    def stale_revalidate(items):
        return {i.product_id: catalog.get_product(i.product_id) for i in items}

    monkeypatch.setattr(checkout_service, "_revalidate", stale_revalidate)

    with pytest.raises(InsufficientStock) as exc:
        _checkout("s-race")

    assert exc.value.extra["product_id"] == b.id
    assert Order.query.count() == 0
    assert OrderItem.query.count() == 0
    assert db.session.get(Product, a.id).stock == 5
    assert db.session.get(Product, b.id).stock == 0
    assert len(render_cart(find_cart("s-race"))["items"]) == 2


def test_checkout_links_user_and_snapshots_contact(app, make_product):
    user = User(name="Ola", email="ola@example.com")
    db.session.add(user)
    db.session.commit()
    p = make_product(stock=2)
    _fill("s-ola", (p, 1))
    order = _checkout("s-ola", user_id=user.id)
    assert order.user_id == user.id
    assert order.session_key == "s-ola"
    assert order.customer_email == "jan@example.com"
    assert order.address_line2 is None


def test_checkout_defaults_from_profile_then_last_order(app, make_product):
    user = User(name="Ola", email="ola@example.com")
    db.session.add(user)
    db.session.commit()

    defaults = checkout_defaults(user)
    assert defaults["customer_name"] == "Ola"
    assert defaults["customer_email"] == "ola@example.com"
    assert defaults["country"] == "Poland"
    assert (defaults["delivery_method"], defaults["payment_method"]) == ("courier", "transfer")

    p = make_product(stock=2)
    _fill("s-def", (p, 1))
    _checkout("s-def", delivery="locker", payment="cash_on_delivery", user_id=user.id)
    defaults = checkout_defaults(user)
    assert defaults["city"] == "Kraków"
    assert defaults["delivery_method"] == "locker"
    assert defaults["payment_method"] == "cash_on_delivery"
