import threading
import pytest
from models import db
from models.order import Order
from models.product import Product
from storefront.services.cart import get_or_create_cart, add_item
from storefront.services.checkout import checkout
from storefront.services.errors import InsufficientStock
from storefront.utils.db import transactional

BUYERS = 6
STOCK = 2

CONTACT = {
    "customer_name": "Ewa Nowak",
    "customer_email": "ewa@example.com",
    "customer_phone": "+48 600 200 300",
}
ADDRESS = {
    "address_line1": "ul. Biegowa 7",
    "city": "Gdańsk",
    "postal_code": "80-001",
    "country": "Poland",
}


@pytest.fixture
def file_app(make_app, tmp_path):
    app = make_app(
        SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'shop.db'}",
        SQLALCHEMY_ENGINE_OPTIONS={"connect_args": {"timeout": 30, "check_same_thread": False}},
    )
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


def test_concurrent_checkouts_never_oversell(file_app):
    with file_app.app_context():
        product = Product(name="Kettlebell 16kg", slug="kettlebell-16", price=15900, stock=STOCK, images=[], active=True)
        db.session.add(product)
        db.session.commit()
        product_id = product.id
        for n in range(BUYERS):
            with transactional():
                add_item(get_or_create_cart(f"buyer-{n}"), product_id, 1)
        db.session.remove()

    barrier = threading.Barrier(BUYERS)
    results = []

    def buy(session_key):
        with file_app.app_context():
            barrier.wait()
            try:
                with transactional("checkout failed"):
                    checkout(
                        session_key,
                        contact=CONTACT,
                        address=ADDRESS,
                        delivery_method="pickup",
                        payment_method="transfer",
                    )
                results.append("ok")
            except InsufficientStock:
                results.append("insufficient")
            except Exception as e:
                results.append(type(e).__name__)
            finally:
                db.session.remove()

    threads = [threading.Thread(target=buy, args=(f"buyer-{n}",)) for n in range(BUYERS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert sorted(results) == ["insufficient"] * (BUYERS - STOCK) + ["ok"] * STOCK
    with file_app.app_context():
        assert db.session.get(Product, product_id).stock == 0
        assert Order.query.count() == STOCK
