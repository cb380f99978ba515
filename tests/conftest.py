import os
import sys
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from models import db
from models.product import Product


@pytest.fixture(scope='session')
def app_instance():
    os.environ.setdefault('APP_ENV', 'testing')
    from storefront import create_app
    app = create_app()
    app.config.update(
        TESTING=True,
        SQLALCHEMY_TRACK_MODIFICATIONS=False
    )
    return app


@pytest.fixture(scope='function')
def app(app_instance):
    with app_instance.app_context():
        db.drop_all()
        db.create_all()
        yield app_instance
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    return app.test_client()


@pytest.fixture
def make_app(monkeypatch):
    """Build a separate testing app with config overrides."""
    monkeypatch.setenv('APP_ENV', 'testing')

    def _make(**overrides):
        from storefront import create_app
        from storefront.config import TestingConfig
        return create_app(type('OverrideConfig', (TestingConfig,), overrides))

    return _make


@pytest.fixture
def make_product(app):
    counter = {'n': 0}

    def _make(name='Hantle 5kg', price=1000, stock=5, active=True, slug=None):
        counter['n'] += 1
        product = Product(
            name=name,
            slug=slug or f"product-{counter['n']}",
            price=price,
            stock=stock,
            images=[f"/img/{counter['n']}.jpg"],
            active=active,
        )
        db.session.add(product)
        db.session.commit()
        return product

    return _make


@pytest.fixture
def login(client):
    """Return ``(user_id, token)`` for a stub user, creating it on first use."""

    def _login(email='anna@example.com', name='Anna', admin=False):
        resp = client.post('/__auth/login_stub', json={'email': email, 'name': name, 'admin': admin})
        data = resp.get_json()['data']
        return data['user_id'], data['access']

    return _login
