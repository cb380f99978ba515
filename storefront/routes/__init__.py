from .products import products_bp
from .cart import cart_bp
from .checkout import checkout_bp
from .orders import orders_bp
from .pages import pages_bp
from .admin import admin_bp


__all__ = [
    'products_bp',
    'cart_bp',
    'checkout_bp',
    'orders_bp',
    'pages_bp',
    'admin_bp',
]
