"""Read-only product lookups used by the cart and checkout services."""
from typing import Optional
from models import db
from models.product import Product
from .errors import NotFound


def get_product(product_id) -> Optional[Product]:
    if product_id is None:
        return None
    return db.session.get(Product, product_id)


def get_product_for_update(product_id) -> Optional[Product]:
    """Fetch a product and lock its row until the surrounding transaction ends."""
    return (
        Product.query.filter_by(id=product_id)
        .with_for_update()
        .populate_existing()
        .one_or_none()
    )


def get_product_by_slug(slug: str) -> Optional[Product]:
    return Product.query.filter_by(slug=slug).first()


def lookup(product_id) -> dict:
    """Catalog contract: ``{id, name, slug, price, stock, active}`` or NotFound."""
    product = get_product(product_id)
    if not product:
        raise NotFound("Product not found", product_id=product_id)
    return product.to_dict()


def lookup_by_slug(slug: str) -> dict:
    product = get_product_by_slug(slug)
    if not product or not product.active:
        raise NotFound("Product not found", slug=slug)
    return product.to_dict()
