from flask import Blueprint
from storefront.version import API_PREFIX
from storefront.services import catalog
from storefront.utils import ok

products_bp = Blueprint("products", __name__, url_prefix=f"{API_PREFIX}/products")


@products_bp.route("/<int:product_id>", methods=["GET"])
def get_product(product_id):
    """Catalog lookup by id
    ---
    tags: [Catalog]
    parameters:
      - {name: product_id, in: path, type: integer, required: true}
    responses:
      200: {description: Product with current price and stock}
      404: {description: Unknown product}
    """
    return ok(catalog.lookup(product_id))


@products_bp.route("/slug/<string:slug>", methods=["GET"])
def get_product_by_slug(slug):
    return ok(catalog.lookup_by_slug(slug))
