# --- models/product.py ---
from models import db, BIGINT
from datetime import datetime


class Product(db.Model):
    __tablename__ = "product"
    __table_args__ = (
        db.CheckConstraint("price >= 0", name="ck_product_price_non_negative"),
        db.CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
    )

    id = db.Column(BIGINT, primary_key=True)

    # Core details
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)

    # Pricing, in minor units (19999 = 199.99)
    price = db.Column(db.Integer, nullable=False)

    # Inventory
    stock = db.Column(db.Integer, nullable=False, default=0)

    # Media
    images = db.Column(db.JSON, nullable=True)                    # list of URLs/paths

    active = db.Column(db.Boolean, nullable=False, default=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "price": self.price,
            "stock": self.stock,
            "images": list(self.images or []),
            "active": self.active,
        }

    def __repr__(self):
        return f"<Product id={self.id} slug={self.slug} stock={self.stock}>"
