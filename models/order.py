from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from models import db, BIGINT

ORDER_STATUSES = ("pending", "paid", "shipped", "delivered", "cancelled")

# Lifecycle moves; delivered and cancelled are terminal.
ORDER_TRANSITIONS = {
    "pending": ("paid", "cancelled"),
    "paid": ("shipped", "cancelled"),
    "shipped": ("delivered", "cancelled"),
    "delivered": (),
    "cancelled": (),
}

DELIVERY_METHODS = ("courier", "locker", "pickup")
PAYMENT_METHODS = ("transfer", "cash_on_delivery")


class Order(db.Model):
    __tablename__ = "order"
    __table_args__ = (
        db.Index("ix_order_status_created", "status", "created_at"),
    )
    id = Column(BIGINT, primary_key=True)
    user_id = Column(BIGINT, ForeignKey("user.id", ondelete="SET NULL"), nullable=True, index=True)
    session_key = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default="pending")

    # Contact and shipping snapshot, independent of the user account
    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=False)
    address_line1 = Column(String(255), nullable=False)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=False)
    postal_code = Column(String(20), nullable=False)
    country = Column(String(100), nullable=False, default="Poland")

    delivery_method = Column(String(20), nullable=False)
    payment_method = Column(String(20), nullable=False)

    # Minor units
    delivery_price = Column(Integer, nullable=True)
    total_amount = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    user = db.relationship("User", lazy=True)
    items = db.relationship(
        "OrderItem", backref="order", cascade="all, delete-orphan", order_by="OrderItem.id", lazy=True
    )
    status_log = db.relationship(
        "OrderStatusLog", backref="order", cascade="all, delete-orphan", order_by="OrderStatusLog.id", lazy=True
    )


class OrderItem(db.Model):
    __tablename__ = "order_item"
    id = db.Column(BIGINT, primary_key=True)
    order_id = db.Column(BIGINT, db.ForeignKey("order.id"), nullable=False, index=True)

    # Snapshot; product_id is deliberately not a foreign key
    product_id = db.Column(BIGINT, nullable=False)
    product_name = db.Column(db.String(255), nullable=False)
    unit_price = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    subtotal = db.Column(db.Integer, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "subtotal": self.subtotal,
        }


class OrderStatusLog(db.Model):
    __tablename__ = "order_status_log"
    id = Column(BIGINT, primary_key=True)
    order_id = Column(BIGINT, ForeignKey("order.id"), nullable=False, index=True)
    from_status = Column(String(20), nullable=True)
    status = Column(String(20), nullable=False)
    updated_by = Column(String(64), nullable=False)
    note = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=func.now())

    def to_dict(self):
        return {
            "from_status": self.from_status,
            "status": self.status,
            "updated_by": self.updated_by,
            "note": self.note,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
