"""initial storefront schema: catalog, carts, orders

Revision ID: 5b1e2c7d9a40
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '5b1e2c7d9a40'
down_revision = None
branch_labels = None
depends_on = None

BIGINT = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('is_admin', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_table(
        'product',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('images', sa.JSON(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('price >= 0', name='ck_product_price_non_negative'),
        sa.CheckConstraint('stock >= 0', name='ck_product_stock_non_negative'),
    )
    op.create_index('ix_product_slug', 'product', ['slug'], unique=True)
    op.create_table(
        'cart',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('session_key', sa.String(100), nullable=False),
        sa.Column('user_id', BIGINT, sa.ForeignKey('user.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_cart_session_key', 'cart', ['session_key'], unique=True)
    op.create_table(
        'cart_item',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('cart_id', BIGINT, sa.ForeignKey('cart.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', BIGINT, sa.ForeignKey('product.id', ondelete='CASCADE'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('cart_id', 'product_id', name='uq_cart_item_cart_product'),
        sa.CheckConstraint('quantity >= 1', name='ck_cart_item_quantity_positive'),
    )
    op.create_table(
        'order',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('user_id', BIGINT, sa.ForeignKey('user.id', ondelete='SET NULL'), nullable=True),
        sa.Column('session_key', sa.String(100), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('customer_name', sa.String(255), nullable=False),
        sa.Column('customer_email', sa.String(255), nullable=False),
        sa.Column('customer_phone', sa.String(50), nullable=False),
        sa.Column('address_line1', sa.String(255), nullable=False),
        sa.Column('address_line2', sa.String(255), nullable=True),
        sa.Column('city', sa.String(100), nullable=False),
        sa.Column('postal_code', sa.String(20), nullable=False),
        sa.Column('country', sa.String(100), nullable=False),
        sa.Column('delivery_method', sa.String(20), nullable=False),
        sa.Column('payment_method', sa.String(20), nullable=False),
        sa.Column('delivery_price', sa.Integer(), nullable=True),
        sa.Column('total_amount', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_order_user_id', 'order', ['user_id'])
    op.create_index('ix_order_status_created', 'order', ['status', 'created_at'])
    op.create_table(
        'order_item',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('order_id', BIGINT, sa.ForeignKey('order.id'), nullable=False),
        sa.Column('product_id', BIGINT, nullable=False),
        sa.Column('product_name', sa.String(255), nullable=False),
        sa.Column('unit_price', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('subtotal', sa.Integer(), nullable=False),
    )
    op.create_index('ix_order_item_order_id', 'order_item', ['order_id'])
    op.create_table(
        'order_status_log',
        sa.Column('id', BIGINT, primary_key=True),
        sa.Column('order_id', BIGINT, sa.ForeignKey('order.id'), nullable=False),
        sa.Column('from_status', sa.String(20), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('updated_by', sa.String(64), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_order_status_log_order_id', 'order_status_log', ['order_id'])


def downgrade():
    op.drop_index('ix_order_status_log_order_id', table_name='order_status_log')
    op.drop_table('order_status_log')
    op.drop_index('ix_order_item_order_id', table_name='order_item')
    op.drop_table('order_item')
    op.drop_index('ix_order_status_created', table_name='order')
    op.drop_index('ix_order_user_id', table_name='order')
    op.drop_table('order')
    op.drop_table('cart_item')
    op.drop_index('ix_cart_session_key', table_name='cart')
    op.drop_table('cart')
    op.drop_index('ix_product_slug', table_name='product')
    op.drop_table('product')
    op.drop_table('user')
