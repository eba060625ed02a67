"""create_store_tables

Revision ID: 3f1c9a7e2b10
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7e2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


product_category_enum = postgresql.ENUM(
    'fruits', 'vegetables', 'proteins', 'grains', 'dairy', 'snacks',
    'beverages', 'supplements', 'meal-kits',
    name='store_product_category_enum', create_type=False,
)
order_status_enum = postgresql.ENUM(
    'pending', 'confirmed', 'processing', 'shipped', 'delivered',
    'cancelled', 'refunded',
    name='store_order_status_enum', create_type=False,
)
payment_status_enum = postgresql.ENUM(
    'pending', 'paid', 'failed', 'refunded',
    name='store_payment_status_enum', create_type=False,
)
payment_method_enum = postgresql.ENUM(
    'credit-card', 'debit-card', 'paypal', 'apple-pay', 'google-pay',
    name='store_payment_method_enum', create_type=False,
)
subscription_plan_enum = postgresql.ENUM(
    'weekly', 'bi-weekly', 'monthly',
    name='store_subscription_plan_enum', create_type=False,
)
subscription_status_enum = postgresql.ENUM(
    'active', 'paused', 'cancelled', 'expired',
    name='store_subscription_status_enum', create_type=False,
)

ENUMS = (
    product_category_enum,
    order_status_enum,
    payment_status_enum,
    payment_method_enum,
    subscription_plan_enum,
    subscription_status_enum,
)


def upgrade() -> None:
    """Upgrade schema - Create store catalog, cart, order and subscription tables."""
    bind = op.get_bind()
    for enum in ENUMS:
        enum.create(bind, checkfirst=True)

    op.create_table(
        'store_products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', product_category_enum, nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('sale_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('unit', sa.String(length=20), nullable=True),
        sa.Column('stock_quantity', sa.Integer(), nullable=False),
        sa.Column('min_order_quantity', sa.Integer(), nullable=True),
        sa.Column('max_order_quantity', sa.Integer(), nullable=True),
        sa.Column('dietary_tags', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('is_featured', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('price >= 0', name=op.f('ck_store_products_non_negative_price')),
        sa.CheckConstraint('stock_quantity >= 0', name=op.f('ck_store_products_non_negative_stock')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_store_products')),
    )
    op.create_index(op.f('ix_store_products_name'), 'store_products', ['name'])

    op.create_table(
        'store_carts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.String(length=255), nullable=False),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=True),
        sa.Column('tax', sa.Numeric(12, 2), nullable=True),
        sa.Column('shipping', sa.Numeric(12, 2), nullable=True),
        sa.Column('discount', sa.Numeric(12, 2), nullable=True),
        sa.Column('total', sa.Numeric(12, 2), nullable=True),
        sa.Column('coupon_code', sa.String(length=50), nullable=True),
        sa.Column('coupon_percent', sa.Numeric(5, 2), nullable=True),
        sa.Column('coupon_discount', sa.Numeric(12, 2), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('last_updated', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_store_carts')),
        sa.UniqueConstraint('owner_id', name=op.f('uq_store_carts_owner_id')),
    )

    op.create_table(
        'store_cart_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('cart_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('note', sa.String(length=255), nullable=True),
        sa.Column('added_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('quantity > 0', name=op.f('ck_store_cart_items_positive_quantity')),
        sa.ForeignKeyConstraint(
            ['cart_id'], ['store_carts.id'],
            name=op.f('fk_store_cart_items_cart_id_store_carts'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['product_id'], ['store_products.id'],
            name=op.f('fk_store_cart_items_product_id_store_products'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_store_cart_items')),
    )

    op.create_table(
        'store_subscriptions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.String(length=255), nullable=False),
        sa.Column('plan', subscription_plan_enum, nullable=False),
        sa.Column('frequency', sa.Integer(), nullable=False),
        sa.Column('status', subscription_status_enum, nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('next_order_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_order_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('payment_method', payment_method_enum, nullable=True),
        sa.Column('shipping_address', sa.JSON(), nullable=False),
        sa.Column('delivery_instructions', sa.String(length=500), nullable=True),
        sa.Column('auto_renew', sa.Boolean(), nullable=True),
        sa.Column('max_orders', sa.Integer(), nullable=True),
        sa.Column('current_order_count', sa.Integer(), nullable=True),
        sa.Column('next_order_number', sa.Integer(), nullable=True),
        sa.Column('pause_reason', sa.String(length=255), nullable=True),
        sa.Column('pause_start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('pause_end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancellation_reason', sa.String(length=255), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            'max_orders IS NULL OR max_orders > 0',
            name=op.f('ck_store_subscriptions_positive_max_orders'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_store_subscriptions')),
    )
    op.create_index(op.f('ix_store_subscriptions_owner_id'), 'store_subscriptions', ['owner_id'])
    op.create_index(op.f('ix_store_subscriptions_status'), 'store_subscriptions', ['status'])
    op.create_index(
        op.f('ix_store_subscriptions_next_order_date'), 'store_subscriptions', ['next_order_date']
    )

    op.create_table(
        'store_subscription_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('subscription_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.CheckConstraint(
            'quantity > 0', name=op.f('ck_store_subscription_items_positive_quantity')
        ),
        sa.ForeignKeyConstraint(
            ['subscription_id'], ['store_subscriptions.id'],
            name=op.f('fk_store_subscription_items_subscription_id_store_subscriptions'),
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['product_id'], ['store_products.id'],
            name=op.f('fk_store_subscription_items_product_id_store_products'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_store_subscription_items')),
    )

    op.create_table(
        'store_orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_number', sa.String(length=20), nullable=False),
        sa.Column('owner_id', sa.String(length=255), nullable=False),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False),
        sa.Column('tax', sa.Numeric(12, 2), nullable=True),
        sa.Column('shipping', sa.Numeric(12, 2), nullable=True),
        sa.Column('discount', sa.Numeric(12, 2), nullable=True),
        sa.Column('coupon_code', sa.String(length=50), nullable=True),
        sa.Column('coupon_discount', sa.Numeric(12, 2), nullable=True),
        sa.Column('total', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', order_status_enum, nullable=True),
        sa.Column('payment_status', payment_status_enum, nullable=True),
        sa.Column('payment_method', payment_method_enum, nullable=False),
        sa.Column('shipping_address', sa.JSON(), nullable=False),
        sa.Column('billing_address', sa.JSON(), nullable=False),
        sa.Column('delivery_instructions', sa.String(length=500), nullable=True),
        sa.Column('estimated_delivery', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_delivery', sa.DateTime(timezone=True), nullable=True),
        sa.Column('tracking_number', sa.String(length=100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_subscription_order', sa.Boolean(), nullable=True),
        sa.Column('subscription_id', sa.Uuid(), nullable=True),
        sa.Column('idempotency_key', sa.String(length=100), nullable=True),
        sa.Column('refund_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('refund_reason', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ['subscription_id'], ['store_subscriptions.id'],
            name=op.f('fk_store_orders_subscription_id_store_subscriptions'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_store_orders')),
        sa.UniqueConstraint('idempotency_key', name=op.f('uq_store_orders_idempotency_key')),
    )
    op.create_index(op.f('ix_store_orders_order_number'), 'store_orders', ['order_number'], unique=True)
    op.create_index(op.f('ix_store_orders_owner_id'), 'store_orders', ['owner_id'])
    op.create_index(op.f('ix_store_orders_status'), 'store_orders', ['status'])
    op.create_index(op.f('ix_store_orders_subscription_id'), 'store_orders', ['subscription_id'])

    op.create_table(
        'store_order_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('product_name', sa.String(length=100), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_price', sa.Numeric(12, 2), nullable=False),
        sa.ForeignKeyConstraint(
            ['order_id'], ['store_orders.id'],
            name=op.f('fk_store_order_items_order_id_store_orders'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['product_id'], ['store_products.id'],
            name=op.f('fk_store_order_items_product_id_store_products'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_store_order_items')),
    )


def downgrade() -> None:
    """Downgrade schema - Drop store tables."""
    op.drop_table('store_order_items')
    op.drop_index(op.f('ix_store_orders_subscription_id'), table_name='store_orders')
    op.drop_index(op.f('ix_store_orders_status'), table_name='store_orders')
    op.drop_index(op.f('ix_store_orders_owner_id'), table_name='store_orders')
    op.drop_index(op.f('ix_store_orders_order_number'), table_name='store_orders')
    op.drop_table('store_orders')
    op.drop_table('store_subscription_items')
    op.drop_index(op.f('ix_store_subscriptions_next_order_date'), table_name='store_subscriptions')
    op.drop_index(op.f('ix_store_subscriptions_status'), table_name='store_subscriptions')
    op.drop_index(op.f('ix_store_subscriptions_owner_id'), table_name='store_subscriptions')
    op.drop_table('store_subscriptions')
    op.drop_table('store_cart_items')
    op.drop_table('store_carts')
    op.drop_index(op.f('ix_store_products_name'), table_name='store_products')
    op.drop_table('store_products')

    bind = op.get_bind()
    for enum in reversed(ENUMS):
        enum.drop(bind, checkfirst=True)
