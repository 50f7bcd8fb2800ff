"""Initial schema: catalog, orders, payment ledger, users and settings

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

json_type = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')


def upgrade():
    # Catalog
    op.create_table('products',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('district', sa.String(length=100), nullable=False),
        sa.Column('added_by', sa.String(length=50), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('unique_number', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.CheckConstraint('quantity >= 0', name='quantity_non_negative_check'),
        sa.CheckConstraint('price >= 0', name='price_non_negative_check'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_products_district', 'products', ['district'])
    op.create_index(
        'uq_product_identity',
        'products',
        [sa.text('lower(name)'), 'district', 'unique_number'],
        unique=True
    )

    op.create_table('stock_history',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=20), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_stock_history_product_id', 'stock_history', ['product_id'])

    # Orders
    op.create_table('orders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('telegram_id', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('district', sa.String(length=100), nullable=False),
        sa.Column('order_details', sa.Text(), nullable=False),
        sa.Column('product_ids', json_type, nullable=False),
        sa.Column('items', json_type, nullable=True),
        sa.Column('total_amount', sa.Float(), nullable=False),
        sa.Column('payment_status', sa.String(length=20), nullable=False),
        sa.Column('order_status', sa.String(length=20), nullable=False),
        sa.Column('date_ordered', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.CheckConstraint('total_amount >= 0', name='total_amount_non_negative_check'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_orders_payment_amount', 'orders', ['payment_status', 'total_amount'])
    op.create_index('ix_orders_district', 'orders', ['district'])

    # Payment ledger
    op.create_table('transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('sender_phone', sa.String(length=20), nullable=False),
        sa.Column('sms_phone', sa.String(length=20), nullable=False),
        sa.Column('upi_id', sa.String(length=100), nullable=True),
        sa.Column('transaction_id', sa.String(length=100), nullable=True),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('date_received', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_transactions_order_id', 'transactions', ['order_id'])

    op.create_table('raw_transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('sms_text', sa.Text(), nullable=False),
        sa.Column('sender_id', sa.String(length=50), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    # Users and roles
    op.create_table('users',
        sa.Column('telegram_id', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('primary_phone', sa.String(length=20), nullable=False),
        sa.Column('secondary_phone', sa.String(length=20), nullable=True),
        sa.Column('district', sa.String(length=100), nullable=False),
        sa.Column('language', sa.String(length=30), nullable=False),
        sa.Column('registered_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('telegram_id')
    )

    op.create_table('roles',
        sa.Column('telegram_id', sa.String(length=50), nullable=False),
        sa.Column('role', sa.String(length=30), nullable=False),
        sa.Column('district', sa.String(length=100), nullable=True),
        sa.ForeignKeyConstraint(['telegram_id'], ['users.telegram_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('telegram_id', 'role', name='roles_pkey')
    )

    op.create_table('user_info',
        sa.Column('telegram_id', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('house_name', sa.String(length=200), nullable=True),
        sa.Column('landmark', sa.String(length=200), nullable=True),
        sa.Column('ward_no', sa.String(length=50), nullable=True),
        sa.Column('panchayat', sa.String(length=100), nullable=True),
        sa.Column('block', sa.String(length=100), nullable=True),
        sa.Column('sub_district', sa.String(length=100), nullable=True),
        sa.Column('district', sa.String(length=100), nullable=False),
        sa.Column('state', sa.String(length=100), nullable=False),
        sa.Column('primary_phone', sa.String(length=20), nullable=False),
        sa.Column('secondary_phone', sa.String(length=20), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('telegram_id')
    )

    op.create_table('settings',
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('key')
    )


def downgrade():
    op.drop_table('settings')
    op.drop_table('user_info')
    op.drop_table('roles')
    op.drop_table('users')
    op.drop_table('raw_transactions')
    op.drop_index('ix_transactions_order_id', table_name='transactions')
    op.drop_table('transactions')
    op.drop_index('ix_orders_district', table_name='orders')
    op.drop_index('ix_orders_payment_amount', table_name='orders')
    op.drop_table('orders')
    op.drop_index('ix_stock_history_product_id', table_name='stock_history')
    op.drop_table('stock_history')
    op.drop_index('uq_product_identity', table_name='products')
    op.drop_index('ix_products_district', table_name='products')
    op.drop_table('products')
