"""create workshop ledger tables

Revision ID: 3b7e1f2a9c40
Revises: 
Create Date: 2025-11-02 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b7e1f2a9c40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('role', sa.Enum('admin', 'staff', name='roleenum'), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('dimensions', sa.String(length=120), nullable=False, server_default=''),
        sa.Column('material', sa.String(length=120), nullable=False, server_default=''),
        sa.Column('unit_price', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('unit_price >= 0', name='ck_products_unit_price_non_negative'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'productions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('product_name', sa.String(length=200), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('date', sa.String(length=10), nullable=False),
        sa.Column('shift', sa.Enum('morning', 'evening', 'night', name='productionshift'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('quantity > 0', name='ck_productions_quantity_positive'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('productions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_productions_product_id'), ['product_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_productions_date'), ['date'], unique=False)

    op.create_table(
        'costs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column(
            'type',
            sa.Enum('electricity', 'water', 'gas', 'salary', 'rent', 'other', name='costtype'),
            nullable=False,
        ),
        sa.Column('type_label', sa.String(length=120), nullable=False, server_default=''),
        sa.Column('amount', sa.Numeric(16, 2), nullable=False, server_default='0'),
        sa.Column('period_type', sa.Enum('daily', 'monthly', 'yearly', name='periodtype'), nullable=True),
        sa.Column('period_value', sa.String(length=10), nullable=True),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('legacy_date', sa.String(length=10), nullable=True),
        sa.Column('legacy_product_id', sa.Integer(), nullable=True),
        sa.Column('legacy_production_date', sa.String(length=10), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('amount >= 0', name='ck_costs_amount_non_negative'),
        sa.ForeignKeyConstraint(['legacy_product_id'], ['products.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('costs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_costs_type'), ['type'], unique=False)
        batch_op.create_index(batch_op.f('ix_costs_period_value'), ['period_value'], unique=False)

    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_number', sa.String(length=32), nullable=False),
        sa.Column('status', sa.Enum('draft', 'approved', 'paid', name='invoicestatus'), nullable=False),
        sa.Column('customer_name', sa.String(length=200), nullable=False),
        sa.Column('customer_address', sa.String(length=255), nullable=True),
        sa.Column('customer_phone', sa.String(length=40), nullable=True),
        sa.Column('customer_tax_id', sa.String(length=40), nullable=True),
        sa.Column('subtotal', sa.Numeric(16, 2), nullable=False, server_default='0'),
        sa.Column('discount', sa.Numeric(16, 2), nullable=False, server_default='0'),
        sa.Column('tax', sa.Numeric(16, 2), nullable=False, server_default='0'),
        sa.Column('total', sa.Numeric(16, 2), nullable=False, server_default='0'),
        sa.Column('date', sa.String(length=10), nullable=False),
        sa.Column('due_date', sa.String(length=10), nullable=True),
        sa.Column('paid_date', sa.String(length=10), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invoice_number'),
    )
    with op.batch_alter_table('invoices', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_invoices_status'), ['status'], unique=False)

    op.create_table(
        'invoice_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('product_name', sa.String(length=200), nullable=False),
        sa.Column('dimensions', sa.String(length=120), nullable=False, server_default=''),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(14, 2), nullable=False),
        sa.Column('total', sa.Numeric(16, 2), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_invoice_items_quantity_positive'),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('invoice_items', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_invoice_items_invoice_id'), ['invoice_id'], unique=False)

    op.create_table(
        'sales',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=True),
        sa.Column('invoice_item_id', sa.Integer(), nullable=True),
        sa.Column('customer_name', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('product_name', sa.String(length=200), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(14, 2), nullable=False),
        sa.Column('total_price', sa.Numeric(16, 2), nullable=False),
        sa.Column('date', sa.String(length=10), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['invoice_item_id'], ['invoice_items.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invoice_item_id', name='uq_sales_invoice_item_id'),
    )
    with op.batch_alter_table('sales', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_sales_invoice_id'), ['invoice_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_sales_product_id'), ['product_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_sales_date'), ['date'], unique=False)


def downgrade():
    with op.batch_alter_table('sales', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_sales_date'))
        batch_op.drop_index(batch_op.f('ix_sales_product_id'))
        batch_op.drop_index(batch_op.f('ix_sales_invoice_id'))
    op.drop_table('sales')

    with op.batch_alter_table('invoice_items', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_invoice_items_invoice_id'))
    op.drop_table('invoice_items')

    with op.batch_alter_table('invoices', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_invoices_status'))
    op.drop_table('invoices')

    with op.batch_alter_table('costs', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_costs_period_value'))
        batch_op.drop_index(batch_op.f('ix_costs_type'))
    op.drop_table('costs')

    with op.batch_alter_table('productions', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_productions_date'))
        batch_op.drop_index(batch_op.f('ix_productions_product_id'))
    op.drop_table('productions')

    op.drop_table('products')
    op.drop_table('user')

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for enum_name in ('invoicestatus', 'periodtype', 'costtype', 'productionshift', 'roleenum'):
            op.execute(f'DROP TYPE IF EXISTS {enum_name}')
