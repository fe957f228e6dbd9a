"""add payroll and loan tables

Revision ID: 8c2d4e6f1a35
Revises: 3b7e1f2a9c40
Create Date: 2025-11-20 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8c2d4e6f1a35'
down_revision = '3b7e1f2a9c40'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('phone', sa.String(length=40), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'salary_payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('employee_name', sa.String(length=200), nullable=False),
        sa.Column('month', sa.String(length=7), nullable=False),
        sa.Column('payment_date', sa.String(length=10), nullable=False),
        sa.Column('daily_salary', sa.Numeric(14, 2), nullable=False),
        sa.Column('days_worked', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(16, 2), nullable=False),
        sa.Column(
            'payment_method',
            sa.Enum('cash', 'transfer', 'check', name='paymentmethod'),
            nullable=False,
        ),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('days_worked >= 0', name='ck_salary_payments_days_non_negative'),
        sa.CheckConstraint('amount >= 0', name='ck_salary_payments_amount_non_negative'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('salary_payments', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_salary_payments_employee_id'), ['employee_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_salary_payments_month'), ['month'], unique=False)

    op.create_table(
        'people',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('phone', sa.String(length=40), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'loans',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('person_id', sa.Integer(), nullable=False),
        sa.Column('person_name', sa.String(length=200), nullable=False),
        sa.Column(
            'transaction_type',
            sa.Enum('lend', 'borrow', name='loantransactiontype'),
            nullable=False,
        ),
        sa.Column('amount', sa.Numeric(16, 2), nullable=False),
        sa.Column('transaction_date', sa.String(length=10), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['person_id'], ['people.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('loans', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_loans_person_id'), ['person_id'], unique=False)


def downgrade():
    with op.batch_alter_table('loans', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_loans_person_id'))
    op.drop_table('loans')
    op.drop_table('people')

    with op.batch_alter_table('salary_payments', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_salary_payments_month'))
        batch_op.drop_index(batch_op.f('ix_salary_payments_employee_id'))
    op.drop_table('salary_payments')
    op.drop_table('employees')

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        op.execute('DROP TYPE IF EXISTS loantransactiontype')
        op.execute('DROP TYPE IF EXISTS paymentmethod')
