"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2025-01-06

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


quote_request_status = sa.Enum(
    'PENDING', 'QUOTED', 'ACCEPTED', 'REJECTED', 'COMPLETED',
    name='quoterequeststatus',
)
project_type = sa.Enum(
    'DATA_SCIENCE', 'MACHINE_LEARNING', 'SOFTWARE_ENGINEERING', 'IOT',
    'MOBILE_APP', 'WEB_DEVELOPMENT', 'DATABASE_SYSTEMS', 'OTHER',
    name='projecttype',
)
discount_type = sa.Enum('PERCENTAGE', 'FIXED', name='discounttype')
customer_status = sa.Enum('LEAD', 'ACTIVE', 'INACTIVE', 'VIP', name='customerstatus')
customer_source = sa.Enum(
    'WEBSITE', 'PHONE', 'EMAIL', 'WHATSAPP', 'REFERRAL', 'SOCIAL_MEDIA', 'WALK_IN', 'OTHER',
    name='customersource',
)
project_status = sa.Enum(
    'INQUIRY', 'QUOTATION_SENT', 'ACCEPTED', 'IN_PROGRESS', 'REVIEW',
    'COMPLETED', 'DELIVERED', 'CANCELLED',
    name='projectstatus',
)
project_stage = sa.Enum(
    'REQUIREMENTS', 'DESIGN', 'DEVELOPMENT', 'TESTING', 'DEPLOYMENT', 'MAINTENANCE',
    name='projectstage',
)
payment_type = sa.Enum('DEPOSIT', 'MILESTONE', 'FINAL', 'FULL', 'OTHER', name='paymenttype')
payment_method = sa.Enum(
    'BANK_TRANSFER', 'CREDIT_CARD', 'DEBIT_CARD', 'MOBILE_MONEY', 'CASH',
    'PAYPAL', 'CRYPTO', 'CHECK', 'OTHER',
    name='paymentmethod',
)
payment_status = sa.Enum(
    'PENDING', 'COMPLETED', 'FAILED', 'REFUNDED', 'OVERDUE',
    name='paymentstatus',
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'quote_requests',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=False),
        sa.Column('university', sa.String(255), nullable=False),
        sa.Column('course', sa.String(255), nullable=False),
        sa.Column('project_type', project_type, nullable=False),
        sa.Column('package_tier', sa.String(100), nullable=True),
        sa.Column('deadline', sa.Date(), nullable=True),
        sa.Column('budget', sa.String(100), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', quote_request_status, nullable=False),
        sa.Column('quoted_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_quote_requests_email', 'quote_requests', ['email'])
    op.create_index('ix_quote_requests_project_type', 'quote_requests', ['project_type'])
    op.create_index('ix_quote_requests_status', 'quote_requests', ['status'])
    op.create_index('ix_quote_requests_submitted_at', 'quote_requests', ['submitted_at'])

    op.create_table(
        'quotations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'quote_request_id', sa.Integer(),
            sa.ForeignKey('quote_requests.id', ondelete='CASCADE'),
            nullable=False, unique=True,
        ),
        sa.Column('quotation_number', sa.String(50), nullable=False),
        sa.Column('revision', sa.Integer(), nullable=False),
        sa.Column('date_issued', sa.Date(), nullable=False),
        sa.Column('valid_until', sa.Date(), nullable=False),
        sa.Column('validity_days', sa.Integer(), nullable=False),
        sa.Column('discount_value', sa.Numeric(12, 4), nullable=False),
        sa.Column('discount_type', discount_type, nullable=False),
        sa.Column('tax_rate', sa.Numeric(9, 4), nullable=False),
        sa.Column('payment_terms', sa.Text(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False),
        sa.Column('discount_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('tax_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('total', sa.Numeric(12, 2), nullable=False),
        sa.Column('pdf_path', sa.String(500), nullable=True),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_quotations_quotation_number', 'quotations', ['quotation_number'], unique=True)

    op.create_table(
        'quotation_line_items',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'quotation_id', sa.Integer(),
            sa.ForeignKey('quotations.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_quotation_line_items_quotation_id', 'quotation_line_items', ['quotation_id'])

    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=False),
        sa.Column('university', sa.String(255), nullable=True),
        sa.Column('course', sa.String(255), nullable=True),
        sa.Column('status', customer_status, nullable=False),
        sa.Column('source', customer_source, nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('last_contact_date', sa.Date(), nullable=True),
        sa.Column('total_revenue', sa.Numeric(12, 2), nullable=False),
        sa.Column('outstanding_balance', sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_customers_email', 'customers', ['email'], unique=True)
    op.create_index('ix_customers_status', 'customers', ['status'])

    op.create_table(
        'customer_projects',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'customer_id', sa.Integer(),
            sa.ForeignKey('customers.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', project_status, nullable=False),
        sa.Column('stage', project_stage, nullable=False),
        sa.Column('progress', sa.Integer(), nullable=False),
        sa.Column('budget', sa.Numeric(12, 2), nullable=False),
        sa.Column('actual_cost', sa.Numeric(12, 2), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_customer_projects_customer_id', 'customer_projects', ['customer_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'customer_id', sa.Integer(),
            sa.ForeignKey('customers.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('project_name', sa.String(255), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('payment_type', payment_type, nullable=False),
        sa.Column('payment_method', payment_method, nullable=False),
        sa.Column('status', payment_status, nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('paid_date', sa.Date(), nullable=True),
        sa.Column('transaction_id', sa.String(100), nullable=True),
        sa.Column('reference', sa.String(100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('invoice_number', sa.String(50), nullable=True),
        sa.Column('invoice_date', sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_payments_customer_id', 'payments', ['customer_id'])
    op.create_index('ix_payments_status', 'payments', ['status'])
    op.create_index('ix_payments_paid_date', 'payments', ['paid_date'])
    op.create_index('ix_payments_invoice_number', 'payments', ['invoice_number'])


def downgrade() -> None:
    op.drop_table('payments')
    op.drop_table('customer_projects')
    op.drop_table('customers')
    op.drop_table('quotation_line_items')
    op.drop_table('quotations')
    op.drop_table('quote_requests')

    bind = op.get_bind()
    for enum_type in (
        payment_status, payment_method, payment_type, project_stage, project_status,
        customer_source, customer_status, discount_type, project_type, quote_request_status,
    ):
        enum_type.drop(bind, checkfirst=True)
