"""Initial workflow tables - users, quotations, RFQs, payment requests, notifications, sequences

Revision ID: 20261018_0900_initial
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '20261018_0900_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


USER_ROLES = (
    'ADMIN', 'SENIOR_ADMIN', 'JUNIOR_ADMIN', 'CONTRACTOR', 'CONTRACTOR_SENIOR_MANAGER',
    'CONTRACTOR_JUNIOR_MANAGER', 'ARTISAN', 'PROPERTY_MANAGER', 'CUSTOMER',
)
QUOTATION_STATUSES = (
    'DRAFT', 'PENDING_ARTISAN_REVIEW', 'IN_PROGRESS', 'PENDING_JUNIOR_MANAGER_REVIEW',
    'PENDING_SENIOR_MANAGER_REVIEW', 'APPROVED', 'SENT_TO_CUSTOMER', 'REJECTED',
)
RFQ_STATUSES = ('SUBMITTED', 'UNDER_REVIEW', 'RECEIVED', 'QUOTED', 'APPROVED', 'REJECTED', 'CANCELLED')
PAYMENT_REQUEST_STATUSES = ('PENDING', 'APPROVED', 'REJECTED', 'PAID')
PAYMENT_REQUEST_SOURCES = ('MANUAL', 'MONTHLY_SALARY', 'MILESTONE')
NOTIFICATION_TYPES = (
    'QUOTATION_ASSIGNED', 'QUOTATION_STATUS_UPDATED', 'QUOTATION_REVIEW_REQUIRED', 'QUOTATION_REJECTED',
    'RFQ_QUOTED', 'PAYMENT_REQUEST_CREATED', 'PAYMENT_REQUEST_APPROVED', 'PAYMENT_REQUEST_REJECTED',
    'PAYMENT_REQUEST_PAID', 'SYSTEM_ANNOUNCEMENT',
)


def table_exists(table_name: str) -> bool:
    """Check if a table exists."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    return table_name in inspector.get_table_names()


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # =====================================================
    # USERS
    # =====================================================
    if not table_exists('users'):
        op.create_table(
            'users',
            sa.Column('id', sa.Uuid(), nullable=False),
            sa.Column('email', sa.String(255), nullable=False),
            sa.Column('first_name', sa.String(100), nullable=False),
            sa.Column('last_name', sa.String(100), nullable=False),
            sa.Column('role', sa.Enum(*USER_ROLES, name='user_role'), nullable=False),
            sa.Column('company_id', sa.Uuid(), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('monthly_salary', sa.Numeric(14, 2), nullable=True),
            sa.Column('monthly_payment_day', sa.SmallInteger(), nullable=True),
            sa.Column('disabled_notification_types', sa.JSON(), nullable=False),
            *timestamps(),
            sa.PrimaryKeyConstraint('id', name='pk_users'),
            sa.CheckConstraint(
                'monthly_payment_day IS NULL OR (monthly_payment_day BETWEEN 1 AND 31)',
                name='ck_users_monthly_payment_day_range',
            ),
        )
        op.create_index('ix_users_email', 'users', ['email'], unique=True)
        op.create_index('ix_users_role', 'users', ['role'])
        op.create_index('ix_users_company_id', 'users', ['company_id'])

    # =====================================================
    # QUOTATIONS
    # =====================================================
    if not table_exists('quotations'):
        op.create_table(
            'quotations',
            sa.Column('id', sa.Uuid(), nullable=False),
            sa.Column('quote_number', sa.String(30), nullable=False),
            sa.Column('status', sa.Enum(*QUOTATION_STATUSES, name='quotation_status'), nullable=False),
            sa.Column('rejection_reason', sa.Text(), nullable=True),
            sa.Column('company_id', sa.Uuid(), nullable=True),
            sa.Column('assigned_to_id', sa.Uuid(), nullable=True),
            sa.Column('customer_name', sa.String(255), nullable=False),
            sa.Column('customer_email', sa.String(255), nullable=True),
            sa.Column('address', sa.String(500), nullable=True),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('subtotal', sa.Numeric(14, 2), nullable=False),
            sa.Column('tax', sa.Numeric(14, 2), nullable=False),
            sa.Column('total', sa.Numeric(14, 2), nullable=False),
            sa.Column('line_items', sa.JSON(), nullable=True),
            sa.Column('before_pictures', sa.JSON(), nullable=True),
            sa.Column('num_people_needed', sa.Integer(), nullable=True),
            sa.Column('estimated_duration', sa.Numeric(10, 2), nullable=True),
            sa.Column('duration_unit', sa.Enum('HOURLY', 'DAILY', name='duration_unit'), nullable=True),
            sa.Column('labour_rate', sa.Numeric(14, 2), nullable=True),
            sa.Column('company_material_cost', sa.Numeric(14, 2), nullable=True),
            sa.Column('company_labour_cost', sa.Numeric(14, 2), nullable=True),
            sa.Column('estimated_profit', sa.Numeric(14, 2), nullable=True),
            sa.Column('start_time', sa.DateTime(timezone=True), nullable=True),
            sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
            sa.Column('created_by_id', sa.Uuid(), nullable=True),
            sa.Column('updated_by_id', sa.Uuid(), nullable=True),
            *timestamps(),
            sa.PrimaryKeyConstraint('id', name='pk_quotations'),
            sa.ForeignKeyConstraint(
                ['assigned_to_id'], ['users.id'],
                name='fk_quotations_assigned_to_id_users', ondelete='SET NULL',
            ),
        )
        op.create_index('ix_quotations_quote_number', 'quotations', ['quote_number'], unique=True)
        op.create_index('ix_quotations_status', 'quotations', ['status'])
        op.create_index('ix_quotations_company_id', 'quotations', ['company_id'])
        op.create_index('ix_quotations_assigned_to_id', 'quotations', ['assigned_to_id'])

    if not table_exists('quotation_expense_slips'):
        op.create_table(
            'quotation_expense_slips',
            sa.Column('id', sa.Uuid(), nullable=False),
            sa.Column('quotation_id', sa.Uuid(), nullable=False),
            sa.Column('url', sa.String(1000), nullable=False),
            sa.Column(
                'category',
                sa.Enum('MATERIALS', 'TOOLS', 'TRANSPORTATION', 'OTHER', name='expense_slip_category'),
                nullable=False,
            ),
            sa.Column('description', sa.String(500), nullable=True),
            sa.Column('amount', sa.Numeric(14, 2), nullable=True),
            *timestamps(),
            sa.PrimaryKeyConstraint('id', name='pk_quotation_expense_slips'),
            sa.ForeignKeyConstraint(
                ['quotation_id'], ['quotations.id'],
                name='fk_quotation_expense_slips_quotation_id_quotations', ondelete='CASCADE',
            ),
        )
        op.create_index('ix_quotation_expense_slips_quotation_id', 'quotation_expense_slips', ['quotation_id'])

    # =====================================================
    # PROPERTY MANAGER RFQS
    # =====================================================
    if not table_exists('property_manager_rfqs'):
        op.create_table(
            'property_manager_rfqs',
            sa.Column('id', sa.Uuid(), nullable=False),
            sa.Column('rfq_number', sa.String(30), nullable=False),
            sa.Column('property_manager_id', sa.Uuid(), nullable=False),
            sa.Column('title', sa.String(255), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('status', sa.Enum(*RFQ_STATUSES, name='rfq_status'), nullable=False),
            sa.Column('quoted_date', sa.DateTime(timezone=True), nullable=True),
            *timestamps(),
            sa.PrimaryKeyConstraint('id', name='pk_property_manager_rfqs'),
            sa.UniqueConstraint('rfq_number', name='uq_property_manager_rfqs_rfq_number'),
            sa.ForeignKeyConstraint(
                ['property_manager_id'], ['users.id'],
                name='fk_property_manager_rfqs_property_manager_id_users', ondelete='CASCADE',
            ),
        )
        op.create_index('ix_property_manager_rfqs_property_manager_id', 'property_manager_rfqs', ['property_manager_id'])
        op.create_index('ix_property_manager_rfqs_status', 'property_manager_rfqs', ['status'])

    # =====================================================
    # PAYMENT REQUESTS
    # =====================================================
    if not table_exists('payment_requests'):
        op.create_table(
            'payment_requests',
            sa.Column('id', sa.Uuid(), nullable=False),
            sa.Column('request_number', sa.String(30), nullable=False),
            sa.Column('artisan_id', sa.Uuid(), nullable=False),
            sa.Column('order_ids', sa.JSON(), nullable=False),
            sa.Column('calculated_amount', sa.Numeric(14, 2), nullable=False),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('status', sa.Enum(*PAYMENT_REQUEST_STATUSES, name='payment_request_status'), nullable=False),
            sa.Column('rejection_reason', sa.Text(), nullable=True),
            sa.Column('approved_date', sa.DateTime(timezone=True), nullable=True),
            sa.Column('paid_date', sa.DateTime(timezone=True), nullable=True),
            sa.Column(
                'source_type',
                sa.Enum(*PAYMENT_REQUEST_SOURCES, name='payment_request_source'),
                nullable=False,
                server_default='MANUAL',
            ),
            sa.Column('period_key', sa.String(7), nullable=True),
            *timestamps(),
            sa.PrimaryKeyConstraint('id', name='pk_payment_requests'),
            sa.ForeignKeyConstraint(
                ['artisan_id'], ['users.id'],
                name='fk_payment_requests_artisan_id_users', ondelete='CASCADE',
            ),
            sa.UniqueConstraint(
                'artisan_id', 'source_type', 'period_key',
                name='uq_payment_requests_artisan_source_period',
            ),
        )
        op.create_index('ix_payment_requests_request_number', 'payment_requests', ['request_number'], unique=True)
        op.create_index('ix_payment_requests_artisan_id', 'payment_requests', ['artisan_id'])
        op.create_index('ix_payment_requests_status', 'payment_requests', ['status'])

    # =====================================================
    # NOTIFICATIONS
    # =====================================================
    if not table_exists('notifications'):
        op.create_table(
            'notifications',
            sa.Column('id', sa.Uuid(), nullable=False),
            sa.Column('recipient_id', sa.Uuid(), nullable=False),
            sa.Column('recipient_role', sa.String(50), nullable=False),
            sa.Column('message', sa.Text(), nullable=False),
            sa.Column('notification_type', sa.Enum(*NOTIFICATION_TYPES, name='notification_type'), nullable=False),
            sa.Column('related_entity_id', sa.Uuid(), nullable=True),
            sa.Column('related_entity_type', sa.String(50), nullable=True),
            sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
            *timestamps(),
            sa.PrimaryKeyConstraint('id', name='pk_notifications'),
            sa.ForeignKeyConstraint(
                ['recipient_id'], ['users.id'],
                name='fk_notifications_recipient_id_users', ondelete='CASCADE',
            ),
        )
        op.create_index('ix_notifications_recipient_id', 'notifications', ['recipient_id'])
        op.create_index('ix_notifications_notification_type', 'notifications', ['notification_type'])
        op.create_index('ix_notifications_is_read', 'notifications', ['is_read'])

    # =====================================================
    # SEQUENCE COUNTERS
    # =====================================================
    if not table_exists('sequence_counters'):
        op.create_table(
            'sequence_counters',
            sa.Column('name', sa.String(50), nullable=False),
            sa.Column('value', sa.BigInteger(), nullable=False),
            sa.PrimaryKeyConstraint('name', name='pk_sequence_counters'),
        )


def downgrade() -> None:
    for table_name in (
        'sequence_counters',
        'notifications',
        'payment_requests',
        'property_manager_rfqs',
        'quotation_expense_slips',
        'quotations',
        'users',
    ):
        if table_exists(table_name):
            op.drop_table(table_name)

    bind = op.get_bind()
    for enum_name in (
        'notification_type',
        'payment_request_source',
        'payment_request_status',
        'rfq_status',
        'expense_slip_category',
        'duration_unit',
        'quotation_status',
        'user_role',
    ):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
