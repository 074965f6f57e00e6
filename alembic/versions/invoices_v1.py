"""Invoices, payment history and audit events

Revision ID: invoices_v1
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = 'invoices_v1'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('invoices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_number', sa.String(length=64), nullable=False),
        sa.Column('emr_number', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=True),
        sa.Column('invoiced_date', sa.DateTime(), nullable=False),
        sa.Column('invoiced_by', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('last_name', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('mobile_number', sa.String(length=32), nullable=False),
        sa.Column('gender', sa.String(length=10), nullable=False),
        sa.Column('doctor', sa.String(length=255), nullable=False),
        sa.Column('service', sa.String(length=20), nullable=False),
        sa.Column('treatment', sa.String(length=255), nullable=True),
        sa.Column('package', sa.String(length=255), nullable=True),
        sa.Column('patient_type', sa.String(length=10), nullable=True),
        sa.Column('referred_by', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='Active'),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('paid', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('advance', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('pending', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('payment_method', sa.String(length=50), nullable=False),
        sa.Column('insurance', sa.String(length=3), nullable=False, server_default='No'),
        sa.Column('insurance_type', sa.String(length=20), nullable=True),
        sa.Column('co_pay_percent', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('co_pay_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('advance_given_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('need_to_pay', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('advance_claim_status', sa.String(length=20), nullable=True),
        sa.Column('advance_claim_release_date', sa.DateTime(), nullable=True),
        sa.Column('advance_claim_released_by', sa.String(length=255), nullable=True),
        sa.Column('advance_claim_cancellation_remark', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount >= 0', name='ck_invoice_amount_non_negative'),
        sa.CheckConstraint('paid >= 0', name='ck_invoice_paid_non_negative'),
        sa.CheckConstraint('advance >= 0', name='ck_invoice_advance_non_negative'),
        sa.CheckConstraint('pending >= 0', name='ck_invoice_pending_non_negative'),
        sa.CheckConstraint(
            "(advance_claim_status = 'Released' "
            "AND advance_claim_release_date IS NOT NULL AND advance_claim_released_by IS NOT NULL) "
            "OR (COALESCE(advance_claim_status, '') <> 'Released' "
            "AND advance_claim_release_date IS NULL AND advance_claim_released_by IS NULL)",
            name='ck_invoice_release_audit_coupled',
        ),
    )
    op.create_index('ix_invoices_id', 'invoices', ['id'], unique=False)
    op.create_index('ix_invoices_invoice_number', 'invoices', ['invoice_number'], unique=True)
    op.create_index('ix_invoices_emr_number', 'invoices', ['emr_number'], unique=False)
    op.create_index('ix_invoices_mobile_number', 'invoices', ['mobile_number'], unique=False)
    op.create_index('ix_invoices_advance_claim_status', 'invoices', ['advance_claim_status'], unique=False)

    op.create_table('payment_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('paying', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('paid', sa.Numeric(12, 2), nullable=False),
        sa.Column('advance', sa.Numeric(12, 2), nullable=False),
        sa.Column('pending', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('recorded_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], name='fk_payment_history_invoice_id'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_payment_history_id', 'payment_history', ['id'], unique=False)
    op.create_index('ix_payment_history_invoice_id', 'payment_history', ['invoice_id'], unique=False)

    op.create_table('audit_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.String(length=64), nullable=True),
        sa.Column('actor_name', sa.String(length=255), nullable=True),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('from_status', sa.String(length=50), nullable=True),
        sa.Column('to_status', sa.String(length=50), nullable=True),
        sa.Column('metadata_json', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], name='fk_audit_events_invoice_id'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_events_id', 'audit_events', ['id'], unique=False)
    op.create_index('ix_audit_events_invoice_id', 'audit_events', ['invoice_id'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_audit_events_invoice_id', table_name='audit_events')
    op.drop_index('ix_audit_events_id', table_name='audit_events')
    op.drop_table('audit_events')
    op.drop_index('ix_payment_history_invoice_id', table_name='payment_history')
    op.drop_index('ix_payment_history_id', table_name='payment_history')
    op.drop_table('payment_history')
    op.drop_index('ix_invoices_advance_claim_status', table_name='invoices')
    op.drop_index('ix_invoices_mobile_number', table_name='invoices')
    op.drop_index('ix_invoices_emr_number', table_name='invoices')
    op.drop_index('ix_invoices_invoice_number', table_name='invoices')
    op.drop_index('ix_invoices_id', table_name='invoices')
    op.drop_table('invoices')
