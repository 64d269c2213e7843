# alembic/versions/001_initial.py

"""Initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Create account table
    op.create_table('account',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('balance', sa.Numeric(precision=14, scale=2), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='EUR'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_account_user_id', 'account', ['user_id'])

    # Create investment table
    op.create_table('investment',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('symbol', sa.String(length=30), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=True),
        sa.Column('quantity', sa.Numeric(precision=20, scale=8), nullable=False, server_default='0'),
        sa.Column('avg_purchase_price', sa.Numeric(precision=18, scale=6), nullable=False, server_default='0'),
        sa.Column('current_price', sa.Numeric(precision=18, scale=6), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='EUR'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_investment_user_id', 'investment', ['user_id'])

    # Create automation table
    op.create_table('automation',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('automation_type', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='EUR'),
        sa.Column('cadence_type', sa.String(length=10), nullable=False),
        sa.Column('anchor_day', sa.Integer(), nullable=False),
        sa.Column('anchor_month', sa.Integer(), nullable=True),
        sa.Column('account_id', sa.String(length=36), nullable=True),
        sa.Column('to_account_id', sa.String(length=36), nullable=True),
        sa.Column('investment_id', sa.String(length=36), nullable=True),
        sa.Column('category_id', sa.String(length=36), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_executed_through', sa.Date(), nullable=True),
        sa.Column('next_execution_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['account_id'], ['account.id']),
        sa.ForeignKeyConstraint(['to_account_id'], ['account.id']),
        sa.ForeignKeyConstraint(['investment_id'], ['investment.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_automation_user_id', 'automation', ['user_id'])
    op.create_index('ix_automation_active', 'automation', ['is_active'])

    # Create ledger_transaction table (insert-only)
    op.create_table('ledger_transaction',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('transaction_type', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('account_id', sa.String(length=36), nullable=True),
        sa.Column('to_account_id', sa.String(length=36), nullable=True),
        sa.Column('investment_id', sa.String(length=36), nullable=True),
        sa.Column('category_id', sa.String(length=36), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('automation_id', sa.String(length=36), nullable=True),
        sa.Column('execution_key', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['account_id'], ['account.id']),
        sa.ForeignKeyConstraint(['to_account_id'], ['account.id']),
        sa.ForeignKeyConstraint(['investment_id'], ['investment.id']),
        sa.ForeignKeyConstraint(['automation_id'], ['automation.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_ledger_transaction_user_date', 'ledger_transaction', ['user_id', 'date'])
    op.create_index('ix_ledger_transaction_automation', 'ledger_transaction', ['automation_id'])
    op.create_index('ix_ledger_transaction_execution_key', 'ledger_transaction', ['execution_key'])

    # Create automation_execution table (idempotence ledger)
    op.create_table('automation_execution',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('automation_id', sa.String(length=36), nullable=False),
        sa.Column('occurrence_date', sa.Date(), nullable=False),
        sa.Column('transaction_id', sa.String(length=36), nullable=False),
        sa.Column('executed_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['automation_id'], ['automation.id']),
        sa.ForeignKeyConstraint(['transaction_id'], ['ledger_transaction.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('automation_id', 'occurrence_date', name='uq_automation_execution_occurrence')
    )

    # Create daily_snapshot table
    op.create_table('daily_snapshot',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('account_balances', sa.JSON(), nullable=False),
        sa.Column('total_accounts_eur', sa.Numeric(precision=16, scale=2), nullable=False),
        sa.Column('total_investments_eur', sa.Numeric(precision=16, scale=2), nullable=False),
        sa.Column('net_worth_eur', sa.Numeric(precision=16, scale=2), nullable=False),
        sa.Column('income_eur', sa.Numeric(precision=16, scale=2), nullable=False),
        sa.Column('expenses_eur', sa.Numeric(precision=16, scale=2), nullable=False),
        sa.Column('eur_usd_rate', sa.Numeric(precision=10, scale=6), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'date', name='uq_daily_snapshot_user_date')
    )


def downgrade():
    op.drop_table('daily_snapshot')
    op.drop_table('automation_execution')
    op.drop_index('ix_ledger_transaction_execution_key', table_name='ledger_transaction')
    op.drop_index('ix_ledger_transaction_automation', table_name='ledger_transaction')
    op.drop_index('ix_ledger_transaction_user_date', table_name='ledger_transaction')
    op.drop_table('ledger_transaction')
    op.drop_index('ix_automation_active', table_name='automation')
    op.drop_index('ix_automation_user_id', table_name='automation')
    op.drop_table('automation')
    op.drop_index('ix_investment_user_id', table_name='investment')
    op.drop_table('investment')
    op.drop_index('ix_account_user_id', table_name='account')
    op.drop_table('account')
