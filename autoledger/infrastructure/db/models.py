"""
Database Models (SQLAlchemy ORM)
Ledger tables are insert-only; accounts/investments/automations are mutable state
"""

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from autoledger.infrastructure.db.database import Base
from autoledger.utils.time import now_local_naive


def _new_id() -> str:
    return str(uuid.uuid4())


class AccountModel(Base):
    """Money account with a running balance"""
    __tablename__ = "account"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    balance = Column(Numeric(14, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="EUR")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=now_local_naive)


class InvestmentModel(Base):
    """Investment position (quantity + weighted-average cost)"""
    __tablename__ = "investment"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), nullable=False, index=True)
    symbol = Column(String(30), nullable=False)
    name = Column(String(120), nullable=True)
    quantity = Column(Numeric(20, 8), nullable=False, default=0)
    avg_purchase_price = Column(Numeric(18, 6), nullable=False, default=0)
    current_price = Column(Numeric(18, 6), nullable=True)
    currency = Column(String(3), nullable=False, default="EUR")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=now_local_naive)


class AutomationModel(Base):
    """Recurring money movement defined by the user"""
    __tablename__ = "automation"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    automation_type = Column(String(20), nullable=False)  # income, expense, transfer, investment
    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="EUR")

    cadence_type = Column(String(10), nullable=False)  # weekly, monthly, yearly
    anchor_day = Column(Integer, nullable=False)
    anchor_month = Column(Integer, nullable=True)

    account_id = Column(String(36), ForeignKey("account.id"), nullable=True)
    to_account_id = Column(String(36), ForeignKey("account.id"), nullable=True)
    investment_id = Column(String(36), ForeignKey("investment.id"), nullable=True)
    category_id = Column(String(36), nullable=True)
    note = Column(Text, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    last_executed_through = Column(Date, nullable=True)
    next_execution_date = Column(Date, nullable=True)

    created_at = Column(DateTime, nullable=False, default=now_local_naive)
    updated_at = Column(DateTime, nullable=False, default=now_local_naive, onupdate=now_local_naive)

    executions = relationship("AutomationExecutionModel", back_populates="automation")

    __table_args__ = (
        Index("ix_automation_active", "is_active"),
    )


class LedgerTransactionModel(Base):
    """Ledger entry - AUDIT RECORD, never updated"""
    __tablename__ = "ledger_transaction"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), nullable=False)
    transaction_type = Column(String(20), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    date = Column(Date, nullable=False)

    account_id = Column(String(36), ForeignKey("account.id"), nullable=True)
    to_account_id = Column(String(36), ForeignKey("account.id"), nullable=True)
    investment_id = Column(String(36), ForeignKey("investment.id"), nullable=True)
    category_id = Column(String(36), nullable=True)
    note = Column(Text, nullable=True)

    automation_id = Column(String(36), ForeignKey("automation.id"), nullable=True)
    execution_key = Column(String(64), nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, default=now_local_naive)

    __table_args__ = (
        Index("ix_ledger_transaction_user_date", "user_id", "date"),
        Index("ix_ledger_transaction_automation", "automation_id"),
    )


class AutomationExecutionModel(Base):
    """Execution ledger - one row per realized (automation, occurrence date)"""
    __tablename__ = "automation_execution"

    id = Column(Integer, primary_key=True, autoincrement=True)
    automation_id = Column(String(36), ForeignKey("automation.id"), nullable=False)
    occurrence_date = Column(Date, nullable=False)
    transaction_id = Column(String(36), ForeignKey("ledger_transaction.id"), nullable=False)
    executed_at = Column(DateTime, nullable=False, default=now_local_naive)

    automation = relationship("AutomationModel", back_populates="executions")

    __table_args__ = (
        UniqueConstraint("automation_id", "occurrence_date", name="uq_automation_execution_occurrence"),
    )


class DailySnapshotModel(Base):
    """Per-user daily net worth read model"""
    __tablename__ = "daily_snapshot"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False)
    date = Column(Date, nullable=False)
    account_balances = Column(JSON, nullable=False, default=dict)
    total_accounts_eur = Column(Numeric(16, 2), nullable=False)
    total_investments_eur = Column(Numeric(16, 2), nullable=False)
    net_worth_eur = Column(Numeric(16, 2), nullable=False)
    income_eur = Column(Numeric(16, 2), nullable=False)
    expenses_eur = Column(Numeric(16, 2), nullable=False)
    eur_usd_rate = Column(Numeric(10, 6), nullable=False)
    created_at = Column(DateTime, nullable=False, default=now_local_naive)
    updated_at = Column(DateTime, nullable=False, default=now_local_naive, onupdate=now_local_naive)

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_snapshot_user_date"),
    )
