"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from autoledger.domain.errors import ConfigurationError


class AutomationKind(str, Enum):
    """Kind of recurring money movement"""
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    INVESTMENT = "investment"


class CadenceType(str, Enum):
    """Recurrence rule"""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class TransactionType(str, Enum):
    """Ledger entry type"""
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    INVESTMENT_BUY = "investment_buy"
    INVESTMENT_SELL = "investment_sell"

    @classmethod
    def for_automation(cls, kind: AutomationKind) -> "TransactionType":
        kind = AutomationKind(kind)
        if kind == AutomationKind.INVESTMENT:
            return cls.INVESTMENT_BUY
        return cls(kind.value)


@dataclass(frozen=True)
class Automation:
    """User-defined recurring financial instruction"""
    id: str
    user_id: str
    name: str
    kind: AutomationKind
    amount: Decimal
    currency: str
    cadence_type: CadenceType
    anchor_day: int
    anchor_month: Optional[int] = None
    account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    investment_id: Optional[str] = None
    category_id: Optional[str] = None
    note: Optional[str] = None
    is_active: bool = True
    last_executed_through: Optional[date] = None
    next_execution_date: Optional[date] = None
    created_at: Optional[datetime] = None

    @property
    def credit_account_id(self) -> Optional[str]:
        """Account credited by an income automation"""
        return self.to_account_id or self.account_id

    def validate(self) -> None:
        """
        Check the invariants the runner relies on.

        Raises:
            ConfigurationError: amount or account references are inconsistent
        """
        if self.kind not in [k.value for k in AutomationKind]:
            raise ConfigurationError(f"Unknown automation kind: {self.kind!r}", automation_id=self.id)

        if self.amount is None or self.amount <= Decimal("0"):
            raise ConfigurationError(
                f"amount must be positive, got {self.amount}", automation_id=self.id
            )

        if self.kind == AutomationKind.EXPENSE and not self.account_id:
            raise ConfigurationError("expense automation requires account_id", automation_id=self.id)

        if self.kind == AutomationKind.INCOME and not self.credit_account_id:
            raise ConfigurationError(
                "income automation requires to_account_id or account_id", automation_id=self.id
            )

        if self.kind == AutomationKind.TRANSFER:
            if not self.account_id or not self.to_account_id:
                raise ConfigurationError(
                    "transfer automation requires account_id and to_account_id", automation_id=self.id
                )
            if self.account_id == self.to_account_id:
                raise ConfigurationError(
                    "transfer source and destination must differ", automation_id=self.id
                )

        if self.kind == AutomationKind.INVESTMENT:
            if not self.investment_id:
                raise ConfigurationError("investment automation requires investment_id", automation_id=self.id)
            if not self.account_id:
                raise ConfigurationError(
                    "investment automation requires a funding account_id", automation_id=self.id
                )

    def execution_key(self, occurrence_date: date) -> str:
        """Deterministic idempotence key for one occurrence"""
        return f"{self.id}_{occurrence_date.isoformat()}"

    def transaction_note(self) -> str:
        if self.note:
            return f"{self.note} (Auto: {self.name})"
        return f"Auto: {self.name}"


@dataclass(frozen=True)
class Account:
    """Account holding a balance in one currency"""
    id: str
    user_id: str
    name: str
    balance: Decimal
    currency: str
    is_active: bool = True


@dataclass(frozen=True)
class InvestmentPosition:
    """Investment holding with weighted-average cost basis"""
    id: str
    user_id: str
    symbol: str
    quantity: Decimal
    avg_purchase_price: Decimal
    currency: str
    current_price: Optional[Decimal] = None
    name: Optional[str] = None
    is_active: bool = True

    @property
    def market_value(self) -> Decimal:
        """Value at current price, falling back to cost basis"""
        price = self.current_price if self.current_price else self.avg_purchase_price
        return self.quantity * price


@dataclass(frozen=True)
class LedgerTransaction:
    """Financial effect of one occurrence (immutable once written)"""
    user_id: str
    transaction_type: TransactionType
    amount: Decimal
    currency: str
    date: date
    note: str
    account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    investment_id: Optional[str] = None
    category_id: Optional[str] = None
    automation_id: Optional[str] = None
    execution_key: Optional[str] = None
    id: Optional[str] = None

    @classmethod
    def from_automation(cls, automation: Automation, occurrence_date: date) -> "LedgerTransaction":
        return cls(
            user_id=automation.user_id,
            transaction_type=TransactionType.for_automation(automation.kind),
            amount=automation.amount,
            currency=automation.currency,
            date=occurrence_date,
            note=automation.transaction_note(),
            account_id=automation.account_id,
            to_account_id=automation.to_account_id,
            investment_id=automation.investment_id,
            category_id=automation.category_id,
            automation_id=automation.id,
            execution_key=automation.execution_key(occurrence_date),
        )


@dataclass(frozen=True)
class ExecutionRecord:
    """Durable proof that (automation, date) was realized"""
    automation_id: str
    occurrence_date: date
    transaction_id: str
    executed_at: Optional[datetime] = None


@dataclass(frozen=True)
class RunError:
    """One per-automation failure surfaced in the run summary"""
    automation_id: str
    message: str
    error_type: str
    retryable: bool
    blocking: bool = False
    occurrence_date: Optional[date] = None

    def to_dict(self) -> Dict:
        return {
            "automation_id": self.automation_id,
            "message": self.message,
            "error_type": self.error_type,
            "retryable": self.retryable,
            "blocking": self.blocking,
            "occurrence_date": self.occurrence_date.isoformat() if self.occurrence_date else None,
        }


@dataclass
class RunSummary:
    """Outcome of one run_due_automations invocation"""
    as_of: date
    automations_processed: int = 0
    automations_skipped: int = 0
    transactions_created: int = 0
    errors: List[RunError] = field(default_factory=list)

    @property
    def blocking_errors(self) -> List[RunError]:
        return [e for e in self.errors if e.blocking]

    def to_dict(self) -> Dict:
        return {
            "as_of": self.as_of.isoformat(),
            "automations_processed": self.automations_processed,
            "automations_skipped": self.automations_skipped,
            "transactions_created": self.transactions_created,
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass(frozen=True)
class DailySnapshot:
    """Derived per-user daily read model"""
    user_id: str
    date: date
    account_balances: Dict[str, Decimal]
    total_accounts_eur: Decimal
    total_investments_eur: Decimal
    net_worth_eur: Decimal
    income_eur: Decimal
    expenses_eur: Decimal
    eur_usd_rate: Decimal


@dataclass
class SnapshotRunSummary:
    """Outcome of one capture_daily_snapshots invocation"""
    date: date
    users_processed: int = 0
    errors: List[Dict] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "date": self.date.isoformat(),
            "users_processed": self.users_processed,
            "errors": list(self.errors),
        }
