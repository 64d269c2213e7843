"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Enums
    AutomationKind,
    CadenceType,
    TransactionType,

    # Entities
    Account,
    Automation,
    DailySnapshot,
    ExecutionRecord,
    InvestmentPosition,
    LedgerTransaction,
    RunError,
    RunSummary,
    SnapshotRunSummary,
)

__all__ = [
    # Enums
    "AutomationKind",
    "CadenceType",
    "TransactionType",

    # Entities
    "Account",
    "Automation",
    "DailySnapshot",
    "ExecutionRecord",
    "InvestmentPosition",
    "LedgerTransaction",
    "RunError",
    "RunSummary",
    "SnapshotRunSummary",
]
