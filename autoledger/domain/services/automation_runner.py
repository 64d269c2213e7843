"""
AUTOMATION RUNNER
Due occurrences -> ledger transactions, exactly once

RESPONSIBILITIES:
- Load active automations and expand their cadence since the checkpoint
- Realize every missing occurrence as transaction + effects + execution record
- Advance the per-automation checkpoint
- Collect a run summary; isolate failures per automation

RULES:
- One unit of work per occurrence, committed only after record_execution
- Write order inside the unit: transaction -> effects -> execution record
- DuplicateError on record_execution means another runner won: roll back
  this unit (transaction and effects) and count nothing
- Occurrences of one automation are applied in ascending date order; the
  first failing occurrence stops that automation for this run
- The checkpoint never moves past an occurrence whose effect failed
- Safe to call repeatedly for the same as_of
"""

import logging
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional, Protocol

from autoledger.domain.errors import AutomationError, ConfigurationError, DuplicateError
from autoledger.domain.models import (
    Automation,
    AutomationKind,
    ExecutionRecord,
    LedgerTransaction,
    RunError,
    RunSummary,
)
from autoledger.domain.services.calendar_engine import next_occurrence, occurrences, validate_cadence
from autoledger.domain.services.effect_applier import (
    AccountRepository,
    InvestmentRepository,
    LedgerEffectApplier,
)
from autoledger.utils.time import add_months

logger = logging.getLogger(__name__)


class AutomationRepository(Protocol):
    """Protocol for automation data access - ASYNC"""

    async def list_active(self) -> List[Automation]:
        ...

    async def update_checkpoint(
        self,
        automation_id: str,
        last_executed_through: date,
        next_execution_date: Optional[date],
    ) -> None:
        ...


class TransactionRepository(Protocol):
    """Protocol for ledger transaction writes - ASYNC"""

    async def add(self, transaction: LedgerTransaction) -> str:
        """Persist a transaction, return its id"""
        ...


class ExecutionLedger(Protocol):
    """Protocol for the execution ledger - ASYNC"""

    async def has_executed(self, automation_id: str, occurrence_date: date) -> bool:
        ...

    async def record_execution(
        self,
        automation_id: str,
        occurrence_date: date,
        transaction_id: str,
    ) -> ExecutionRecord:
        """Raises DuplicateError if (automation_id, occurrence_date) already exists"""
        ...


class UnitOfWork(Protocol):
    """Repositories sharing one storage transaction"""

    automations: AutomationRepository
    accounts: AccountRepository
    investments: InvestmentRepository
    transactions: TransactionRepository
    executions: ExecutionLedger

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...


class AutomationRunner:
    """
    Automation Runner
    Drives every active automation up to `as_of`
    """

    def __init__(self, uow: UnitOfWork, catchup_months: int = 1):
        """
        Args:
            uow: storage unit of work
            catchup_months: lookback for automations that never ran
        """
        if catchup_months < 0:
            raise ValueError("catchup_months cannot be negative")
        self.uow = uow
        self.catchup_months = catchup_months
        self.applier = LedgerEffectApplier(uow.accounts, uow.investments)

    async def run(self, as_of: date) -> RunSummary:
        """Process all active automations through `as_of` (inclusive)"""
        summary = RunSummary(as_of=as_of)
        automations = await self.uow.automations.list_active()
        logger.info(f"Processing {len(automations)} automations as of {as_of}")

        for automation in automations:
            try:
                await self.process_automation(automation, as_of, summary)
            except Exception as exc:
                # Unexpected failure: keep sibling automations running
                logger.exception(f"Automation {automation.id} failed unexpectedly")
                try:
                    await self.uow.rollback()
                except Exception:
                    logger.exception(f"Rollback after automation {automation.id} failed")
                summary.errors.append(
                    RunError(
                        automation_id=automation.id,
                        message=str(exc) or type(exc).__name__,
                        error_type=type(exc).__name__,
                        retryable=True,
                        blocking=True,
                    )
                )

        logger.info(
            f"Run {as_of}: processed={summary.automations_processed} "
            f"skipped={summary.automations_skipped} "
            f"transactions={summary.transactions_created} errors={len(summary.errors)}"
        )
        return summary

    def window_start(self, automation: Automation, as_of: date) -> date:
        if automation.last_executed_through is not None:
            return automation.last_executed_through + timedelta(days=1)
        # Lookback date itself is excluded; as_of is always included
        return min(add_months(as_of, -self.catchup_months) + timedelta(days=1), as_of)

    async def process_automation(self, automation: Automation, as_of: date, summary: RunSummary) -> None:
        if not automation.is_active:
            summary.automations_skipped += 1
            return

        try:
            automation.validate()
            validate_cadence(automation.cadence_type, automation.anchor_day, automation.anchor_month)
        except ConfigurationError as exc:
            logger.warning(f"Skipping automation {automation.id}: {exc.message}")
            summary.errors.append(
                RunError(
                    automation_id=automation.id,
                    message=exc.message,
                    error_type=exc.error_type,
                    retryable=exc.retryable,
                )
            )
            return

        due_dates = occurrences(
            automation.cadence_type,
            automation.anchor_day,
            self.window_start(automation, as_of),
            as_of,
            anchor_month=automation.anchor_month,
        )

        failed_on: Optional[date] = None
        for occurrence_date in due_dates:
            if await self.uow.executions.has_executed(automation.id, occurrence_date):
                continue

            try:
                created = await self.execute_occurrence(automation, occurrence_date)
            except AutomationError as exc:
                await self.uow.rollback()
                failed_on = occurrence_date
                logger.error(
                    f"Automation {automation.id} blocked on {occurrence_date}: "
                    f"{exc.error_type}: {exc.message}"
                )
                summary.errors.append(
                    RunError(
                        automation_id=automation.id,
                        message=exc.message,
                        error_type=exc.error_type,
                        retryable=exc.retryable,
                        blocking=True,
                        occurrence_date=occurrence_date,
                    )
                )
                break

            if created:
                summary.transactions_created += 1

        checkpoint = as_of if failed_on is None else failed_on - timedelta(days=1)
        if automation.last_executed_through is not None and checkpoint < automation.last_executed_through:
            checkpoint = automation.last_executed_through

        if failed_on is None:
            upcoming = next_occurrence(
                automation.cadence_type,
                automation.anchor_day,
                checkpoint,
                anchor_month=automation.anchor_month,
            )
        else:
            upcoming = failed_on

        await self.uow.automations.update_checkpoint(automation.id, checkpoint, upcoming)
        await self.uow.commit()
        summary.automations_processed += 1

    async def execute_occurrence(self, automation: Automation, occurrence_date: date) -> bool:
        """
        Realize one occurrence inside its own unit of work

        Returns:
            True if this call created the transaction, False if a concurrent
            runner had already recorded the execution
        """
        transaction = LedgerTransaction.from_automation(automation, occurrence_date)
        transaction_id = await self.uow.transactions.add(transaction)
        transaction = replace(transaction, id=transaction_id)

        await self.applier.apply(transaction)

        try:
            await self.uow.executions.record_execution(automation.id, occurrence_date, transaction_id)
        except DuplicateError:
            await self.uow.rollback()
            logger.info(
                f"Automation {automation.id} on {occurrence_date} already executed "
                f"by a concurrent run; discarded transaction {transaction_id}"
            )
            return False

        await self.uow.commit()
        logger.info(
            f"Executed automation {automation.id} ({AutomationKind(automation.kind).value} "
            f"{automation.amount.quantize(Decimal('0.01'))} {automation.currency}) for {occurrence_date}"
        )
        return True
