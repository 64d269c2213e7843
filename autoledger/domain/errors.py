"""
Domain Errors
Failure taxonomy for the automation runner.

Every error carries a ``retryable`` flag so the run summary can tell an
operator whether waiting for the next run is enough or a human has to act.
"""

from datetime import date
from typing import Optional


class AutomationError(Exception):
    """Base class for all automation-processing failures"""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        automation_id: Optional[str] = None,
        occurrence_date: Optional[date] = None,
    ):
        super().__init__(message)
        self.message = message
        self.automation_id = automation_id
        self.occurrence_date = occurrence_date

    @property
    def error_type(self) -> str:
        return type(self).__name__


class ConfigurationError(AutomationError):
    """Invalid cadence/anchor or inconsistent account references. Never retried."""

    retryable = False


class DuplicateError(AutomationError):
    """Execution record already exists for (automation, date). Expected under races."""

    retryable = False


class FailedPrecondition(AutomationError):
    """Effect cannot be applied yet (missing price, missing account). Retried next run."""

    retryable = True


class TransientStorageError(AutomationError):
    """Storage I/O failure. Safe to retry the whole occurrence."""

    retryable = True
