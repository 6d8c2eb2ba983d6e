# ledger_system/errors.py
"""
Exception taxonomy for the investment ledger.

ValidationError and NotFoundError are raised before any write.
StoreError wraps persistence failures and is never retried here.
"""
from typing import List, Optional


class LedgerError(Exception):
    """Base class for all ledger errors."""
    pass


class ValidationError(LedgerError):
    """Bad amount, bounds, decision or wallet."""
    pass


class WalletLockedError(ValidationError):
    """Wallet address is write-once and already set."""
    pass


class NotFoundError(LedgerError):
    """Missing investment, package or user."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class StoreError(LedgerError):
    """Persistence failure, surfaced verbatim to the caller."""
    pass


class DuplicateEntryError(StoreError):
    """Unique constraint rejected the write (e.g. bonus hash already paid)."""
    pass


class RaceLostError(LedgerError):
    """Another decision already moved the investment out of pending."""

    def __init__(self, investment_id: int):
        self.investment_id = investment_id
        super().__init__(
            f"Investment {investment_id} was decided concurrently; no action taken"
        )


class PartialApprovalError(StoreError):
    """
    Store failure after the status claim succeeded.

    Steps already committed are not rolled back; completed_steps tells the
    caller (or a reconciliation run) where the sequence stopped.
    """

    def __init__(
            self,
            investment_id: int,
            completed_steps: List[str],
            failed_step: str,
            cause: Optional[BaseException] = None
    ):
        self.investment_id = investment_id
        self.completed_steps = list(completed_steps)
        self.failed_step = failed_step
        self.cause = cause
        super().__init__(
            f"Investment {investment_id}: step '{failed_step}' failed after "
            f"{self.completed_steps}: {cause}"
        )
