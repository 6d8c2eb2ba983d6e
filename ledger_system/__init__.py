"""
Ledger System - investment requests, approvals and ten-level referral income.
"""

# Services
from ledger_system.services.investment_service import InvestmentService
from ledger_system.services.package_service import PackageService
from ledger_system.services.approval_service import ApprovalService
from ledger_system.services.level_income_service import LevelIncomeService
from ledger_system.services.reconciliation_service import ReconciliationService
from ledger_system.services.report_service import ReportService
from ledger_system.services.user_service import UserService

# Configuration
from ledger_system.config.commission import LEVEL_PERCENTAGES, MAX_LEVELS, Decision

# Store and errors
from ledger_system.store import LedgerStore
from ledger_system.errors import (
    LedgerError,
    ValidationError,
    WalletLockedError,
    NotFoundError,
    StoreError,
    DuplicateEntryError,
    RaceLostError,
    PartialApprovalError,
)

__all__ = [
    # Services
    'InvestmentService',
    'PackageService',
    'ApprovalService',
    'LevelIncomeService',
    'ReconciliationService',
    'ReportService',
    'UserService',

    # Config
    'LEVEL_PERCENTAGES',
    'MAX_LEVELS',
    'Decision',

    # Store and errors
    'LedgerStore',
    'LedgerError',
    'ValidationError',
    'WalletLockedError',
    'NotFoundError',
    'StoreError',
    'DuplicateEntryError',
    'RaceLostError',
    'PartialApprovalError',
]
