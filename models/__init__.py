"""
Database models for the investment ledger.
Import all models here for easy access.
"""

# Base and mixins
from models.base import Base, AuditMixin

# Core models
from models.user import User, ZERO_WALLET
from models.package import Package
from models.investment import Investment
from models.transaction import Transaction

# Event listeners
from models.listeners import register_all_listeners

__all__ = [
    # Base
    'Base',
    'AuditMixin',

    # Core
    'User',
    'ZERO_WALLET',
    'Package',
    'Investment',
    'Transaction',

    # Listeners
    'register_all_listeners',
]
