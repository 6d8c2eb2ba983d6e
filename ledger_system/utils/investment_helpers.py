# ledger_system/utils/investment_helpers.py
"""
Helper functions for investment rate and period calculations.
"""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional
import logging

from config import Config

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = Decimal("30")

# Column scales: amounts DECIMAL(18, 2), rates DECIMAL(12, 8)
AMOUNT_QUANTUM = Decimal("0.01")
RATE_QUANTUM = Decimal("0.00000001")


def get_min_investment() -> Decimal:
    """Flat floor for investments made without a package."""
    return Decimal(str(Config.get(Config.MIN_INVESTMENT)))


def get_default_duration() -> int:
    """Investment duration in days when no package is linked."""
    return int(Config.get(Config.DEFAULT_DURATION_DAYS))


def get_monthly_rate(amount: Decimal) -> Decimal:
    """
    Monthly percent from the tiered default schedule.

    Example:
        get_monthly_rate(Decimal("1000")) -> Decimal("1")
        get_monthly_rate(Decimal("100000")) -> Decimal("1.5")
    """
    threshold = Decimal(str(Config.get(Config.HIGH_TIER_THRESHOLD)))
    if amount < threshold:
        return Decimal(str(Config.get(Config.LOW_TIER_MONTHLY_RATE)))
    return Decimal(str(Config.get(Config.HIGH_TIER_MONTHLY_RATE)))


def calculate_default_daily_return(amount: Decimal) -> Decimal:
    """
    Daily percent for an investment without a package.

    Example:
        calculate_default_daily_return(Decimal("1000")) -> 1/30 ≈ 0.0333
    """
    return get_monthly_rate(amount) / DAYS_PER_MONTH


def calculate_daily_return_amount(amount: Decimal, daily_return: Decimal) -> Decimal:
    """Daily payout in currency units: amount * dailyReturn / 100."""
    return amount * daily_return / Decimal("100")


def calculate_end_date(start_date: datetime, duration_days: Optional[int]) -> datetime:
    """End of the active period, falling back to the default duration."""
    days = int(duration_days) if duration_days else get_default_duration()
    return start_date + timedelta(days=days)

