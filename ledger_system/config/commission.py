"""
Level income configuration and status constants.
The level table is fixed and shared by payouts and reporting.
"""
from enum import Enum
from decimal import Decimal
from typing import Tuple


class InvestmentStatus(str, Enum):
    """Investment lifecycle states."""
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    TERMINATED = "terminated"
    REJECTED = "rejected"


class TransactionStatus(str, Enum):
    """Ledger entry states."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class TransactionType(str, Enum):
    """Ledger entry kinds."""
    INVESTMENT = "investment"
    BONUS = "bonus"
    WITHDRAWAL = "withdrawal"
    DEPOSIT = "deposit"
    STAKE = "stake"
    CLAIM_ROI = "claim_roi"
    CLAIM_STAKE_ROI = "claim_stake_roi"


class Decision(str, Enum):
    """Admin decision on a pending investment."""
    APPROVE = "approve"
    REJECT = "reject"

    @classmethod
    def parse(cls, value) -> "Decision":
        """Accept enum values and the 'approved'/'rejected' spellings."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        aliases = {
            "approve": cls.APPROVE,
            "approved": cls.APPROVE,
            "reject": cls.REJECT,
            "rejected": cls.REJECT,
        }
        if normalized not in aliases:
            raise ValueError(f"Unknown decision '{value}'")
        return aliases[normalized]


# Percent of the investment paid to each upline depth, index 0 = direct sponsor
LEVEL_PERCENTAGES: Tuple[Decimal, ...] = (
    Decimal("5"),
    Decimal("2"),
    Decimal("1"),
    Decimal("1"),
    Decimal("1"),
    Decimal("1"),
    Decimal("7.5"),
    Decimal("5"),
    Decimal("2.5"),
    Decimal("2.5"),
)

MAX_LEVELS = len(LEVEL_PERCENTAGES)
TOTAL_COMMISSION_PERCENTAGE = sum(LEVEL_PERCENTAGES, Decimal("0"))

# Statuses that count toward User.totalInvestment
COUNTED_STATUSES = (InvestmentStatus.ACTIVE.value, InvestmentStatus.COMPLETED.value)


def get_level_percentage(level: int) -> Decimal:
    """
    Percent for a 1-based upline level.

    Returns:
        Decimal percent, or 0 for levels outside 1..MAX_LEVELS
    """
    if 1 <= level <= MAX_LEVELS:
        return LEVEL_PERCENTAGES[level - 1]
    return Decimal("0")


def level_bonus_hash(level: int, investment_id: int) -> str:
    """Idempotency key of a level payout."""
    return f"LEVEL{level}-{investment_id}"
