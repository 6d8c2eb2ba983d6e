# ledger_system/services/level_income_service.py
"""
Level income service - pays the fixed ten-level commission up the sponsor chain.
"""
from decimal import Decimal
from typing import List, Dict
from sqlalchemy.orm import Session
import logging

from models.user import User
from ledger_system.store import LedgerStore
from ledger_system.errors import DuplicateEntryError
from ledger_system.utils.chain_walker import ChainWalker
from ledger_system.config.commission import (
    MAX_LEVELS,
    TransactionStatus,
    TransactionType,
    get_level_percentage,
    level_bonus_hash,
)

logger = logging.getLogger(__name__)


class LevelIncomeService:
    """Service for distributing level income to upline sponsors."""

    def __init__(self, session: Session):
        self.session = session
        self.store = LedgerStore(session)

    async def distributeLevelIncome(
            self,
            investingUser: User,
            investmentAmount,
            investmentId: int
    ) -> List[Dict]:
        """
        Pay each reachable upline level its share of an approved investment.

        Walks at most MAX_LEVELS sponsors. Every payout is a completed bonus
        Transaction with hash LEVEL{n}-{investmentId}, committed on its own.
        A level whose hash already exists is skipped.

        Args:
            investingUser: User whose investment was approved (receives nothing)
            investmentAmount: Approved amount
            investmentId: Investment ID used in the payout hash

        Returns:
            One dict per level reached: userId, level, percentage, amount, hash, paid
        """
        amount = Decimal(str(investmentAmount))
        payouts: List[Dict] = []

        walker = ChainWalker(self.store)

        def pay_level(upline_user: User, level: int) -> bool:
            """Create the bonus entry for one upline level."""
            percentage = get_level_percentage(level)
            income_amount = amount * percentage / Decimal("100")
            bonus_hash = level_bonus_hash(level, investmentId)

            payout = {
                "userId": upline_user.userID,
                "level": level,
                "percentage": percentage,
                "amount": income_amount,
                "hash": bonus_hash,
                "paid": False,
            }
            payouts.append(payout)

            if self.store.findTransactionByHash(bonus_hash, type=TransactionType.BONUS.value):
                logger.warning(f"Level {level} income {bonus_hash} already paid, skipping")
                return True

            try:
                self.store.createTransaction(
                    userID=upline_user.userID,
                    type=TransactionType.BONUS.value,
                    amount=income_amount,
                    description=(
                        f"Level {level} income from {investingUser.name}'s investment "
                        f"of {amount} ({percentage}%)"
                    ),
                    status=TransactionStatus.COMPLETED.value,
                    hash=bonus_hash
                )
                self.store.commit()
            except DuplicateEntryError:
                # Lost to a concurrent payout of the same hash
                logger.warning(f"Level {level} income {bonus_hash} rejected as duplicate, skipping")
                return True

            payout["paid"] = True

            logger.debug(
                f"Level {level}: user {upline_user.userID} gets {percentage}% = {income_amount}"
            )
            return True

        walker.walk_upline(investingUser, pay_level, max_depth=MAX_LEVELS)

        total = sum((p["amount"] for p in payouts if p["paid"]), Decimal("0"))
        logger.info(
            f"Level income for investment {investmentId}: "
            f"{sum(1 for p in payouts if p['paid'])} payouts, total {total}"
        )

        return payouts
