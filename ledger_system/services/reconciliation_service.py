# ledger_system/services/reconciliation_service.py
"""
Reconciliation service - repairs drift in User.totalInvestment.

User.totalInvestment is a cache of
    SUM(Investment.amount) WHERE userID=X AND status IN (active, completed)
This service recomputes it from the investments and overwrites it.
"""
from decimal import Decimal
from typing import Dict, Iterable, Optional
from sqlalchemy.orm import Session
import logging

from ledger_system.store import LedgerStore
from ledger_system.config.commission import COUNTED_STATUSES

logger = logging.getLogger(__name__)


class ReconciliationService:
    """Service for recomputing cached investment totals."""

    def __init__(self, session: Session):
        self.session = session
        self.store = LedgerStore(session)

    async def calculateTotalInvestment(self, userId: int) -> Decimal:
        """Real total from investments in active/completed status."""
        return self.store.sumInvestmentAmounts(userId, COUNTED_STATUSES)

    async def reconcileTotalInvestments(
            self,
            userIds: Optional[Iterable[int]] = None
    ) -> Dict:
        """
        Overwrite drifted totalInvestment values.

        Args:
            userIds: Restrict to these users; None scans everyone

        Returns:
            {"fixed": n, "checked": n, "results": [{userId, email, oldTotal,
             correctTotal, difference}, ...]}
        """
        users = self.store.listUsers(userIds)
        logger.info(f"Reconciling totalInvestment for {len(users)} users")

        results = []

        for user in users:
            correct_total = await self.calculateTotalInvestment(user.userID)
            old_total = Decimal(str(user.totalInvestment or 0))

            if old_total == correct_total:
                continue

            logger.warning(
                f"User {user.userID} ({user.email}): totalInvestment "
                f"{old_total} → {correct_total}"
            )

            # Overwrite (NOT increment!)
            user.totalInvestment = correct_total
            self.store.saveUser(user)

            results.append({
                "userId": user.userID,
                "email": user.email,
                "oldTotal": old_total,
                "correctTotal": correct_total,
                "difference": correct_total - old_total,
            })

        self.store.commit()

        logger.info(f"✓ Fixed {len(results)} users' total investments")

        return {
            "fixed": len(results),
            "checked": len(users),
            "results": results,
        }
