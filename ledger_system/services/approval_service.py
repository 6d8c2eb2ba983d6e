# ledger_system/services/approval_service.py
"""
Approval service - moves pending investments to active or rejected.
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
import logging

from models.user import User
from models.investment import Investment
from models.transaction import Transaction
from ledger_system.store import LedgerStore
from ledger_system.errors import (
    NotFoundError,
    PartialApprovalError,
    RaceLostError,
    StoreError,
    ValidationError,
)
from ledger_system.services.level_income_service import LevelIncomeService
from ledger_system.utils.investment_helpers import calculate_end_date
from ledger_system.config.commission import (
    Decision,
    InvestmentStatus,
    TransactionStatus,
    TransactionType,
)

logger = logging.getLogger(__name__)


class ApprovalService:
    """
    Service for admin decisions on investment requests.

    Business Logic:
    - Only a pending investment can be decided; anything else is a no-op
    - The pending → active/rejected switch is a compare-and-swap on status,
      so of two concurrent decisions exactly one performs side effects
    - Approval then credits User.totalInvestment once, pays level income
      and completes the paired investment Transaction
    - Each approval step is committed separately; a store failure after the
      status switch raises PartialApprovalError instead of rolling back

    Example Flow:
    1. Admin approves investment #7 ($10000) of C (C → B → A)
    2. #7: pending → active, period restarts today
    3. C.totalInvestment += 10000
    4. B gets LEVEL1-7 = $500, A gets LEVEL2-7 = $200
    5. C's pending investment Transaction → completed
    """

    def __init__(self, session: Session):
        self.session = session
        self.store = LedgerStore(session)

    async def decideInvestment(self, investmentId: int, decision) -> Dict:
        """
        Approve or reject a pending investment.

        Args:
            investmentId: Investment to decide
            decision: 'approve'/'approved' or 'reject'/'rejected'

        Returns:
            {"investment": Investment, "message": str, "changed": bool,
             "payouts": list of level payouts (approve only)}

        Raises:
            ValidationError: Unknown decision
            NotFoundError: Investment (or its owner) does not resolve
            RaceLostError: A concurrent decision switched the status first
            PartialApprovalError: Store failure after the status switch
        """
        try:
            decision = Decision.parse(decision)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        investment = self.store.findInvestmentById(investmentId)
        if not investment:
            raise NotFoundError("Investment", investmentId)

        if investment.status != InvestmentStatus.PENDING.value:
            logger.info(
                f"Investment {investmentId} is already {investment.status}, "
                f"ignoring {decision.value}"
            )
            return {
                "investment": investment,
                "message": f"Investment is already {investment.status}; no changes made",
                "changed": False,
                "payouts": [],
            }

        if decision is Decision.APPROVE:
            return await self._approve(investment)

        return await self._reject(investment)

    async def _approve(self, investment: Investment) -> Dict:
        investment_id = investment.investmentID

        user = self.store.findUserById(investment.userID)
        if not user:
            raise NotFoundError("User", investment.userID)

        duration = None
        if investment.packageID is not None:
            package = self.store.findPackageById(investment.packageID)
            duration = package.duration if package else None

        start_date = datetime.now(timezone.utc)
        end_date = calculate_end_date(start_date, duration)

        # ═══════════════════════════════════════════════════════════
        # STEP 1-2: Claim the investment (pending → active)
        # ═══════════════════════════════════════════════════════════
        won = self.store.transitionInvestmentStatus(
            investment_id,
            InvestmentStatus.PENDING.value,
            InvestmentStatus.ACTIVE.value,
            startDate=start_date,
            endDate=end_date
        )
        if not won:
            self.session.rollback()
            logger.warning(f"Investment {investment_id} approval lost the status race")
            raise RaceLostError(investment_id)

        self.store.commit()
        completed_steps: List[str] = ["activate"]
        step = "credit"

        try:
            # ═══════════════════════════════════════════════════════════
            # STEP 3: One-time credit of totalInvestment
            # ═══════════════════════════════════════════════════════════
            amount = investment.amount

            # Evaluated in SQL so concurrent credits to one user add up
            user.totalInvestment = User.totalInvestment + amount
            self.store.saveUser(user)
            self.store.commit()
            completed_steps.append(step)

            logger.info(f"✓ User {user.userID} totalInvestment += {amount}")

            # ═══════════════════════════════════════════════════════════
            # STEP 4: Level income up the sponsor chain
            # ═══════════════════════════════════════════════════════════
            step = "level_income"
            payouts = await LevelIncomeService(self.session).distributeLevelIncome(
                user,
                amount,
                investment_id
            )
            completed_steps.append(step)

            # ═══════════════════════════════════════════════════════════
            # STEP 5: Complete the paired investment transaction
            # ═══════════════════════════════════════════════════════════
            step = "transaction"
            self._settlePairedTransaction(investment, TransactionStatus.COMPLETED.value)
            self.store.commit()
            completed_steps.append(step)

        except StoreError as e:
            logger.error(
                f"Approval of investment {investment_id} stopped at '{step}' "
                f"after {completed_steps}: {e}",
                exc_info=True
            )
            raise PartialApprovalError(investment_id, completed_steps, step, e) from e

        self.store.refresh(investment)

        logger.info(
            f"✓ Investment {investment_id} approved: amount={investment.amount}, "
            f"{sum(1 for p in payouts if p['paid'])} level payouts"
        )

        return {
            "investment": investment,
            "message": "Investment approved successfully",
            "changed": True,
            "payouts": payouts,
        }

    async def _reject(self, investment: Investment) -> Dict:
        investment_id = investment.investmentID

        won = self.store.transitionInvestmentStatus(
            investment_id,
            InvestmentStatus.PENDING.value,
            InvestmentStatus.REJECTED.value
        )
        if not won:
            self.session.rollback()
            logger.warning(f"Investment {investment_id} rejection lost the status race")
            raise RaceLostError(investment_id)

        self._settlePairedTransaction(investment, TransactionStatus.FAILED.value)
        self.store.commit()
        self.store.refresh(investment)

        logger.info(f"✓ Investment {investment_id} rejected")

        return {
            "investment": investment,
            "message": "Investment rejected successfully",
            "changed": True,
            "payouts": [],
        }

    def _settlePairedTransaction(
            self,
            investment: Investment,
            newStatus: str
    ) -> Optional[Transaction]:
        """
        Move the investment's pending Transaction to newStatus.

        Matches on the payment reference first; falls back to the oldest
        pending investment Transaction of the same user and amount.
        """
        base_filter = {
            "userID": investment.userID,
            "type": TransactionType.INVESTMENT.value,
            "status": TransactionStatus.PENDING.value,
        }

        transaction = self.store.updateTransactionMatching(
            {**base_filter, "hash": investment.transactionId},
            {"status": newStatus}
        )

        if transaction is None:
            transaction = self.store.updateTransactionMatching(
                {**base_filter, "amount": investment.amount},
                {"status": newStatus}
            )

        if transaction is None:
            logger.warning(
                f"No pending investment transaction found for investment "
                f"{investment.investmentID} (ref={investment.transactionId})"
            )
        else:
            logger.debug(
                f"Transaction {transaction.transactionID} → {newStatus} "
                f"for investment {investment.investmentID}"
            )

        return transaction
