# ledger_system/services/report_service.py
"""
Report service - read-side level income and dashboard figures.
"""
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict
from sqlalchemy.orm import Session
from sqlalchemy import func
import logging

from models.user import User
from models.investment import Investment
from models.transaction import Transaction
from ledger_system.store import LedgerStore
from ledger_system.errors import NotFoundError, ValidationError
from ledger_system.utils.chain_walker import ChainWalker
from ledger_system.config.commission import (
    COUNTED_STATUSES,
    LEVEL_PERCENTAGES,
    MAX_LEVELS,
    InvestmentStatus,
    TransactionStatus,
    TransactionType,
)

logger = logging.getLogger(__name__)


class ReportService:
    """Service for downline and dashboard reporting."""

    def __init__(self, session: Session):
        self.session = session
        self.store = LedgerStore(session)

    async def getLevelIncomeReport(self, userId: int) -> Dict:
        """
        Expected level income from each downline level's business volume.

        Business of a member = SUM of their active/completed investments.
        Expected income = business * LEVEL_PERCENTAGES[level-1] / 100, the
        same table the payouts use.

        Returns:
            {
                "userId": 1,
                "levels": [{"level": 1, "members": 2, "business": Decimal,
                            "percentage": Decimal, "income": Decimal}, ...],
                "totalMembers": 5,
                "totalBusiness": Decimal,
                "totalIncome": Decimal,
                "activeLevels": 2
            }
        """
        user = self.store.findUserById(userId)
        if not user:
            raise NotFoundError("User", userId)

        levels = [
            {
                "level": index + 1,
                "members": 0,
                "business": Decimal("0"),
                "percentage": percentage,
                "income": Decimal("0"),
            }
            for index, percentage in enumerate(LEVEL_PERCENTAGES)
        ]

        def collect(member: User, level: int):
            row = levels[level - 1]
            row["members"] += 1
            row["business"] += self.store.sumInvestmentAmounts(member.userID, COUNTED_STATUSES)

        ChainWalker(self.store).walk_downline(user, collect, max_depth=MAX_LEVELS)

        for row in levels:
            row["income"] = row["business"] * row["percentage"] / Decimal("100")

        report = {
            "userId": userId,
            "levels": levels,
            "totalMembers": sum(row["members"] for row in levels),
            "totalBusiness": sum((row["business"] for row in levels), Decimal("0")),
            "totalIncome": sum((row["income"] for row in levels), Decimal("0")),
            "activeLevels": sum(1 for row in levels if row["members"] > 0),
        }

        logger.debug(
            f"Level report for user {userId}: {report['totalMembers']} members, "
            f"income {report['totalIncome']}"
        )
        return report

    async def getDashboardStats(self) -> Dict:
        """Admin dashboard totals."""
        total_users = self.session.query(func.count(User.userID)).filter(
            User.role == "user"
        ).scalar()

        active_users = self.session.query(func.count(User.userID)).filter(
            User.role == "user",
            User.status == "active"
        ).scalar()

        total_investment = self.session.query(
            func.coalesce(func.sum(Transaction.amount), 0)
        ).filter(
            Transaction.type == TransactionType.INVESTMENT.value,
            Transaction.status == TransactionStatus.COMPLETED.value
        ).scalar()

        total_bonus = self.session.query(
            func.coalesce(func.sum(Transaction.amount), 0)
        ).filter(
            Transaction.type == TransactionType.BONUS.value,
            Transaction.status == TransactionStatus.COMPLETED.value
        ).scalar()

        pending_investments = self.session.query(func.count(Investment.investmentID)).filter(
            Investment.status == InvestmentStatus.PENDING.value
        ).scalar()

        return {
            "totalUsers": total_users or 0,
            "activeUsers": active_users or 0,
            "totalInvestment": Decimal(str(total_investment or 0)),
            "totalBonus": Decimal(str(total_bonus or 0)),
            "pendingInvestments": pending_investments or 0,
        }

    async def getRevenueReport(self, days: int = 7) -> Dict:
        """
        Daily deposits and withdrawals over the last `days` days.

        Only completed deposit/withdrawal transactions count. Days without
        any such transaction are omitted.

        Returns:
            {
                "days": 7,
                "revenueData": [{"date": "2026-10-13", "deposits": Decimal,
                                 "withdrawals": Decimal, "netRevenue": Decimal}, ...]
            }
        """
        if days <= 0:
            raise ValidationError("Report period must be at least one day")

        start_date = datetime.now(timezone.utc) - timedelta(days=days)

        transactions = self.session.query(Transaction).filter(
            Transaction.createdAt >= start_date,
            Transaction.status == TransactionStatus.COMPLETED.value,
            Transaction.type.in_([
                TransactionType.DEPOSIT.value,
                TransactionType.WITHDRAWAL.value,
            ])
        ).all()

        totals = defaultdict(lambda: {"deposits": Decimal("0"), "withdrawals": Decimal("0")})

        for transaction in transactions:
            day = transaction.createdAt.strftime("%Y-%m-%d")
            amount = Decimal(str(transaction.amount))
            if transaction.type == TransactionType.DEPOSIT.value:
                totals[day]["deposits"] += amount
            else:
                totals[day]["withdrawals"] += amount

        revenue_data = [
            {
                "date": day,
                "deposits": row["deposits"],
                "withdrawals": row["withdrawals"],
                "netRevenue": row["deposits"] - row["withdrawals"],
            }
            for day, row in sorted(totals.items())
        ]

        logger.debug(f"Revenue report over {days} days: {len(revenue_data)} active days")

        return {"days": days, "revenueData": revenue_data}
