# tests/test_reconciliation.py
"""
Tests for totalInvestment reconciliation and read-side reports.

Run:
    pytest tests/test_reconciliation.py -v
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from models import Investment, User
from ledger_system.errors import NotFoundError, ValidationError
from ledger_system.services.approval_service import ApprovalService
from ledger_system.services.investment_service import InvestmentService
from ledger_system.services.reconciliation_service import ReconciliationService
from ledger_system.services.report_service import ReportService
from ledger_system.store import LedgerStore

pytestmark = pytest.mark.asyncio


async def approved_investment(session, user, amount):
    """Submit and approve one investment."""
    investment = await InvestmentService(session).submitInvestmentRequest(user.userID, amount)
    await ApprovalService(session).decideInvestment(investment.investmentID, "approve")
    return investment


def corrupt_total(session, user, value):
    session.query(User).filter_by(userID=user.userID).update(
        {"totalInvestment": Decimal(value)}, synchronize_session=False
    )
    session.commit()


# =============================================================================
# TEST CLASS: Reconciliation
# =============================================================================

class TestReconcileTotals:
    """Cached totals are overwritten from the investments."""

    async def test_drift_repaired(self, session, make_user, calc_investment_sum):
        """TEST: totalInvestment off by one → overwritten with the real sum."""
        user = make_user("Drift")
        await approved_investment(session, user, 1000)
        corrupt_total(session, user, "999")

        report = await ReconciliationService(session).reconcileTotalInvestments()

        assert report["fixed"] == 1
        assert report["checked"] == 1
        row = report["results"][0]
        assert row["userId"] == user.userID
        assert row["oldTotal"] == Decimal("999")
        assert row["correctTotal"] == Decimal("1000")
        assert row["difference"] == Decimal("1")

        session.refresh(user)
        assert user.totalInvestment == calc_investment_sum(user.userID)

    async def test_clean_ledger_untouched(self, session, make_user):
        user = make_user("Clean")
        await approved_investment(session, user, 2000)

        report = await ReconciliationService(session).reconcileTotalInvestments()

        assert report["fixed"] == 0
        assert report["results"] == []

    async def test_completed_counts_rejected_does_not(self, session, make_user):
        """TEST: only active/completed investments count toward the total."""
        user = make_user("Statuses")
        for amount, status in (("700", "completed"), ("300", "rejected"), ("900", "pending")):
            session.add(Investment(
                userID=user.userID,
                amount=Decimal(amount),
                dailyReturn=Decimal("0.05"),
                dailyReturnAmount=Decimal(amount) * Decimal("0.0005"),
                endDate=datetime(2030, 1, 1),
                status=status,
                transactionId=f"SEED-{status}",
            ))
        session.commit()

        report = await ReconciliationService(session).reconcileTotalInvestments()

        assert report["results"][0]["correctTotal"] == Decimal("700")
        session.refresh(user)
        assert user.totalInvestment == Decimal("700")

    async def test_restricted_to_given_users(self, session, make_user):
        first = make_user("First", total=Decimal("50"))
        second = make_user("Second", total=Decimal("75"))

        report = await ReconciliationService(session).reconcileTotalInvestments([first.userID])

        assert report["checked"] == 1
        assert [r["userId"] for r in report["results"]] == [first.userID]
        session.refresh(second)
        assert second.totalInvestment == Decimal("75")


# =============================================================================
# TEST CLASS: Level income report
# =============================================================================

class TestLevelIncomeReport:
    """Downline business grouped by level with the payout percentages."""

    async def test_two_levels(self, session, make_user):
        """
        TEST: Root → (Left, Right), Left → Grand.

        Left invests 1000, Grand invests 2000.
        L1: 2 members, business 1000, 5% → 50
        L2: 1 member, business 2000, 2% → 40
        """
        root = make_user("Root")
        left = make_user("Left", sponsor=root)
        make_user("Right", sponsor=root)
        grand = make_user("Grand", sponsor=left)

        await approved_investment(session, left, 1000)
        await approved_investment(session, grand, 2000)

        report = await ReportService(session).getLevelIncomeReport(root.userID)

        level_1, level_2 = report["levels"][0], report["levels"][1]
        assert (level_1["members"], level_1["business"], level_1["income"]) == (
            2, Decimal("1000"), Decimal("50")
        )
        assert (level_2["members"], level_2["business"], level_2["income"]) == (
            1, Decimal("2000"), Decimal("40")
        )
        assert len(report["levels"]) == 10
        assert report["totalMembers"] == 3
        assert report["totalIncome"] == Decimal("90")
        assert report["activeLevels"] == 2

    async def test_pending_business_ignored(self, session, make_chain):
        sponsor, member = make_chain(2)
        await InvestmentService(session).submitInvestmentRequest(member.userID, 5000)

        report = await ReportService(session).getLevelIncomeReport(sponsor.userID)

        assert report["levels"][0]["members"] == 1
        assert report["totalBusiness"] == Decimal("0")

    async def test_unknown_user(self, session):
        with pytest.raises(NotFoundError):
            await ReportService(session).getLevelIncomeReport(321)


# =============================================================================
# TEST CLASS: Dashboard
# =============================================================================

class TestDashboardStats:
    """Admin totals."""

    async def test_totals(self, session, make_chain):
        sponsor, investor = make_chain(2)
        await approved_investment(session, investor, 4000)
        await InvestmentService(session).submitInvestmentRequest(investor.userID, 1000)

        stats = await ReportService(session).getDashboardStats()

        assert stats["totalUsers"] == 2
        assert stats["activeUsers"] == 2
        assert stats["totalInvestment"] == Decimal("4000")
        assert stats["totalBonus"] == Decimal("200")
        assert stats["pendingInvestments"] == 1


# =============================================================================
# TEST CLASS: Revenue report
# =============================================================================

class TestRevenueReport:
    """Daily completed deposits and withdrawals."""

    async def test_daily_series(self, session, make_user):
        """
        TEST: last 7 days, completed deposit/withdrawal rows only.

        Today: +1000 -300, yesterday: +500.
        Old, pending and investment rows are ignored.
        """
        user = make_user("Cashflow")
        store = LedgerStore(session)
        now = datetime.now(timezone.utc)
        yesterday = now - timedelta(days=1)

        for type_, amount, status, created in (
                ("deposit", "1000", "completed", now),
                ("withdrawal", "300", "completed", now),
                ("deposit", "500", "completed", yesterday),
                ("deposit", "700", "completed", now - timedelta(days=10)),
                ("deposit", "900", "pending", now),
                ("investment", "1500", "completed", now),
        ):
            store.createTransaction(userID=user.userID, type=type_, amount=Decimal(amount),
                                    status=status, createdAt=created)
        store.commit()

        report = await ReportService(session).getRevenueReport(7)

        assert report["days"] == 7
        assert report["revenueData"] == [
            {
                "date": yesterday.strftime("%Y-%m-%d"),
                "deposits": Decimal("500"),
                "withdrawals": Decimal("0"),
                "netRevenue": Decimal("500"),
            },
            {
                "date": now.strftime("%Y-%m-%d"),
                "deposits": Decimal("1000"),
                "withdrawals": Decimal("300"),
                "netRevenue": Decimal("700"),
            },
        ]

    async def test_empty_period(self, session):
        report = await ReportService(session).getRevenueReport()

        assert report == {"days": 7, "revenueData": []}

    async def test_invalid_period(self, session):
        with pytest.raises(ValidationError):
            await ReportService(session).getRevenueReport(0)
