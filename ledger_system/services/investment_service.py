# ledger_system/services/investment_service.py
"""
Investment request service - validates and records pending investments.
"""
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
import logging

from models.investment import Investment
from models.package import Package
from ledger_system.store import LedgerStore
from ledger_system.errors import ValidationError, NotFoundError
from ledger_system.config.commission import (
    InvestmentStatus,
    TransactionStatus,
    TransactionType,
)
from ledger_system.utils.investment_helpers import (
    AMOUNT_QUANTUM,
    RATE_QUANTUM,
    calculate_daily_return_amount,
    calculate_default_daily_return,
    calculate_end_date,
    get_min_investment,
)

logger = logging.getLogger(__name__)


class InvestmentService:
    """
    Service for creating and listing investment requests.

    Business Logic:
    - User pays off-ledger, then submits a request with the payment reference
    - The request is stored as a pending Investment plus a pending
      investment Transaction sharing the same reference
    - Nothing is credited until an admin approves (see ApprovalService)
    """

    def __init__(self, session: Session):
        self.session = session
        self.store = LedgerStore(session)

    async def submitInvestmentRequest(
            self,
            userId: int,
            amount,
            packageId: Optional[int] = None,
            transactionRef: Optional[str] = None,
            sponsorRef: Optional[str] = None
    ) -> Investment:
        """
        Record a pending investment request.

        Args:
            userId: Investing user
            amount: Requested amount
            packageId: Optional package supplying rate, bounds and duration
            transactionRef: External payment reference, generated if missing
            sponsorRef: Opaque sponsor wallet string, stored as-is

        Returns:
            The created Investment (status pending)

        Raises:
            ValidationError: Amount outside package bounds or below the floor
            NotFoundError: User or package does not resolve
        """
        amount = self._parseAmount(amount)

        user = self.store.findUserById(userId)
        if not user:
            raise NotFoundError("User", userId)

        package = None
        if packageId is not None:
            package = self.store.findPackageById(packageId)
            if not package:
                raise NotFoundError("Package", packageId)
            if not package.isActive:
                raise ValidationError(f"Package {package.name} is not available")

            self._validatePackageBounds(package, amount)
            daily_return = Decimal(str(package.dailyReturn))
            duration = package.duration
        else:
            min_investment = get_min_investment()
            if amount < min_investment:
                raise ValidationError(f"Minimum investment amount is {min_investment}")

            daily_return = calculate_default_daily_return(amount)
            duration = None

        daily_return = daily_return.quantize(RATE_QUANTUM)

        start_date = datetime.now(timezone.utc)
        reference = transactionRef or f"INV{int(start_date.timestamp() * 1000)}"

        investment = Investment(
            userID=user.userID,
            packageID=package.packageID if package else None,
            amount=amount,
            dailyReturn=daily_return,
            dailyReturnAmount=calculate_daily_return_amount(amount, daily_return),
            startDate=start_date,
            endDate=calculate_end_date(start_date, duration),
            lastRoiDate=start_date,
            status=InvestmentStatus.PENDING.value,
            transactionId=reference,
            sponsorId=sponsorRef or "",
            userWallet=user.wallet,
        )
        self.store.saveInvestment(investment)

        self.store.createTransaction(
            userID=user.userID,
            type=TransactionType.INVESTMENT.value,
            amount=amount,
            description=(
                f"Investment in {package.name} package" if package
                else f"Direct investment of {amount}"
            ),
            status=TransactionStatus.PENDING.value,
            hash=reference
        )

        self.store.commit()

        logger.info(
            f"Investment request {investment.investmentID} submitted: user={user.userID}, "
            f"amount={amount}, dailyReturn={daily_return}%, ref={reference}"
        )

        return investment

    async def getUserInvestments(self, userId: int) -> List[Investment]:
        """User's investments, newest first."""
        return self.store.findInvestments(userId=userId)

    async def getAllInvestments(self) -> List[Dict]:
        """
        All investments for the admin listing, newest first.
        Status 'active' is displayed as 'approved'.
        """
        return [
            investment_to_dict(investment, admin_view=True)
            for investment in self.store.findInvestments()
        ]

    def _parseAmount(self, amount) -> Decimal:
        try:
            value = Decimal(str(amount)).quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"Invalid investment amount: {amount!r}")

        if value <= 0:
            raise ValidationError(f"Investment amount must be positive, got {amount}")

        return value

    def _validatePackageBounds(self, package: Package, amount: Decimal) -> None:
        min_investment = Decimal(str(package.minInvestment))
        max_investment = (
            Decimal(str(package.maxInvestment))
            if package.maxInvestment is not None else None
        )

        if amount < min_investment or (max_investment is not None and amount > max_investment):
            raise ValidationError(
                f"Investment amount must be between {min_investment} and "
                f"{max_investment if max_investment is not None else 'Unlimited'}"
            )


def investment_to_dict(investment: Investment, admin_view: bool = False) -> Dict:
    """Plain record for rendering. admin_view maps 'active' to 'approved'."""
    status = investment.status
    if admin_view and status == InvestmentStatus.ACTIVE.value:
        status = "approved"

    result = {
        "investmentId": investment.investmentID,
        "userId": investment.userID,
        "packageId": investment.packageID,
        "amount": investment.amount,
        "dailyReturn": investment.dailyReturn,
        "dailyReturnAmount": investment.dailyReturnAmount,
        "startDate": investment.startDate,
        "endDate": investment.endDate,
        "status": status,
        "transactionId": investment.transactionId,
        "sponsorId": investment.sponsorId,
    }

    if admin_view:
        result["userName"] = investment.user.name if investment.user else None
        result["userEmail"] = investment.user.email if investment.user else None
        result["packageName"] = investment.package.name if investment.package else None

    return result
