# ledger_system/services/package_service.py
"""
Package service - investment packages offered to users.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional
from sqlalchemy.orm import Session
import logging

from models.package import Package
from ledger_system.store import LedgerStore
from ledger_system.errors import ValidationError
from ledger_system.utils.investment_helpers import (
    AMOUNT_QUANTUM,
    RATE_QUANTUM,
    get_default_duration,
)

logger = logging.getLogger(__name__)


def _to_decimal(value, field: str, quantum: Decimal) -> Decimal:
    try:
        return Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid {field}: {value!r}")


class PackageService:
    """
    Service for creating and listing investment packages.

    A package fixes the daily rate and duration of the investments made
    in it and bounds their amount to [minInvestment, maxInvestment].
    maxInvestment None means unlimited.
    """

    def __init__(self, session: Session):
        self.session = session
        self.store = LedgerStore(session)

    async def createPackage(
            self,
            name: str,
            minInvestment,
            dailyReturn,
            maxInvestment=None,
            duration: Optional[int] = None
    ) -> Package:
        """
        Create an active package.

        Args:
            name: Display name
            minInvestment: Lowest accepted amount, positive
            dailyReturn: Percent per day, positive
            maxInvestment: Highest accepted amount, None for unlimited
            duration: Days, defaults to DEFAULT_DURATION_DAYS

        Raises:
            ValidationError: Missing name, non-positive values or min > max
        """
        if not name or not name.strip():
            raise ValidationError("Package name is required")

        min_investment = _to_decimal(minInvestment, "minimum investment", AMOUNT_QUANTUM)
        daily_return = _to_decimal(dailyReturn, "daily return", RATE_QUANTUM)
        max_investment = (
            _to_decimal(maxInvestment, "maximum investment", AMOUNT_QUANTUM)
            if maxInvestment is not None else None
        )

        if min_investment <= 0:
            raise ValidationError("Minimum investment must be positive")
        if daily_return <= 0:
            raise ValidationError("Daily return must be positive")
        if max_investment is not None and max_investment < min_investment:
            raise ValidationError(
                f"Maximum investment {max_investment} is below minimum {min_investment}"
            )

        days = get_default_duration() if duration is None else int(duration)
        if days <= 0:
            raise ValidationError("Duration must be a positive number of days")

        package = Package(
            name=name.strip(),
            minInvestment=min_investment,
            maxInvestment=max_investment,
            dailyReturn=daily_return,
            duration=days,
            isActive=True,
        )
        self.store.savePackage(package)
        self.store.commit()

        logger.info(
            f"✓ Package {package.packageID} '{package.name}' created: "
            f"{min_investment}-{max_investment or 'Unlimited'}, "
            f"{daily_return}%/day for {days} days"
        )
        return package

    async def listPackages(self, activeOnly: bool = True) -> List[Package]:
        """Packages ordered by minimum investment."""
        return self.store.listPackages(activeOnly=activeOnly)
