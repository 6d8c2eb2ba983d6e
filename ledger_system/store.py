# ledger_system/store.py
"""
Ledger store - CRUD-shaped persistence contract over a SQLAlchemy session.

Services never touch the session for writes directly; every write goes
through here so persistence failures surface as StoreError.
"""
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.user import User
from models.package import Package
from models.investment import Investment
from models.transaction import Transaction
from ledger_system.errors import StoreError, DuplicateEntryError

logger = logging.getLogger(__name__)


class LedgerStore:
    """
    Single-document reads and writes for users, packages, investments
    and ledger transactions.

    Example:
        store = LedgerStore(session)
        user = store.findUserById(42)
        store.createTransaction(userID=42, type="bonus", amount=Decimal("5"))
        store.commit()
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _guard(self, operation: str):
        """Roll back and re-raise any SQLAlchemy failure as StoreError."""
        try:
            yield
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Store operation '{operation}' rejected by constraint: {e.orig}")
            raise DuplicateEntryError(f"{operation} rejected: {e.orig}") from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Store operation '{operation}' failed: {e}")
            raise StoreError(f"{operation} failed: {e}") from e

    # ============================================================
    # USERS
    # ============================================================

    def findUserById(self, userId: int) -> Optional[User]:
        with self._guard("findUserById"):
            return self.session.get(User, userId)

    def findUserByEmail(self, email: str) -> Optional[User]:
        with self._guard("findUserByEmail"):
            return self.session.query(User).filter_by(email=email).first()

    def findUserByWallet(self, wallet: str) -> Optional[User]:
        with self._guard("findUserByWallet"):
            return self.session.query(User).filter(
                func.lower(User.wallet) == wallet.lower()
            ).first()

    def findUserByReferralCode(self, code: str) -> Optional[User]:
        with self._guard("findUserByReferralCode"):
            return self.session.query(User).filter_by(referralCode=code).first()

    def findReferrals(self, userId: int) -> List[User]:
        """Direct downline of a user."""
        with self._guard("findReferrals"):
            return self.session.query(User).filter(
                User.referredBy == userId
            ).order_by(User.userID).all()

    def listUsers(self, userIds: Optional[Iterable[int]] = None) -> List[User]:
        with self._guard("listUsers"):
            query = self.session.query(User)
            if userIds is not None:
                query = query.filter(User.userID.in_(list(userIds)))
            return query.order_by(User.userID).all()

    def saveUser(self, user: User) -> User:
        with self._guard("saveUser"):
            self.session.add(user)
            self.session.flush()
        return user

    # ============================================================
    # PACKAGES
    # ============================================================

    def findPackageById(self, packageId: int) -> Optional[Package]:
        with self._guard("findPackageById"):
            return self.session.get(Package, packageId)

    def listPackages(self, activeOnly: bool = True) -> List[Package]:
        with self._guard("listPackages"):
            query = self.session.query(Package)
            if activeOnly:
                query = query.filter(Package.isActive.is_(True))
            return query.order_by(Package.minInvestment, Package.packageID).all()

    def savePackage(self, package: Package) -> Package:
        with self._guard("savePackage"):
            self.session.add(package)
            self.session.flush()
        return package

    # ============================================================
    # INVESTMENTS
    # ============================================================

    def findInvestmentById(self, investmentId: int) -> Optional[Investment]:
        with self._guard("findInvestmentById"):
            return self.session.get(Investment, investmentId)

    def findInvestments(self, userId: Optional[int] = None) -> List[Investment]:
        """Investments newest first, optionally for one user."""
        with self._guard("findInvestments"):
            query = self.session.query(Investment)
            if userId is not None:
                query = query.filter(Investment.userID == userId)
            return query.order_by(
                Investment.createdAt.desc(),
                Investment.investmentID.desc()
            ).all()

    def saveInvestment(self, investment: Investment) -> Investment:
        with self._guard("saveInvestment"):
            self.session.add(investment)
            self.session.flush()
        return investment

    def transitionInvestmentStatus(
            self,
            investmentId: int,
            fromStatus: str,
            toStatus: str,
            **values: Any
    ) -> bool:
        """
        Compare-and-swap on Investment.status.

        Returns:
            True if this call moved the row out of fromStatus,
            False if the row was no longer in fromStatus
        """
        with self._guard("transitionInvestmentStatus"):
            updated = self.session.query(Investment).filter(
                Investment.investmentID == investmentId,
                Investment.status == fromStatus
            ).update(
                {"status": toStatus, **values},
                synchronize_session=False
            )

            # Bulk UPDATE bypasses the identity map
            cached = self.session.identity_map.get(
                self.session.identity_key(Investment, investmentId)
            )
            if cached is not None:
                self.session.expire(cached)

        logger.debug(
            f"Investment {investmentId} CAS {fromStatus} → {toStatus}: "
            f"{'won' if updated == 1 else 'lost'}"
        )
        return updated == 1

    def sumInvestmentAmounts(self, userId: int, statuses: Iterable[str]) -> Decimal:
        """SUM(amount) of a user's investments in the given statuses."""
        with self._guard("sumInvestmentAmounts"):
            total = self.session.query(
                func.coalesce(func.sum(Investment.amount), 0)
            ).filter(
                Investment.userID == userId,
                Investment.status.in_(list(statuses))
            ).scalar()
        return Decimal(str(total or 0))

    # ============================================================
    # TRANSACTIONS
    # ============================================================

    def createTransaction(self, **data: Any) -> Transaction:
        """Append a ledger entry. Raises DuplicateEntryError on a used bonus hash."""
        transaction = Transaction(**data)
        with self._guard("createTransaction"):
            self.session.add(transaction)
            self.session.flush()
        return transaction

    def findTransactionByHash(self, hash: str, type: Optional[str] = None) -> Optional[Transaction]:
        with self._guard("findTransactionByHash"):
            query = self.session.query(Transaction).filter(Transaction.hash == hash)
            if type is not None:
                query = query.filter(Transaction.type == type)
            return query.first()

    def findTransactions(self, **filters: Any) -> List[Transaction]:
        with self._guard("findTransactions"):
            return self.session.query(Transaction).filter_by(
                **filters
            ).order_by(Transaction.transactionID).all()

    def updateTransactionMatching(
            self,
            filter: Dict[str, Any],
            patch: Dict[str, Any]
    ) -> Optional[Transaction]:
        """
        Update the first (oldest) transaction matching filter.

        Returns:
            The updated transaction, or None if nothing matched
        """
        with self._guard("updateTransactionMatching"):
            transaction = self.session.query(Transaction).filter_by(
                **filter
            ).order_by(Transaction.transactionID).first()

            if transaction is None:
                return None

            for key, value in patch.items():
                setattr(transaction, key, value)
            self.session.flush()

        return transaction

    # ============================================================
    # UNIT OF WORK
    # ============================================================

    def commit(self) -> None:
        with self._guard("commit"):
            self.session.commit()

    def refresh(self, instance) -> None:
        with self._guard("refresh"):
            self.session.refresh(instance)
