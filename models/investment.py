"""
Investment model - a user's investment request and its active period.

Status lifecycle: pending -> active | rejected.
completed and terminated exist for records produced outside the ledger core.
"""
from sqlalchemy import Column, Integer, String, DECIMAL, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from models.base import Base, AuditMixin, _get_current_time
from models.user import ZERO_WALLET


class Investment(Base, AuditMixin):
    __tablename__ = 'investments'

    # Primary key
    investmentID = Column(Integer, primary_key=True, autoincrement=True)

    # Relations
    userID = Column(Integer, ForeignKey('users.userID'), nullable=False, index=True)
    packageID = Column(Integer, ForeignKey('packages.packageID'), nullable=True)

    # Amounts
    amount = Column(DECIMAL(18, 2), nullable=False)
    dailyReturn = Column(DECIMAL(12, 8), nullable=False)  # Percent per day
    dailyReturnAmount = Column(DECIMAL(24, 12), nullable=False)  # amount * dailyReturn / 100

    # Active period
    startDate = Column(DateTime, default=_get_current_time)
    endDate = Column(DateTime, nullable=False)
    lastRoiDate = Column(DateTime, default=_get_current_time)

    status = Column(String, default="pending", nullable=False)  # pending, active, completed, terminated, rejected

    # Correlation only, not unique
    transactionId = Column(String, nullable=False, index=True)

    # Opaque wallet strings, never resolved to a User
    sponsorId = Column(String, default="")
    userWallet = Column(String, default=ZERO_WALLET)

    # Relationships
    user = relationship('User', backref='investments')
    package = relationship('Package')

    __table_args__ = (
        Index('ix_investment_user_status', 'userID', 'status'),
    )

    def __repr__(self):
        return f"<Investment(investmentID={self.investmentID}, amount={self.amount}, status={self.status})>"
