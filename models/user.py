"""
User model - investors and their sponsor links.
"""
from decimal import Decimal

from sqlalchemy import Column, Integer, String, DECIMAL, ForeignKey
from sqlalchemy.orm import relationship
from models.base import Base, AuditMixin

ZERO_WALLET = "0x0000000000000000000000000000000000000000"


class User(Base, AuditMixin):
    __tablename__ = 'users'

    # Primary key
    userID = Column(Integer, primary_key=True, autoincrement=True)

    # Identity
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    role = Column(String, default="user")  # user, admin
    status = Column(String, default="active")  # active, blocked

    # Referral structure
    referralCode = Column(String, nullable=False, unique=True, index=True)
    referredBy = Column(Integer, ForeignKey('users.userID'), nullable=True, index=True)  # Weak back-reference
    sponsorWallet = Column(String, default=ZERO_WALLET)  # Opaque, copied at registration

    # Write-once, see models/listeners/wallet_listeners.py
    wallet = Column(String, default=ZERO_WALLET)

    # Cached SUM(Investment.amount) over active/completed investments
    totalInvestment = Column(DECIMAL(18, 2), default=Decimal("0"), nullable=False)

    # Relationships
    sponsor = relationship('User', remote_side=[userID], backref='referrals')

    def __repr__(self):
        return f"<User(userID={self.userID}, email={self.email}, totalInvestment={self.totalInvestment})>"
