"""
Transaction model - append-only ledger journal.

Bonus rows carry hash LEVEL{n}-{investmentID}; the partial unique index
below makes a second payout for the same level and investment impossible.
"""
from sqlalchemy import Column, Integer, String, DECIMAL, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from models.base import Base, AuditMixin


class Transaction(Base, AuditMixin):
    __tablename__ = 'transactions'

    transactionID = Column(Integer, primary_key=True, autoincrement=True)

    userID = Column(Integer, ForeignKey('users.userID'), nullable=False, index=True)

    # investment, bonus, withdrawal, deposit, stake, claim_roi, claim_stake_roi
    type = Column(String, nullable=False)
    amount = Column(DECIMAL(18, 8), nullable=False)
    description = Column(String, nullable=True)

    status = Column(String, default="pending", nullable=False)  # pending, completed, failed

    hash = Column(String, nullable=True, index=True)

    user = relationship('User', backref='transactions')

    __table_args__ = (
        Index('ix_transaction_match', 'userID', 'type', 'status'),
        Index(
            'uq_transaction_bonus_hash', 'hash',
            unique=True,
            sqlite_where=text("type = 'bonus'"),
            postgresql_where=text("type = 'bonus'"),
        ),
    )

    def __repr__(self):
        return f"<Transaction(transactionID={self.transactionID}, type={self.type}, amount={self.amount}, status={self.status})>"
