"""
Package model - investment rate/duration templates.
"""
from sqlalchemy import Column, Integer, String, DECIMAL, Boolean
from models.base import Base, AuditMixin


class Package(Base, AuditMixin):
    __tablename__ = 'packages'

    packageID = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)

    minInvestment = Column(DECIMAL(18, 2), nullable=False)
    maxInvestment = Column(DECIMAL(18, 2), nullable=True)  # NULL = unlimited

    dailyReturn = Column(DECIMAL(12, 8), nullable=False)  # Percent per day
    duration = Column(Integer, nullable=False, default=365)  # Days

    isActive = Column(Boolean, default=True)

    def __repr__(self):
        return f"<Package(packageID={self.packageID}, name={self.name}, duration={self.duration})>"
