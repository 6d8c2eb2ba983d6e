# tests/conftest.py
"""
Pytest configuration and shared fixtures for ledger tests.

Every test gets a fresh in-memory SQLite database.

Run:
    pytest tests -v
"""
import uuid
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, func
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config import Config
from models import Base, User, Package, Investment
from models.listeners import register_all_listeners
from ledger_system.config.commission import COUNTED_STATUSES
from ledger_system.store import LedgerStore


# =============================================================================
# CONFIG & LISTENERS
# =============================================================================

@pytest.fixture(scope="session", autouse=True)
def setup_listeners():
    """Register listeners once at test session start."""
    register_all_listeners()


@pytest.fixture(autouse=True)
def default_config():
    """Each test starts from built-in defaults."""
    Config.reset()
    yield
    Config.reset()


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture
def engine():
    """In-memory database shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """Create database session for each test."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


# =============================================================================
# BUILDERS
# =============================================================================

@pytest.fixture
def make_user(session):
    """
    Create and commit a user.

    Usage:
        sponsor = make_user("Alice")
        user = make_user("Bob", sponsor=sponsor)
    """

    def _make(name="User", sponsor=None, wallet=None, total=Decimal("0")):
        user = User(
            name=name,
            email=f"{name.lower()}_{uuid.uuid4().hex[:8]}@example.com",
            referralCode=f"REF{uuid.uuid4().hex[:10].upper()}",
            referredBy=sponsor.userID if sponsor else None,
            totalInvestment=total,
        )
        if wallet:
            user.wallet = wallet
        session.add(user)
        session.commit()
        return user

    return _make


@pytest.fixture
def make_chain(make_user):
    """
    Build a sponsor chain and return it top-down.

    make_chain(3) -> [U0, U1, U2] where U1.referredBy = U0, U2.referredBy = U1.
    """

    def _make(length):
        chain = []
        sponsor = None
        for index in range(length):
            sponsor = make_user(f"U{index}", sponsor=sponsor)
            chain.append(sponsor)
        return chain

    return _make


@pytest.fixture
def make_package(session):
    """Create and commit an investment package."""

    def _make(name="Gold", min_investment="1000", max_investment="50000",
              daily_return="0.5", duration=180):
        package = Package(
            name=name,
            minInvestment=Decimal(min_investment),
            maxInvestment=Decimal(max_investment) if max_investment is not None else None,
            dailyReturn=Decimal(daily_return),
            duration=duration,
        )
        store = LedgerStore(session)
        store.savePackage(package)
        store.commit()
        return package

    return _make


# =============================================================================
# HELPER FIXTURES
# =============================================================================

@pytest.fixture
def bonus_transactions(session):
    """Bonus transactions paid for one investment, ordered by level."""

    def _query(investment_id):
        rows = [
            t for t in LedgerStore(session).findTransactions(type="bonus")
            if t.hash.endswith(f"-{investment_id}")
        ]
        return sorted(rows, key=lambda t: int(t.hash[len("LEVEL"):].split("-")[0]))

    return _query


@pytest.fixture
def calc_investment_sum(session):
    """
    Calculator for the real investment total of a user.

    SUM(Investment.amount) WHERE userID=X AND status IN (active, completed)
    """

    def _calc(user_id: int) -> Decimal:
        result = session.query(
            func.coalesce(func.sum(Investment.amount), 0)
        ).filter(
            Investment.userID == user_id,
            Investment.status.in_(COUNTED_STATUSES)
        ).scalar()
        return Decimal(str(result))

    return _calc
