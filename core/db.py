# core/db.py
"""
Ledger database: one engine per process, created lazily from DATABASE_URL.
"""
import logging
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from config import Config
from models.base import Base

logger = logging.getLogger(__name__)

_engine = None
_SessionFactory = None


def get_engine():
    """Get or create the ledger engine."""
    global _engine
    if _engine is None:
        url = make_url(Config.get(Config.DATABASE_URL))
        _engine = create_engine(url, pool_pre_ping=True)
        logger.info(f"Ledger database: {url.render_as_string(hide_password=True)}")
    return _engine


@contextmanager
def ledger_session():
    """
    Session for one CLI command: committed on success, rolled back on error.

    Usage:
        with ledger_session() as session:
            await ApprovalService(session).decideInvestment(7, "approve")
    """
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=get_engine())

    session = _SessionFactory()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.debug(f"Ledger session rolled back: {e}")
        raise
    finally:
        session.close()


def create_tables():
    """Create every ledger table that does not exist yet."""
    import models  # noqa: F401  registers all mappers on Base.metadata

    Base.metadata.create_all(get_engine())
    logger.info("Ledger tables ready")
