"""
SQLAlchemy Event Listeners Package.

Registers all event listeners for the application.
Import this module once during app startup to activate listeners.

Listeners:
    - wallet_listeners: Write-once protection for User.wallet
"""
import logging

logger = logging.getLogger(__name__)

_listeners_registered = False


def register_all_listeners():
    """
    Register all event listeners.

    Safe to call multiple times - listeners are registered only once.
    """
    global _listeners_registered

    if _listeners_registered:
        logger.debug("Listeners already registered, skipping")
        return

    from models.listeners.wallet_listeners import register_wallet_protection

    register_wallet_protection()
    logger.info("Wallet protection listeners registered (write-once User.wallet)")

    _listeners_registered = True
    logger.info("All event listeners registered successfully")
