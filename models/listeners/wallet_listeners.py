# models/listeners/wallet_listeners.py
"""
Wallet Event Listeners - write-once protection for User.wallet.

Once a user has a non-zero wallet address it can never be replaced,
whichever code path tries to set it.
"""
import logging

from sqlalchemy import event

logger = logging.getLogger(__name__)


def register_wallet_protection():
    """
    Reject direct replacement of an already connected wallet.

    Called once during application startup from models/listeners/__init__.py
    """
    from models.user import User, ZERO_WALLET
    from ledger_system.errors import WalletLockedError

    @event.listens_for(User.wallet, 'set', active_history=True)
    def protect_wallet_set(target, value, oldvalue, initiator):
        """Block changing a wallet that is already set."""
        if not isinstance(oldvalue, str):
            return  # NO_VALUE / NEVER_SET on fresh or unloaded instances

        if oldvalue and oldvalue != ZERO_WALLET and value != oldvalue:
            logger.warning(
                f"Blocked wallet change for user={target.userID}: "
                f"{oldvalue} → {value}"
            )
            raise WalletLockedError(
                "Wallet already connected. For security reasons, "
                "you cannot change your wallet address."
            )
