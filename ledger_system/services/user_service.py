# ledger_system/services/user_service.py
"""
User service - registration with sponsor lookup and write-once wallet.
"""
import secrets
from typing import Optional
from sqlalchemy.orm import Session
import logging

from models.user import User, ZERO_WALLET
from ledger_system.store import LedgerStore
from ledger_system.errors import NotFoundError, ValidationError, WalletLockedError
from ledger_system.utils.wallet_validator import validate_evm_address

logger = logging.getLogger(__name__)

REFERRAL_CODE_ATTEMPTS = 20


class UserService:
    """Service for registering users and connecting wallets."""

    def __init__(self, session: Session):
        self.session = session
        self.store = LedgerStore(session)

    async def registerUser(
            self,
            name: str,
            email: str,
            referralCode: Optional[str] = None
    ) -> User:
        """
        Create a user, linking the sponsor when referralCode resolves.

        referralCode is the sponsor's wallet address taken from a referral
        link. An unknown code registers the user without a sponsor.

        Raises:
            ValidationError: Missing name/email or email already registered
        """
        if not name or not email:
            raise ValidationError("Name and email are required")

        email = email.strip().lower()
        if self.store.findUserByEmail(email):
            raise ValidationError(f"User with email {email} already exists")

        sponsor = None
        sponsor_wallet = ZERO_WALLET

        if referralCode and referralCode.lower() != ZERO_WALLET:
            sponsor = self.store.findUserByWallet(referralCode)
            if sponsor:
                sponsor_wallet = referralCode
            else:
                logger.warning(f"Referral code {referralCode} did not resolve to a sponsor")

        user = User(
            name=name,
            email=email,
            referralCode=self._generateReferralCode(name),
            referredBy=sponsor.userID if sponsor else None,
            sponsorWallet=sponsor_wallet,
        )
        self.store.saveUser(user)
        self.store.commit()

        logger.info(
            f"Registered user {user.userID} ({email}), "
            f"sponsor={sponsor.userID if sponsor else None}"
        )
        return user

    async def connectWallet(self, userId: int, wallet: str) -> User:
        """
        Set a user's wallet address. Allowed only once.

        Raises:
            NotFoundError: User does not resolve
            ValidationError: Address malformed
            WalletLockedError: A wallet is already connected
        """
        user = self.store.findUserById(userId)
        if not user:
            raise NotFoundError("User", userId)

        result = validate_evm_address(wallet)
        if not result.is_valid:
            raise ValidationError(f"Invalid wallet address: {result.details}")

        wallet = wallet.strip()

        if user.wallet and user.wallet != ZERO_WALLET:
            raise WalletLockedError(
                "Wallet already connected. For security reasons, "
                "you cannot change your wallet address."
            )

        if self.store.findUserByWallet(wallet):
            raise ValidationError("Wallet is already connected to another account")

        user.wallet = wallet
        self.store.saveUser(user)
        self.store.commit()

        logger.info(f"✓ Wallet connected for user {userId}: {wallet[:8]}...{wallet[-4:]}")
        return user

    def _generateReferralCode(self, name: str) -> str:
        """Three letters of the name plus four digits, unique."""
        prefix = (name[:3] or "USR").upper()

        for _ in range(REFERRAL_CODE_ATTEMPTS):
            code = f"{prefix}{1000 + secrets.randbelow(9000)}"
            if not self.store.findUserByReferralCode(code):
                return code

        return f"{prefix}{secrets.token_hex(4).upper()}"
