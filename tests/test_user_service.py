# tests/test_user_service.py
"""
Tests for UserService registration and the write-once wallet.

Run:
    pytest tests/test_user_service.py -v
"""
import re

import pytest

from models import User, ZERO_WALLET
from ledger_system.errors import NotFoundError, ValidationError, WalletLockedError
from ledger_system.services.user_service import UserService
from ledger_system.utils.wallet_validator import WalletValidationCode, validate_evm_address

pytestmark = pytest.mark.asyncio

WALLET_A = "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0"
WALLET_B = "0x8ba1f109551bD432803012645Ac136ddd64DBA72"


# =============================================================================
# TEST CLASS: Registration
# =============================================================================

class TestRegistration:
    """Sponsor linking through the referral code."""

    async def test_register_without_referral(self, session):
        user = await UserService(session).registerUser("Alice", "Alice@Example.com")

        assert user.email == "alice@example.com"
        assert user.referredBy is None
        assert user.sponsorWallet == ZERO_WALLET
        assert user.wallet == ZERO_WALLET
        assert re.fullmatch(r"ALI\d{4}", user.referralCode)

    async def test_register_with_sponsor_wallet(self, session, make_user):
        """TEST: referral code = sponsor's wallet → referredBy + sponsorWallet set."""
        sponsor = make_user("Sponsor", wallet=WALLET_A)

        user = await UserService(session).registerUser("Bob", "bob@example.com", WALLET_A.lower())

        assert user.referredBy == sponsor.userID
        assert user.sponsorWallet == WALLET_A.lower()
        assert user.sponsor.userID == sponsor.userID

    async def test_unknown_referral_registers_without_sponsor(self, session, make_user):
        make_user("Someone", wallet=WALLET_A)

        user = await UserService(session).registerUser("Carl", "carl@example.com", WALLET_B)

        assert user.referredBy is None
        assert user.sponsorWallet == ZERO_WALLET

    async def test_zero_address_referral_ignored(self, session, make_user):
        """TEST: users without a wallet never match the zero address."""
        make_user("NoWallet")

        user = await UserService(session).registerUser("Dan", "dan@example.com", ZERO_WALLET)

        assert user.referredBy is None

    async def test_duplicate_email_rejected(self, session):
        service = UserService(session)
        await service.registerUser("Eve", "eve@example.com")

        with pytest.raises(ValidationError):
            await service.registerUser("Eve Again", "EVE@example.com")

        assert session.query(User).count() == 1

    async def test_missing_fields_rejected(self, session):
        with pytest.raises(ValidationError):
            await UserService(session).registerUser("", "x@example.com")


# =============================================================================
# TEST CLASS: Wallet connection
# =============================================================================

class TestConnectWallet:
    """Wallet can be connected once and never replaced."""

    async def test_connect_wallet(self, session, make_user):
        user = make_user("Fresh")

        updated = await UserService(session).connectWallet(user.userID, WALLET_A)

        assert updated.wallet == WALLET_A

    async def test_invalid_address_rejected(self, session, make_user):
        user = make_user("Typo")

        with pytest.raises(ValidationError):
            await UserService(session).connectWallet(user.userID, "0x1234")

        session.refresh(user)
        assert user.wallet == ZERO_WALLET

    async def test_second_connect_locked(self, session, make_user):
        user = make_user("Locked", wallet=WALLET_A)

        with pytest.raises(WalletLockedError):
            await UserService(session).connectWallet(user.userID, WALLET_B)

        session.refresh(user)
        assert user.wallet == WALLET_A

    async def test_wallet_used_by_another_account(self, session, make_user):
        make_user("Owner", wallet=WALLET_A)
        other = make_user("Other")

        with pytest.raises(ValidationError):
            await UserService(session).connectWallet(other.userID, WALLET_A.upper().replace("0X", "0x"))

    async def test_unknown_user(self, session):
        with pytest.raises(NotFoundError):
            await UserService(session).connectWallet(4242, WALLET_A)

    async def test_listener_blocks_direct_assignment(self, session, make_user):
        """TEST: bypassing the service still cannot replace the wallet."""
        user = make_user("Direct", wallet=WALLET_A)

        with pytest.raises(WalletLockedError):
            user.wallet = WALLET_B

        session.rollback()
        assert session.get(User, user.userID).wallet == WALLET_A


# =============================================================================
# TEST CLASS: Address validation
# =============================================================================

class TestWalletValidator:
    """EVM address rules."""

    @pytest.mark.parametrize("address,code", [
        (WALLET_A, WalletValidationCode.VALID),
        ("", WalletValidationCode.EMPTY),
        ("TJYeasTPa6gpBZEgKso8R79RNEQ5GRgvz3", WalletValidationCode.INVALID_PREFIX),
        ("0x742d35", WalletValidationCode.INVALID_LENGTH),
        ("0x742d35Cc6634C0532925a3b844Bc9e7595f0bEbZ", WalletValidationCode.INVALID_CHARS),
        (ZERO_WALLET, WalletValidationCode.ZERO_ADDRESS),
    ])
    async def test_codes(self, address, code):
        assert validate_evm_address(address).code is code
