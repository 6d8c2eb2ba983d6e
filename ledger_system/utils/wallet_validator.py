# ledger_system/utils/wallet_validator.py
"""
Wallet address validation utilities.
Supports EVM (0x-prefixed, 20-byte hex) addresses used for sponsor links.
"""
import re
import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class WalletValidationCode(Enum):
    """Validation result codes for wallet addresses."""
    VALID = "valid"
    INVALID_PREFIX = "invalid_prefix"  # Doesn't start with 0x
    INVALID_LENGTH = "invalid_length"  # Wrong number of characters
    INVALID_CHARS = "invalid_chars"  # Non-hex characters
    ZERO_ADDRESS = "zero_address"  # Placeholder, never a real wallet
    EMPTY = "empty"  # Empty or None input


@dataclass
class WalletValidationResult:
    """Result of wallet address validation."""
    code: WalletValidationCode
    details: str = None

    @property
    def is_valid(self) -> bool:
        """Check if validation passed."""
        return self.code == WalletValidationCode.VALID


# 0x + 40 hex characters = 42 total
EVM_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
EVM_ADDRESS_LENGTH = 42


def validate_evm_address(address: str) -> WalletValidationResult:
    """
    Validate EVM wallet address.

    Rules:
    - Starts with '0x'
    - Exactly 42 characters total
    - Only hex characters after the prefix
    - Not the zero address

    Examples:
        >>> validate_evm_address("0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0")
        WalletValidationResult(code=VALID)

        >>> validate_evm_address("TJYeasTPa6gpBZEgKso8R79RNEQ5GRgvz3")
        WalletValidationResult(code=INVALID_PREFIX, details="...")
    """
    if not address or not address.strip():
        return WalletValidationResult(
            WalletValidationCode.EMPTY,
            "Address is empty"
        )

    address = address.strip()

    if not address.lower().startswith('0x'):
        return WalletValidationResult(
            WalletValidationCode.INVALID_PREFIX,
            "EVM address must start with '0x'"
        )

    if len(address) != EVM_ADDRESS_LENGTH:
        return WalletValidationResult(
            WalletValidationCode.INVALID_LENGTH,
            f"EVM address must be {EVM_ADDRESS_LENGTH} characters, got {len(address)}"
        )

    if not EVM_PATTERN.match(address):
        invalid_chars = [
            f"'{char}' at position {i + 1}"
            for i, char in enumerate(address[2:], start=2)
            if char not in "0123456789abcdefABCDEF"
        ]
        details = f"Invalid characters: {', '.join(invalid_chars[:3])}"
        if len(invalid_chars) > 3:
            details += f" and {len(invalid_chars) - 3} more"

        return WalletValidationResult(
            WalletValidationCode.INVALID_CHARS,
            details
        )

    if int(address[2:], 16) == 0:
        return WalletValidationResult(
            WalletValidationCode.ZERO_ADDRESS,
            "Zero address cannot be connected"
        )

    logger.debug(f"EVM address validated: {address[:8]}...{address[-4:]}")
    return WalletValidationResult(WalletValidationCode.VALID)


__all__ = [
    'WalletValidationCode',
    'WalletValidationResult',
    'validate_evm_address',
]
