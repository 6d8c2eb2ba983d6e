# config.py
"""
Configuration management for the investment ledger.
Loads from .env, falls back to business defaults.
"""
import os
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Configuration error exception."""
    pass


class Config:
    """
    Configuration manager with static and dynamic values.

    Usage:
        # Load from .env
        Config.initialize_from_env()

        # Get value
        url = Config.get(Config.DATABASE_URL)

        # Override at runtime (tests, CLI flags)
        Config.set(Config.MIN_INVESTMENT, Decimal("1000"))
    """

    # ═══════════════════════════════════════════════════════════════════════
    # CONFIGURATION KEYS
    # ═══════════════════════════════════════════════════════════════════════

    # Database
    DATABASE_URL = "DATABASE_URL"

    # Logging
    LOG_LEVEL = "LOG_LEVEL"

    # Investment rules
    MIN_INVESTMENT = "MIN_INVESTMENT"
    DEFAULT_DURATION_DAYS = "DEFAULT_DURATION_DAYS"
    HIGH_TIER_THRESHOLD = "HIGH_TIER_THRESHOLD"
    LOW_TIER_MONTHLY_RATE = "LOW_TIER_MONTHLY_RATE"
    HIGH_TIER_MONTHLY_RATE = "HIGH_TIER_MONTHLY_RATE"

    # ═══════════════════════════════════════════════════════════════════════
    # DEFAULTS
    # ═══════════════════════════════════════════════════════════════════════

    DEFAULTS: Dict[str, Any] = {
        DATABASE_URL: "sqlite:///ledger.db",
        LOG_LEVEL: "INFO",
        MIN_INVESTMENT: Decimal("500"),
        DEFAULT_DURATION_DAYS: 365,
        HIGH_TIER_THRESHOLD: Decimal("100000"),
        LOW_TIER_MONTHLY_RATE: Decimal("1"),
        HIGH_TIER_MONTHLY_RATE: Decimal("1.5"),
    }

    # ═══════════════════════════════════════════════════════════════════════
    # STORAGE
    # ═══════════════════════════════════════════════════════════════════════

    _config: Dict[str, Any] = {}
    _initialized: bool = False

    # ═══════════════════════════════════════════════════════════════════════
    # METHODS
    # ═══════════════════════════════════════════════════════════════════════

    @classmethod
    def initialize_from_env(cls) -> None:
        """
        Load configuration from .env file and process environment.

        Raises:
            ConfigurationError: If a value cannot be parsed
        """
        load_dotenv()

        logger.info("Loading configuration from environment...")

        try:
            # Database
            cls._config[cls.DATABASE_URL] = os.getenv(
                "DATABASE_URL",
                cls.DEFAULTS[cls.DATABASE_URL]
            )

            cls._config[cls.LOG_LEVEL] = os.getenv(
                "LOG_LEVEL",
                cls.DEFAULTS[cls.LOG_LEVEL]
            ).upper()

            # Investment rules
            for key in (
                    cls.MIN_INVESTMENT,
                    cls.HIGH_TIER_THRESHOLD,
                    cls.LOW_TIER_MONTHLY_RATE,
                    cls.HIGH_TIER_MONTHLY_RATE,
            ):
                raw = os.getenv(key)
                cls._config[key] = Decimal(raw) if raw else cls.DEFAULTS[key]

            cls._config[cls.DEFAULT_DURATION_DAYS] = int(
                os.getenv("DEFAULT_DURATION_DAYS", str(cls.DEFAULTS[cls.DEFAULT_DURATION_DAYS]))
            )

            cls._initialized = True
            logger.info("Configuration loaded from environment successfully")

        except (ValueError, InvalidOperation) as e:
            logger.error(f"Failed to load configuration: {e}")
            raise ConfigurationError(f"Configuration loading failed: {e}")

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Falls back to the built-in default for known keys, then to `default`.
        """
        if key in cls._config:
            return cls._config[key]
        if default is not None:
            return default
        return cls.DEFAULTS.get(key)

    @classmethod
    def set(cls, key: str, value: Any, source: str = "runtime") -> None:
        """
        Set configuration value (for dynamic updates).

        Args:
            key: Configuration key
            value: New value
            source: Source of the update (for logging)
        """
        cls._config[key] = value
        logger.debug(f"Config updated: {key} = {value} (source: {source})")

    @classmethod
    def reset(cls) -> None:
        """Drop all loaded values. Used by tests."""
        cls._config = {}
        cls._initialized = False

    @classmethod
    def get_all(cls) -> Dict[str, Any]:
        """
        Get all configuration values.

        Returns:
            Copy of configuration dictionary
        """
        return cls._config.copy()

