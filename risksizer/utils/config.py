"""
Configuration Module for RiskSizer
=================================
Loads and validates configuration from .env file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

from risksizer.core.errors import UnknownInstrumentError
from risksizer.core.instruments import InstrumentRegistry


@dataclass
class InstrumentConfig:
    """Instrument table and default selection."""
    instruments: str = "ES:50:5,NQ:20:2"
    default_instrument: str = "ES"


@dataclass
class RiskConfig:
    """Risk percentage slider settings (percent units)."""
    default_risk_pct: float = 0.125
    min_risk_pct: float = 0.125
    max_risk_pct: float = 5.0
    risk_step: float = 0.125

    def limits(self) -> dict:
        """Keyword arguments for parse_risk_percentage()."""
        return {
            "default": self.default_risk_pct,
            "minimum": self.min_risk_pct,
            "maximum": self.max_risk_pct,
            "step": self.risk_step,
        }


@dataclass
class StorageConfig:
    """Settings persistence."""
    settings_path: str = "data/settings.json"
    persist: bool = True


@dataclass
class LoggingConfig:
    """Logging settings."""
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_retention_days: int = 7


@dataclass
class Config:
    """Complete configuration."""
    instruments: InstrumentConfig = field(default_factory=InstrumentConfig)
    risk: RiskConfig = field(default_factory=RiskConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def build_registry(self) -> InstrumentRegistry:
        return InstrumentRegistry.from_string(self.instruments.instruments)


def _get_env(key: str, default: str = "") -> str:
    """Get environment variable."""
    return os.getenv(key, default)


def _get_env_float(key: str, default: float) -> float:
    """Get float environment variable."""
    val = os.getenv(key)
    if val:
        try:
            return float(val)
        except ValueError:
            logger.warning(f"{key}={val!r} is not a number, using {default}")
    return default


def _get_env_int(key: str, default: int) -> int:
    """Get int environment variable."""
    val = os.getenv(key)
    if val:
        try:
            return int(val)
        except ValueError:
            logger.warning(f"{key}={val!r} is not an integer, using {default}")
    return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get bool environment variable."""
    val = os.getenv(key)
    if val:
        return val.lower() in ("true", "1", "yes", "on")
    return default


def load_config(env_path: Optional[str] = None) -> Config:
    """
    Load configuration from .env file.

    Args:
        env_path: Path to .env file. If None, searches in config/ and project root.

    Returns:
        Loaded Config object

    Raises:
        ValueError: if validation fails
        UnknownInstrumentError: if the default instrument is not configured
    """
    if env_path:
        load_dotenv(env_path)
    else:
        # Try config/.env first, then root
        config_env = Path("config/.env")
        root_env = Path(".env")

        if config_env.exists():
            load_dotenv(config_env)
            logger.info(f"Loaded config from {config_env}")
        elif root_env.exists():
            load_dotenv(root_env)
            logger.info(f"Loaded config from {root_env}")
        else:
            logger.warning("No .env file found - using defaults")

    config = Config(
        instruments=InstrumentConfig(
            instruments=_get_env("INSTRUMENTS", "ES:50:5,NQ:20:2"),
            default_instrument=_get_env("DEFAULT_INSTRUMENT", "ES"),
        ),
        risk=RiskConfig(
            default_risk_pct=_get_env_float("DEFAULT_RISK_PCT", 0.125),
            min_risk_pct=_get_env_float("MIN_RISK_PCT", 0.125),
            max_risk_pct=_get_env_float("MAX_RISK_PCT", 5.0),
            risk_step=_get_env_float("RISK_STEP", 0.125),
        ),
        storage=StorageConfig(
            settings_path=_get_env("SETTINGS_PATH", "data/settings.json"),
            persist=_get_env_bool("PERSIST_SETTINGS", True),
        ),
        logging=LoggingConfig(
            log_level=_get_env("LOG_LEVEL", "INFO"),
            log_dir=_get_env("LOG_DIR", "logs"),
            log_retention_days=_get_env_int("LOG_RETENTION_DAYS", 7),
        ),
    )

    validate_config(config)

    return config


def validate_config(config: Config) -> None:
    """Validate configuration."""
    errors = []

    # Instrument table
    registry = None
    try:
        registry = config.build_registry()
    except ValueError as e:
        errors.append(f"INSTRUMENTS invalid: {e}")

    # Risk slider
    risk = config.risk
    if risk.min_risk_pct <= 0:
        errors.append("MIN_RISK_PCT must be > 0")
    if risk.max_risk_pct > 100:
        errors.append("MAX_RISK_PCT must be <= 100")
    if risk.min_risk_pct > risk.max_risk_pct:
        errors.append("MIN_RISK_PCT must be <= MAX_RISK_PCT")
    if risk.risk_step <= 0:
        errors.append("RISK_STEP must be > 0")
    if not risk.min_risk_pct <= risk.default_risk_pct <= risk.max_risk_pct:
        errors.append("DEFAULT_RISK_PCT must be between MIN_RISK_PCT and MAX_RISK_PCT")

    if config.logging.log_retention_days < 1:
        errors.append("LOG_RETENTION_DAYS must be >= 1")

    if errors:
        for e in errors:
            logger.error(f"Config error: {e}")
        raise ValueError(f"Configuration validation failed: {errors}")

    # Fatal at startup rather than on the first calculation
    try:
        registry.validate_instrument(config.instruments.default_instrument)
    except UnknownInstrumentError as e:
        logger.error(f"Config error: DEFAULT_INSTRUMENT {e}")
        raise

    logger.info("Configuration validated successfully")
