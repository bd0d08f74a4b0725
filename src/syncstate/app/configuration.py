"""
Configuration Management for SyncState

Configuration is an explicit ``SyncConfig`` value handed to each
coordinator. It can be built per environment, from a dictionary, from a
JSON or YAML file, or from ``SYNCSTATE_*`` environment variables.
"""

import json
import logging
import logging.handlers
import os
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union, get_args

import yaml

from ..errors import ConfigurationError
from ..reconciliation.options import ConflictHandler, MergeStrategy, SmartStateOptions

_HANDLER_NAME = "syncstate"


class Environment(Enum):
    """Application environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


@dataclass
class ValidationSettings:
    """Validation scheduling configuration"""
    debounce_ms: float = 0
    dependent_debounce_ms: float = 100
    failure_message: str = "Validation failed"
    root_form_key: str = "rootForm"
    root_validation_mode: str = "submit"  # "submit" | "live"
    validate_root_on_submit: bool = True


@dataclass
class ReconciliationSettings:
    """External update merging configuration"""
    merge_strategy: str = "smart"
    preserve_fields: List[str] = field(default_factory=list)
    conflict_resolution: bool = False

    def to_options(self, on_conflict: Optional[ConflictHandler] = None) -> SmartStateOptions:
        return SmartStateOptions(
            merge_strategy=self.merge_strategy,
            preserve_fields=list(self.preserve_fields),
            conflict_resolution=self.conflict_resolution,
            on_conflict=on_conflict,
        )


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class SyncConfig:
    """Complete form synchronization configuration"""
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    validation: ValidationSettings = field(default_factory=ValidationSettings)
    reconciliation: ReconciliationSettings = field(default_factory=ReconciliationSettings)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    custom: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def for_environment(cls, environment: Environment) -> "SyncConfig":
        """Create configuration for specific environment"""
        config = cls(environment=environment)

        if environment == Environment.DEVELOPMENT:
            config.logging.level = "DEBUG"

        elif environment == Environment.TESTING:
            config.logging.level = "WARNING"

        elif environment == Environment.PRODUCTION:
            config.debug = False
            config.logging.level = "INFO"

        return config

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "SyncConfig":
        """Create configuration from dictionary; unknown keys are ignored"""
        config_dict = config_dict or {}
        environment = _parse_environment(config_dict.get("environment", Environment.DEVELOPMENT.value))
        config = cls.for_environment(environment)

        if "debug" in config_dict:
            config.debug = bool(config_dict["debug"])

        _update_section(config.validation, config_dict.get("validation"))
        _update_section(config.reconciliation, config_dict.get("reconciliation"))
        config.reconciliation.merge_strategy = _parse_merge_strategy(config.reconciliation.merge_strategy)
        _update_section(config.logging, config_dict.get("logging"))

        if "custom" in config_dict:
            config.custom = dict(config_dict["custom"])

        return config

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "SyncConfig":
        """Load configuration from a ``.json``, ``.yml`` or ``.yaml`` file"""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path) as f:
            if config_path.suffix == ".json":
                config_dict = json.load(f)
            elif config_path.suffix in (".yml", ".yaml"):
                config_dict = yaml.safe_load(f)
            else:
                raise ConfigurationError(f"Unsupported configuration file format: {config_path.suffix}")

        return cls.from_dict(config_dict or {})

    @classmethod
    def from_environment(cls) -> "SyncConfig":
        """Create configuration from environment variables"""
        environment = _parse_environment(os.getenv("SYNCSTATE_ENV", "development"))
        config = cls.for_environment(environment)

        if os.getenv("SYNCSTATE_DEBUG"):
            config.debug = os.getenv("SYNCSTATE_DEBUG").lower() == "true"

        if os.getenv("SYNCSTATE_DEBOUNCE_MS"):
            try:
                config.validation.debounce_ms = float(os.getenv("SYNCSTATE_DEBOUNCE_MS"))
            except ValueError as e:
                raise ConfigurationError(f"Invalid SYNCSTATE_DEBOUNCE_MS: {e}") from e

        if os.getenv("SYNCSTATE_ROOT_FORM_KEY"):
            config.validation.root_form_key = os.getenv("SYNCSTATE_ROOT_FORM_KEY")

        if os.getenv("SYNCSTATE_LOG_LEVEL"):
            config.logging.level = os.getenv("SYNCSTATE_LOG_LEVEL").upper()

        if os.getenv("SYNCSTATE_MERGE_STRATEGY"):
            config.reconciliation.merge_strategy = _parse_merge_strategy(os.getenv("SYNCSTATE_MERGE_STRATEGY"))

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return {
            "environment": self.environment.value,
            "debug": self.debug,
            "validation": asdict(self.validation),
            "reconciliation": asdict(self.reconciliation),
            "logging": asdict(self.logging),
            "custom": dict(self.custom),
        }


def _parse_environment(name: Any) -> Environment:
    if isinstance(name, Environment):
        return name
    try:
        return Environment(str(name).lower())
    except ValueError as e:
        raise ConfigurationError(f"Unknown environment: {name!r}") from e


def _parse_merge_strategy(name: str) -> str:
    strategies = get_args(MergeStrategy)
    if name not in strategies:
        raise ConfigurationError(f"Unknown merge strategy: {name!r}, expected one of {', '.join(strategies)}")
    return name


def _update_section(section: Any, values: Optional[Dict[str, Any]]) -> None:
    if not values:
        return
    known = {f.name for f in fields(section)}
    for key, value in values.items():
        if key in known:
            setattr(section, key, value)


def configure_logging(config: LoggingConfig, logger_name: str = "syncstate") -> logging.Logger:
    """
    Attach a handler to the ``syncstate`` logger.

    Calling it again replaces the handler installed previously instead of
    adding another one.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(config.level.upper())

    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)
            handler.close()

    if config.file_path:
        Path(config.file_path).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
        )
    else:
        handler = logging.StreamHandler()

    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(config.format))
    logger.addHandler(handler)
    return logger


__all__ = [
    "Environment",
    "ValidationSettings",
    "ReconciliationSettings",
    "LoggingConfig",
    "SyncConfig",
    "configure_logging",
]
