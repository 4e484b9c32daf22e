"""
Configuration module for the Jenkins operator.

Loads configuration from environment variables.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional


def _env_bool(name, default="false"):
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass
class OperatorConfig:
    """Operator configuration."""

    log_level: str = "INFO"
    debug: bool = False  # include tracebacks in reconcile failure logs

    requeue_delay: int = 10  # seconds, seed jobs and groovy scripts
    error_requeue_delay: int = 30  # seconds, unclassified failures
    resync_interval: int = 300  # seconds between periodic reconciles

    watch_namespace: str = ""  # empty = all namespaces
    provisioners: str = "default"

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            debug=_env_bool("DEBUG"),
            requeue_delay=int(os.getenv("REQUEUE_DELAY", "10")),
            error_requeue_delay=int(os.getenv("ERROR_REQUEUE_DELAY", "30")),
            resync_interval=int(os.getenv("RESYNC_INTERVAL", "300")),
            watch_namespace=os.getenv("WATCH_NAMESPACE", ""),
            provisioners=os.getenv("PROVISIONERS", "default"),
        )

    @property
    def log_level_value(self) -> int:
        """Numeric logging level; unknown names fall back to INFO."""
        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.INFO


# Global config instance
config: Optional[OperatorConfig] = None


def load_config() -> OperatorConfig:
    """Load configuration (singleton pattern)."""
    global config
    if config is None:
        config = OperatorConfig.from_env()
    return config


def get_config() -> OperatorConfig:
    """Get the current configuration."""
    if config is None:
        return load_config()
    return config


def reset_config() -> None:
    """Reset configuration (mainly for testing)."""
    global config
    config = None
