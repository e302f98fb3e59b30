"""
StepBridge Configuration Module

Centralized configuration from environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from enum import Enum


class OutputValidation(str, Enum):
    """How handler outputs that fail their output schema are treated."""
    LENIENT = "lenient"
    STRICT = "strict"


@dataclass
class SecurityConfig:
    """Bridge request signing configuration."""
    secret_key: Optional[str] = None
    strict_authentication: bool = False
    signature_tolerance_seconds: int = 300


@dataclass
class BridgeConfig:
    """Outbound bridge transport configuration."""
    url: Optional[str] = None
    retries_limit: int = 3
    timeout_seconds: float = 30.0


@dataclass
class StepBridgeConfig:
    """Main configuration container."""
    security: SecurityConfig = field(default_factory=SecurityConfig)
    bridge: BridgeConfig = field(default_factory=BridgeConfig)
    output_validation: OutputValidation = OutputValidation.LENIENT
    debug: bool = False
    log_level: str = "INFO"


def _parse_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return value.strip().lower() in ("true", "1", "yes")


def load_config() -> StepBridgeConfig:
    """
    Load configuration from environment variables.

    Environment Variables:
        STEPBRIDGE_SECRET_KEY: Shared secret used to sign bridge requests
        STEPBRIDGE_STRICT_AUTHENTICATION_ENABLED: Verify request signatures (true|false)
        STEPBRIDGE_ENV: Deployment environment; strict auth defaults on for production
        STEPBRIDGE_SIGNATURE_TOLERANCE: Max signature age in seconds (default: 300)
        STEPBRIDGE_OUTPUT_VALIDATION: Output validation policy (lenient|strict)
        STEPBRIDGE_BRIDGE_URL: Bridge endpoint called by the worker
        STEPBRIDGE_BRIDGE_RETRIES: Retry limit for bridge requests (default: 3)
        STEPBRIDGE_BRIDGE_TIMEOUT: Bridge request timeout in seconds (default: 30)
        STEPBRIDGE_DEBUG: Enable debug mode (default: false)
        STEPBRIDGE_LOG_LEVEL: Log level (default: INFO)
    """
    strict = _parse_bool(os.getenv("STEPBRIDGE_STRICT_AUTHENTICATION_ENABLED"))
    if strict is None:
        strict = os.getenv("STEPBRIDGE_ENV", "development").lower() == "production"

    security = SecurityConfig(
        secret_key=os.getenv("STEPBRIDGE_SECRET_KEY"),
        strict_authentication=strict,
        signature_tolerance_seconds=int(os.getenv("STEPBRIDGE_SIGNATURE_TOLERANCE", "300")),
    )

    bridge = BridgeConfig(
        url=os.getenv("STEPBRIDGE_BRIDGE_URL"),
        retries_limit=int(os.getenv("STEPBRIDGE_BRIDGE_RETRIES", "3")),
        timeout_seconds=float(os.getenv("STEPBRIDGE_BRIDGE_TIMEOUT", "30")),
    )

    validation_str = os.getenv("STEPBRIDGE_OUTPUT_VALIDATION", "lenient").lower()
    try:
        output_validation = OutputValidation(validation_str)
    except ValueError:
        output_validation = OutputValidation.LENIENT

    return StepBridgeConfig(
        security=security,
        bridge=bridge,
        output_validation=output_validation,
        debug=_parse_bool(os.getenv("STEPBRIDGE_DEBUG", "false")),
        log_level=os.getenv("STEPBRIDGE_LOG_LEVEL", "INFO").upper(),
    )


# Singleton config instance
_config: Optional[StepBridgeConfig] = None


def get_config() -> StepBridgeConfig:
    """Get the global configuration (lazy-loaded singleton)."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    global _config
    _config = None
