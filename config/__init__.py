"""Service configuration."""

from .config import (
    ConfigError,
    NameSecretPair,
    PaymentSettings,
    RawBearerToken,
    Settings,
    parse_facilitator_credential,
)
from .pricing import RoutePrice

__all__ = [
    "ConfigError",
    "NameSecretPair",
    "PaymentSettings",
    "RawBearerToken",
    "RoutePrice",
    "Settings",
    "parse_facilitator_credential",
]
