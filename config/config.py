import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from config.pricing import DEFAULT_ROUTE_PRICES, RoutePrice

SERVICE_NAME = "RyanClaw Research API"
SERVICE_VERSION = "3.0.0"
DEFAULT_FACILITATOR_URL = "https://x402.org/facilitator"
DEFAULT_NETWORK = "base"


class ConfigError(ValueError):
    """Raised when the environment does not describe a runnable service."""


@dataclass(frozen=True)
class RawBearerToken:
    """Facilitator credential that is already a valid bearer token."""

    token: str


@dataclass(frozen=True)
class NameSecretPair:
    """Facilitator API key name and secret used to sign short-lived JWTs."""

    name: str
    secret: str


FacilitatorCredential = RawBearerToken | NameSecretPair


def parse_facilitator_credential(
    raw: str | None, name: str | None = None, secret: str | None = None
) -> FacilitatorCredential | None:
    """
    Resolve the facilitator credential into one of the closed variants.

    Accepted shapes, checked in order:
        - separate name and secret values
        - a JSON object with ``name``/``id`` and ``privateKey``/``secret``
        - ``name:secret``
        - anything else is treated as a ready bearer token

    Returns:
        The credential, or None when nothing is configured
    """
    if name and secret:
        return NameSecretPair(name=name.strip(), secret=_unescape_secret(secret))

    raw = (raw or "").strip()
    if not raw:
        return None

    if raw.startswith("{"):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"FACILITATOR_API_KEY is not valid JSON: {e}") from e
        key_name = data.get("name") or data.get("id")
        key_secret = data.get("privateKey") or data.get("secret")
        if not key_name or not key_secret:
            raise ConfigError("FACILITATOR_API_KEY JSON needs 'name' and 'privateKey'")
        return NameSecretPair(name=key_name, secret=_unescape_secret(key_secret))

    if ":" in raw and "-----BEGIN" not in raw:
        key_name, key_secret = raw.split(":", 1)
        if key_name and key_secret:
            return NameSecretPair(name=key_name, secret=_unescape_secret(key_secret))

    return RawBearerToken(token=raw)


def _unescape_secret(secret: str) -> str:
    # PEM keys pasted into .env files usually carry literal "\n"
    return secret.strip().replace("\\n", "\n")


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str) -> float | None:
    value = (os.getenv(name) or "").strip()
    if not value:
        return None
    try:
        return float(value)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got '{value}'") from e


@dataclass(frozen=True)
class PaymentSettings:
    """Payment gate configuration. Only meaningful when ``enabled`` is True."""

    enabled: bool = False
    pay_to: str | None = None
    network: str = DEFAULT_NETWORK
    asset: str | None = None
    facilitator_url: str = DEFAULT_FACILITATOR_URL
    credential: FacilitatorCredential | None = None
    max_timeout_seconds: int = 60


@dataclass(frozen=True)
class Settings:
    """Immutable service configuration, built once at startup."""

    host: str = "0.0.0.0"
    port: int = 3000
    brave_api_key: str = ""
    upstream_timeout_s: float | None = None
    payment: PaymentSettings = field(default_factory=PaymentSettings)
    route_prices: tuple[RoutePrice, ...] = DEFAULT_ROUTE_PRICES
    service_name: str = SERVICE_NAME
    version: str = SERVICE_VERSION

    @property
    def mode(self) -> str:
        return "paid" if self.payment.enabled else "free"

    def price_for(self, path: str) -> RoutePrice | None:
        for route in self.route_prices:
            if route.path == path:
                return route
        return None

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Settings":
        """
        Build settings from environment variables.

        A ``.env`` file next to the project root (or ``env_file``) is loaded
        first without overriding variables that are already set.

        Raises:
            ConfigError: If the environment is inconsistent
        """
        env_path = Path(env_file) if env_file else Path(__file__).parent.parent / ".env"
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        try:
            port = int(os.getenv("PORT", "3000"))
        except ValueError as e:
            raise ConfigError(f"PORT must be an integer, got '{os.getenv('PORT')}'") from e

        payment = PaymentSettings(
            enabled=_env_bool("PAYMENT_ENABLED"),
            pay_to=(os.getenv("PAYMENT_ADDRESS") or "").strip() or None,
            network=(os.getenv("PAYMENT_NETWORK") or DEFAULT_NETWORK).strip(),
            asset=(os.getenv("PAYMENT_ASSET") or "").strip() or None,
            facilitator_url=(os.getenv("FACILITATOR_URL") or DEFAULT_FACILITATOR_URL)
            .strip()
            .rstrip("/"),
            credential=parse_facilitator_credential(
                os.getenv("FACILITATOR_API_KEY"),
                name=os.getenv("FACILITATOR_KEY_NAME"),
                secret=os.getenv("FACILITATOR_KEY_SECRET"),
            ),
        )

        route_prices = tuple(
            RoutePrice(
                path=route.path,
                price=(os.getenv(route.env_var) or route.price).strip(),
                description=route.description,
                env_var=route.env_var,
            )
            for route in DEFAULT_ROUTE_PRICES
        )

        settings = cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=port,
            brave_api_key=os.getenv("BRAVE_API_KEY", ""),
            upstream_timeout_s=_env_float("UPSTREAM_TIMEOUT_S"),
            payment=payment,
            route_prices=route_prices,
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """
        Check the payment configuration is usable.

        Raises:
            ConfigError: If payments are enabled but cannot be advertised
        """
        for route in self.route_prices:
            try:
                route.atomic_amount()
            except ValueError as e:
                raise ConfigError(str(e)) from e

        if not self.payment.enabled:
            return

        if not self.payment.pay_to:
            raise ConfigError("PAYMENT_ADDRESS is required when PAYMENT_ENABLED=true")

        # Imported here to keep config free of payment imports at module load
        from payments.networks import resolve_asset

        resolve_asset(self.payment.network, self.payment.asset)
